import threading
import weakref
from collections.abc import Mapping
from typing import Dict, Any, Optional


# 依赖项小节只合并一层，值保持调用方传入的原引用
DEPENDENCIES_KEY = "dependencies"


def _copy_value(value: Any) -> Any:
    """复制容器值 - 字典与列表递归复制，其余对象保持原引用"""
    if isinstance(value, Mapping):
        return {k: _copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy_value(v) for v in value]
    return value


def _merge_dependencies(current: Any, incoming: Any) -> Any:
    if not isinstance(incoming, Mapping):
        return _copy_value(incoming)
    merged = dict(current) if isinstance(current, Mapping) else {}
    merged.update(incoming)
    return merged


def _merge_into(target: dict, source: Mapping, top: bool = True) -> dict:
    for k, v in source.items():
        if top and k == DEPENDENCIES_KEY:
            target[k] = _merge_dependencies(target.get(k), v)
        elif isinstance(v, Mapping) and isinstance(target.get(k), dict):
            # 递归合并子字典
            _merge_into(target[k], v, top=False)
        else:
            target[k] = _copy_value(v)
    return target


def deep_merge(*sources: Optional[Mapping]) -> Dict[str, Any]:
    """
    深度合并多个字典，后面的覆盖前面的

    嵌套字典按键逐个合并，其余值整体替换。结果是全新的字典，
    不与任何输入共享字典或列表；顶层 dependencies 小节例外，只合并一层，
    其中的值无论类型都保持原引用。

    Args:
        sources: 待合并的字典，None 会被忽略

    Returns:
        dict: 合并结果
    """
    result: Dict[str, Any] = {}
    for source in sources:
        if source is None:
            continue
        if not isinstance(source, Mapping):
            raise TypeError(f"只能合并字典类型的配置，收到: {type(source).__name__}")
        _merge_into(result, source)
    return result


def fill_config(old: dict, new: Mapping, top: bool = True) -> dict:
    """用默认值补全配置 - old 中缺失的键从 new 取，已有的值保留"""
    for k, v in new.items():
        if top and k == DEPENDENCIES_KEY:
            if k not in old:
                old[k] = _merge_dependencies(None, v)
            elif isinstance(old[k], dict) and isinstance(v, Mapping):
                for name, value in v.items():
                    old[k].setdefault(name, value)
        elif isinstance(v, Mapping) and k in old and isinstance(old[k], dict):
            # 递归补全子字典
            old[k] = fill_config(old[k], v, top=False)
        elif k not in old:
            old[k] = _copy_value(v)
    return old


class OptionsRegistry:
    """类级配置注册表 - 以类对象为键保存声明时即已合并好的配置记录"""

    _singleton = None
    _lock = threading.RLock()

    def __init__(self):
        # 类 -> 配置记录，类被回收时记录随之消失
        self._records: "weakref.WeakKeyDictionary[type, Dict[str, Any]]" = weakref.WeakKeyDictionary()
        self._records_lock = threading.RLock()

    @classmethod
    def get_singleton(cls) -> "OptionsRegistry":
        """获取单例"""
        with cls._lock:
            if cls._singleton is None:
                cls._singleton = OptionsRegistry()
            return cls._singleton

    def owner_of(self, klass: type, include_self: bool = True) -> Optional[type]:
        """沿 MRO 查找最近一个声明过配置的类，include_self 为 False 时只看祖先"""
        mro = klass.__mro__ if include_self else klass.__mro__[1:]
        with self._records_lock:
            for candidate in mro:
                if candidate in self._records:
                    return candidate
        return None

    def declare(self, klass: type, overrides: Mapping) -> None:
        """
        为类声明配置

        以最近的已声明祖先为底深度合并覆盖项，结果只保存在该类上，
        兄弟类与父类不受影响。同一个类再次声明时替换自己先前的记录。

        Args:
            klass: 声明配置的类
            overrides: 本次声明的配置项
        """
        if not isinstance(overrides, Mapping):
            raise TypeError(f"配置声明必须是字典，收到: {type(overrides).__name__}")

        with self._records_lock:
            owner = self.owner_of(klass, include_self=False)
            base = self._records[owner] if owner is not None else None
            self._records[klass] = deep_merge(base, overrides)

    def resolve(self, klass: type) -> Dict[str, Any]:
        """获取类的已解析配置副本，没有任何声明时返回空字典"""
        with self._records_lock:
            owner = self.owner_of(klass)
            if owner is None:
                return {}
            return deep_merge(self._records[owner])

    def has_own(self, klass: type) -> bool:
        """类自身是否声明过配置"""
        with self._records_lock:
            return klass in self._records
