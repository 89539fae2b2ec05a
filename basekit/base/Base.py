import os
import threading
import traceback
import logging
from collections.abc import Mapping
from typing import Dict, Any, Optional, Callable, List, Union

try:
    import rapidjson as json
except ImportError:
    import json

from .EventManager import EventManager, Subscription
from .Mixin import Mixin, apply_extend, apply_include
from .Options import DEPENDENCIES_KEY, OptionsRegistry, deep_merge, fill_config


class Base:
    """
    基础类 - 提供类级配置继承、混入、实例事件、日志输出、配置文件等基础功能

    子类在类体中声明 options 字典即可继承并覆盖父类的默认配置:

        class Widget(Base):
            options = {"size": 1, "style": {"color": "red"}}

        class Button(Widget):
            options = {"style": {"border": 1}}

    子类的构造函数如果接收自己的参数，必须把 options 转交给 super().__init__，
    否则类级默认配置会丢失。
    """

    # 配置文件路径
    CONFIG_PATH = os.path.join(".", "config", "config.json")

    # 类线程锁
    CONFIG_FILE_LOCK = threading.Lock()

    # 日志格式
    LOG_FORMAT = "[%(asctime)s | %(name)s | %(levelname)s] %(message)s"

    # 实例配置中需要注入为属性的依赖项键名
    DEPENDENCIES_KEY = DEPENDENCIES_KEY

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        # 类体中声明的 options 转存到注册表，类属性本身移除
        declared = cls.__dict__.get("options")
        if isinstance(declared, Mapping):
            delattr(cls, "options")
            cls.declare_options(declared)

    def __init__(self, options: Optional[Mapping] = None) -> None:
        super().__init__()

        # 事件绑定表
        self._events = EventManager()

        # 初始化日志系统
        self._init_logging()

        # 实例配置 = 类级配置 + 调用方覆盖项
        self.options: Dict[str, Any] = deep_merge(self.class_options(), options)

        # 依赖注入放在最后，注入的 logger 会替换默认日志器
        self._inject_dependencies()

    def _init_logging(self):
        """初始化日志系统"""
        # 获取类名作为日志名称
        logger_name = self.__class__.__name__
        self.logger = logging.getLogger(logger_name)

        # 如果日志处理器已配置，则跳过
        if self.logger.handlers:
            return

        self.logger.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(
            logging.DEBUG if self.is_debug() else logging.INFO)
        console_handler.setFormatter(logging.Formatter(Base.LOG_FORMAT))

        self.logger.addHandler(console_handler)

    def _inject_dependencies(self) -> None:
        """把 options 中的依赖项设置为同名实例属性（引用而非复制）"""
        dependencies = self.options.get(Base.DEPENDENCIES_KEY)
        if not isinstance(dependencies, Mapping):
            return

        for name, value in dependencies.items():
            setattr(self, name, value)

    # 类级配置
    @classmethod
    def declare_options(cls, options: Mapping) -> None:
        """为当前类声明配置，与最近祖先的配置深度合并"""
        OptionsRegistry.get_singleton().declare(cls, options)
        logging.getLogger(cls.__name__).debug(f"声明类配置: {list(options)}")

    @classmethod
    def class_options(cls) -> Dict[str, Any]:
        """获取类的已解析配置副本"""
        return OptionsRegistry.get_singleton().resolve(cls)

    # 混入
    @classmethod
    def extend(cls, payload: Union[Mixin, Mapping]) -> type:
        """把混入成员添加为类级成员"""
        apply_extend(cls, payload)
        logging.getLogger(cls.__name__).debug("已应用类级混入")
        return cls

    @classmethod
    def include(cls, payload: Union[Mixin, Mapping]) -> type:
        """把混入成员添加为实例方法"""
        apply_include(cls, payload)
        logging.getLogger(cls.__name__).debug("已应用实例级混入")
        return cls

    # 事件处理
    def bind(self, event: str, callback: Callable) -> Subscription:
        """绑定事件回调"""
        return self._events.subscribe(event, callback)

    def on(self, event: str, callback: Callable) -> Subscription:
        """bind 的别名"""
        return self.bind(event, callback)

    def one(self, event: str, callback: Callable) -> Subscription:
        """绑定只执行一次的事件回调"""
        return self._events.subscribe(event, callback, once=True)

    def unbind(self, event: str,
               callback: Optional[Union[Subscription, Callable]] = None) -> None:
        """解绑事件回调，省略 callback 时解绑该事件的全部回调"""
        self._events.unsubscribe(event, callback)

    def unbind_all(self) -> None:
        """解绑全部事件"""
        self._events.clear()

    def trigger(self, event: str, *params: Any) -> None:
        """同步触发事件，回调中的异常会直接抛给调用方"""
        called = self._events.emit(event, *params)
        self.debug(f"事件 {event} 已派发给 {called} 个回调")

    def listeners(self, event: str) -> List[Callable]:
        """获取事件当前绑定的回调"""
        return self._events.listeners(event)

    # 检查是否处于调试模式
    def is_debug(self) -> bool:
        """检查是否为调试模式"""
        if getattr(Base, "_is_debug", None) is None:
            debug_path = os.path.join(".", "debug.txt")
            Base._is_debug = os.path.isfile(debug_path)
        return Base._is_debug

    # 重置调试模式检查状态
    def reset_debug(self) -> None:
        """重置调试模式状态"""
        Base._is_debug = None

    # 日志方法
    def print(self, msg: str) -> None:
        """打印消息（信息级别）"""
        self.logger.info(msg)

    def debug(self, msg: str, e: Exception = None) -> None:
        """调试日志"""
        if not self.is_debug():
            return

        if e is None:
            self.logger.debug(msg)
        else:
            self.logger.debug(
                f"{msg}\n{''.join(traceback.format_exception(None, e, e.__traceback__))}")

    def info(self, msg: str) -> None:
        """信息日志"""
        self.logger.info(msg)

    def error(self, msg: str, e: Exception = None) -> None:
        """错误日志"""
        if e is None:
            self.logger.error(msg)
        else:
            self.logger.error(
                f"{msg}\n{''.join(traceback.format_exception(None, e, e.__traceback__))}")

    def warning(self, msg: str) -> None:
        """警告日志"""
        self.logger.warning(msg)

    # 配置文件操作
    @classmethod
    def load_config(cls, path: Optional[str] = None) -> dict:
        """载入配置文件"""
        path = path or cls.CONFIG_PATH
        logger = logging.getLogger(cls.__name__)
        config = {}

        with Base.CONFIG_FILE_LOCK:
            if os.path.exists(path):
                try:
                    with open(path, "r", encoding="utf-8") as reader:
                        config = json.load(reader)
                except Exception as e:
                    logger.error(f"读取配置文件失败: {e}")
            else:
                logger.debug("配置文件不存在，将使用默认配置")

        if not isinstance(config, dict):
            logger.error(f"配置文件内容不是对象: {path}")
            return {}
        return config

    @classmethod
    def save_config(cls, new: dict, path: Optional[str] = None) -> dict:
        """保存配置文件，new 的顶层键覆盖已有值"""
        path = path or cls.CONFIG_PATH
        logger = logging.getLogger(cls.__name__)

        # 创建配置目录
        config_dir = os.path.dirname(path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)

        old = cls.load_config(path)

        # 对比新旧数据是否一致，一致则跳过后续步骤
        if all(k in old and old[k] == v for k, v in new.items()):
            return old

        # 更新配置数据
        for k, v in new.items():
            old[k] = v

        # 写入配置文件
        with Base.CONFIG_FILE_LOCK:
            try:
                with open(path, "w", encoding="utf-8") as writer:
                    writer.write(json.dumps(old, indent=4, ensure_ascii=False))
            except Exception as e:
                logger.error(f"保存配置文件失败: {e}")

        return old

    @classmethod
    def config_section(cls, section: Optional[str] = None,
                       path: Optional[str] = None) -> dict:
        """读取配置文件中属于某个类的小节，默认小节名为类名"""
        section_config = cls.load_config(path).get(section or cls.__name__, {})
        if not isinstance(section_config, dict):
            logging.getLogger(cls.__name__).warning(
                f"配置小节 {section or cls.__name__} 不是对象，已忽略")
            return {}
        return section_config

    def load_config_from_default(self, section: Optional[str] = None,
                                 path: Optional[str] = None) -> dict:
        """用类级默认配置补全配置文件中的小节"""
        # 1. 加载已有配置
        config = self.config_section(section, path)

        # 2. 合并默认配置
        config = fill_config(old=config, new=self.class_options())

        # 3. 返回合并结果
        return config

    @classmethod
    def from_config(cls, options: Optional[Mapping] = None,
                    section: Optional[str] = None,
                    config_path: Optional[str] = None) -> "Base":
        """
        用配置文件中的小节作为覆盖项创建实例

        覆盖项以关键字参数 options 传给构造函数，子类构造函数的其余参数需有默认值。

        Args:
            options: 显式覆盖项，优先于配置文件
            section: 配置小节名，默认为类名
            config_path: 配置文件路径，默认为 CONFIG_PATH

        Returns:
            实例
        """
        overrides = deep_merge(cls.config_section(section, config_path), options)
        return cls(options=overrides)
