import types
from collections.abc import Mapping
from typing import Dict, Any, Optional, Callable, Union


# 普通字典形式的混入中，这两个键是生命周期钩子而不是成员
RESERVED_HOOKS = ("included", "extended")


class Mixin:
    """
    混入能力包

    members 为要复制的成员（名称 -> 函数或值），on_included / on_extended 为
    可选钩子，在成员复制完成后以目标类为参数调用一次。钩子单独存放，
    因此成员里可以有名为 included / extended 的普通方法。
    """

    def __init__(self,
                 members: Optional[Mapping] = None,
                 on_included: Optional[Callable[[type], Any]] = None,
                 on_extended: Optional[Callable[[type], Any]] = None):
        self.members: Dict[str, Any] = dict(members or {})
        self.on_included = on_included
        self.on_extended = on_extended

    @classmethod
    def from_mapping(cls, payload: Mapping) -> "Mixin":
        """从普通字典构建，included / extended 键视为钩子"""
        members = {k: v for k, v in payload.items() if k not in RESERVED_HOOKS}
        return cls(members,
                   on_included=payload.get("included"),
                   on_extended=payload.get("extended"))

    def __repr__(self) -> str:
        return f"Mixin(members={sorted(self.members)})"


def as_mixin(payload: Union[Mixin, Mapping]) -> Mixin:
    """把混入参数统一转换为 Mixin"""
    if isinstance(payload, Mixin):
        return payload
    if isinstance(payload, Mapping):
        return Mixin.from_mapping(payload)
    raise TypeError(f"混入必须是 Mixin 或字典，收到: {type(payload).__name__}")


_MISSING = object()


class MixinMember:
    """
    混入成员描述符

    类级一侧（extend）只能通过类访问，函数以类为接收者绑定；实例级一侧
    （include）只能通过实例访问。从另一条路径访问时先用定义类原有的同名属性，
    再沿 MRO 查找之后的类，两侧互不遮挡。
    """

    def __init__(self, name: str, owner: type, shadowed: Any = _MISSING):
        self.name = name
        self.owner = owner
        # 被替换掉的定义类自身属性，另一条路径优先使用它
        self.shadowed = shadowed
        self.class_value = _MISSING
        self.instance_value = _MISSING

    def __get__(self, instance, owner):
        if instance is None:
            if self.class_value is _MISSING:
                return self._inherited(None, owner)
            value = self.class_value
            if isinstance(value, (classmethod, staticmethod)):
                return value.__get__(None, owner)
            if isinstance(value, types.FunctionType):
                return types.MethodType(value, owner)
            return value

        if self.instance_value is _MISSING:
            return self._inherited(instance, owner)
        return self._bind(self.instance_value, instance, owner)

    def _inherited(self, instance, owner):
        """查找被遮挡的同名成员：先看定义类自身原有的属性，再看 MRO 中之后的类"""
        if self.shadowed is not _MISSING:
            return self._bind(self.shadowed, instance, owner)

        mro = owner.__mro__
        start = mro.index(self.owner) + 1 if self.owner in mro else 0
        for klass in mro[start:]:
            if self.name in klass.__dict__:
                return self._bind(klass.__dict__[self.name], instance, owner)

        if instance is None:
            raise AttributeError(
                f"类 '{owner.__name__}' 没有属性 '{self.name}'（实例级混入成员）")
        raise AttributeError(
            f"'{owner.__name__}' 对象没有属性 '{self.name}'（类级混入成员）")

    @staticmethod
    def _bind(value, instance, owner):
        if hasattr(value, "__get__"):
            return value.__get__(instance, owner)
        return value


def _member_slot(target: type, name: str) -> MixinMember:
    """取得类自身的混入成员描述符，没有时新建"""
    member = target.__dict__.get(name, _MISSING)
    if not isinstance(member, MixinMember):
        member = MixinMember(name, target, shadowed=member)
        setattr(target, name, member)
    return member


def apply_extend(target: type, payload: Union[Mixin, Mapping]) -> type:
    """
    把混入成员复制到类对象本身

    Args:
        target: 目标类
        payload: Mixin 或字典

    Returns:
        type: 目标类，便于链式调用
    """
    mixin = as_mixin(payload)
    for name, value in mixin.members.items():
        _member_slot(target, name).class_value = value

    if mixin.on_extended is not None:
        mixin.on_extended(target)
    return target


def apply_include(target: type, payload: Union[Mixin, Mapping]) -> type:
    """
    把混入成员复制到类的实例方法表，已有实例与新实例都能使用

    Args:
        target: 目标类
        payload: Mixin 或字典

    Returns:
        type: 目标类，便于链式调用
    """
    mixin = as_mixin(payload)
    for name, value in mixin.members.items():
        _member_slot(target, name).instance_value = value

    if mixin.on_included is not None:
        mixin.on_included(target)
    return target
