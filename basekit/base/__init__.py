"""
Base模块 - 提供基础功能支持

这个模块包含了basekit的基础组件：
- Base: 基础类，提供类级配置继承、混入、实例事件、日志输出、配置文件等功能
- EventManager: 事件管理器，每个对象各自持有的事件绑定表
- Mixin: 混入能力包，用于给类添加类级成员或实例方法
- OptionsRegistry: 类级配置注册表

需要这些功能的类都应该继承自Base类。
"""

from .Base import Base
from .EventManager import EventManager, Subscription
from .Mixin import Mixin, RESERVED_HOOKS
from .Options import OptionsRegistry, deep_merge, fill_config

__all__ = [
    "Base",
    "EventManager",
    "Subscription",
    "Mixin",
    "RESERVED_HOOKS",
    "OptionsRegistry",
    "deep_merge",
    "fill_config",
]
