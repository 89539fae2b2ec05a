"""
basekit - 面向对象的基础工具层

为应用中的类提供以下功能：
- 可继承、可合并的类级配置（options）
- 每个实例独立的事件发布/订阅（bind / one / unbind / trigger）
- 不依赖多重继承的混入（extend / include）
- 统一的日志输出与 JSON 配置文件读写

模块结构:
- base: 基础功能模块（配置、事件、混入、日志等）
"""

__version__ = "0.1.0"
__author__ = "basekit Team"
__description__ = "Inheritable options, per-instance events and mixins for Python classes"

# 导出主要类和函数
from .base.Base import Base
from .base.EventManager import EventManager, Subscription
from .base.Mixin import Mixin
from .base.Options import OptionsRegistry, deep_merge, fill_config

__all__ = [
    "Base",
    "EventManager",
    "Subscription",
    "Mixin",
    "OptionsRegistry",
    "deep_merge",
    "fill_config",
]
