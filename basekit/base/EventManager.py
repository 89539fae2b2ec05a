import threading
from typing import Dict, List, Callable, Any, Optional, Union


class Subscription:
    """事件订阅句柄"""

    __slots__ = ("event", "callback", "once", "active")

    def __init__(self, event: str, callback: Callable, once: bool = False):
        self.event = event
        self.callback = callback
        self.once = once
        # 被取消后置为 False，正在进行的派发会跳过它
        self.active = True

    def matches(self, target: Union["Subscription", Callable]) -> bool:
        """按句柄或按回调对象身份匹配"""
        return self is target or self.callback is target

    def __repr__(self) -> str:
        flag = " once" if self.once else ""
        return f"<Subscription {self.event!r}{flag} {self.callback!r}>"


class EventManager:
    """事件管理器 - 每个对象持有一份，事件名 -> 按注册顺序排列的订阅"""

    def __init__(self):
        # 事件回调列表
        self.event_callbacks: Dict[str, List[Subscription]] = {}
        # 线程锁
        self._event_lock = threading.RLock()

    def subscribe(self, event: str, callback: Callable, once: bool = False) -> Subscription:
        """订阅事件，同一回调可重复注册"""
        subscription = Subscription(event, callback, once)
        with self._event_lock:
            self.event_callbacks.setdefault(event, []).append(subscription)
        return subscription

    def unsubscribe(self, event: str,
                    callback: Optional[Union[Subscription, Callable]] = None) -> int:
        """
        取消订阅事件

        Args:
            event: 事件名
            callback: 回调或订阅句柄，省略时移除该事件的全部订阅

        Returns:
            int: 被移除的订阅数量
        """
        with self._event_lock:
            subscriptions = self.event_callbacks.get(event)
            if subscriptions is None:
                return 0

            if callback is None:
                removed = subscriptions
                remaining = []
            else:
                removed = [s for s in subscriptions if s.matches(callback)]
                remaining = [s for s in subscriptions if not s.matches(callback)]

            if remaining:
                self.event_callbacks[event] = remaining
            else:
                del self.event_callbacks[event]

        for subscription in removed:
            subscription.active = False
        return len(removed)

    def clear(self) -> None:
        """清空全部订阅"""
        with self._event_lock:
            subscriptions = [s for subs in self.event_callbacks.values() for s in subs]
            self.event_callbacks = {}

        for subscription in subscriptions:
            subscription.active = False

    def emit(self, event: str, *params: Any) -> int:
        """
        触发事件

        按注册顺序同步调用派发开始时已注册的回调；派发途中被取消的订阅跳过。
        回调抛出的异常直接向上传播，其后的回调不再执行。

        Returns:
            int: 实际调用的回调数量
        """
        with self._event_lock:
            snapshot = list(self.event_callbacks.get(event, ()))

        called = 0
        for subscription in snapshot:
            if not subscription.active:
                continue
            if subscription.once:
                # 先移除再调用，回调内再次触发也不会重复执行
                self.unsubscribe(event, subscription)
            subscription.callback(*params)
            called += 1
        return called

    def listeners(self, event: str) -> List[Callable]:
        """获取事件当前的回调列表（按派发顺序）"""
        with self._event_lock:
            return [s.callback for s in self.event_callbacks.get(event, ())]

    def events(self) -> List[str]:
        """获取当前有订阅的事件名"""
        with self._event_lock:
            return list(self.event_callbacks)
