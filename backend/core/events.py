"""
事件总线系统
写操作成功后由路由层显式发布，不挂在模型的保存/删除钩子上
"""

from typing import Callable, Dict, List, Any, Optional, Set
from dataclasses import dataclass, field
from datetime import datetime, timezone
import asyncio
import logging

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """事件数据结构"""
    name: str
    source: str  # 发送模块ID
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# 事件处理器类型
EventHandler = Callable[[Event], Any]


class EventBus:
    """事件总线"""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._history: List[Event] = []
        self._max_history = 1000
        # 持有未完成的发布任务，避免被回收
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, event_name: str, handler: EventHandler):
        """订阅事件"""
        handlers = self._handlers.setdefault(event_name, [])
        if handler not in handlers:
            handlers.append(handler)
        logger.debug(f"订阅事件: {event_name}")

    def unsubscribe(self, event_name: str, handler: EventHandler):
        """取消订阅"""
        if handler in self._handlers.get(event_name, []):
            self._handlers[event_name].remove(handler)
            logger.debug(f"取消订阅: {event_name}")

    def _remember(self, event: Event):
        self._history.append(event)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

    async def publish(self, event: Event):
        """发布事件"""
        self._remember(event)
        logger.debug(f"发布事件: {event.name} 来自 {event.source}")

        for handler in list(self._handlers.get(event.name, [])):
            try:
                if asyncio.iscoroutinefunction(handler):
                    await handler(event)
                else:
                    handler(event)
            except Exception as e:
                logger.error(f"事件处理错误 {event.name}: {e}")

    def emit(self, name: str, source: str, data: Optional[Dict[str, Any]] = None):
        """便捷发布方法（同步包装）"""
        event = Event(name=name, source=source, data=data or {})
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # 没有运行中的循环，仅记录历史
            self._remember(event)
            logger.debug(f"EventBus.emit: 没有运行中的循环，仅记录历史: {name}")
            return
        task = loop.create_task(self.publish(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def get_history(self, event_name: Optional[str] = None, limit: int = 100) -> List[Event]:
        """获取事件历史"""
        if event_name:
            filtered = [e for e in self._history if e.name == event_name]
        else:
            filtered = self._history
        return filtered[-limit:]

    def clear(self):
        """清空订阅与历史"""
        self._handlers.clear()
        self._history.clear()


# 全局事件总线实例
event_bus = EventBus()


class Events:
    """系统事件名称"""
    # 系统事件
    SYSTEM_STARTUP = "system.startup"
    SYSTEM_SHUTDOWN = "system.shutdown"

    # 内容事件
    CONTENT_CREATED = "content.created"
    CONTENT_UPDATED = "content.updated"
    CONTENT_DELETED = "content.deleted"
