import logging
from core.events import event_bus, Events, Event

logger = logging.getLogger(__name__)

_ACTIONS = {
    Events.CONTENT_CREATED: "创建",
    Events.CONTENT_UPDATED: "更新",
    Events.CONTENT_DELETED: "删除",
}


async def on_content_changed(event: Event):
    """
    记录内容变更日志
    """
    action = _ACTIONS.get(event.name, event.name)
    logger.info(
        f"[{event.source}] {action} {event.data.get('type', '内容')} "
        f"id={event.data.get('id')} slug={event.data.get('slug', '-')}"
    )


def register_event_handlers():
    """注册所有事件处理器"""
    for name in _ACTIONS:
        event_bus.subscribe(name, on_content_changed)
    logger.info("已注册系统事件处理器")
