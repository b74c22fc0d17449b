# =============================================================================
# File: tradebot/core/event_bridge.py
# Description: Re-publishes underlying client events on the bot's own surface
# =============================================================================

"""
EventBridge

Subscribes to notification sources (community client, trade offer manager,
auth adapter) and re-emits each event under a stable outward name.

Architecture:
    source.emit("newOffer", offer) -> EventBridge -> target.emit("newOffer", offer)

Event maps:
    {
        "newOffer": None,                        # same name, same payload
        "sentOfferChanged": "offerChanged",      # renamed
        "chatMessage": echo_chat,                # transform, same name
        "offerList": EventRoute("offers", fn),   # renamed and transformed
    }

One attachment per source instance. Attaching an already attached source
is a no-op, so repeated logins on the same instances never duplicate
listeners. New instances (after logout) need a fresh attach.

The bridge is a 1:1 pass-through: no batching, reordering or filtering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from tradebot.config.logging_config import get_logger
from tradebot.core.event_emitter import EventEmitter

log = get_logger("tradebot.core.event_bridge")

Transform = Callable[..., Any]


@dataclass(frozen=True)
class EventRoute:
    """Outward name (None = same name) and optional payload transform"""
    outward: Optional[str] = None
    transform: Optional[Transform] = None


RouteSpec = Union[None, str, Transform, EventRoute]
EventMap = Mapping[str, Union[RouteSpec, List[RouteSpec]]]


def normalize_event_map(event_map: EventMap) -> List[Tuple[str, EventRoute]]:
    """
    Flatten an event map into (source_event, route) pairs.

    A list value fans one source event out to several outward events, in
    list order.
    """
    routes: List[Tuple[str, EventRoute]] = []
    for source_event, spec in event_map.items():
        specs = spec if isinstance(spec, list) else [spec]
        for item in specs:
            if item is None:
                route = EventRoute()
            elif isinstance(item, EventRoute):
                route = item
            elif isinstance(item, str):
                route = EventRoute(outward=item)
            elif callable(item):
                route = EventRoute(transform=item)
            else:
                raise TypeError(f"Unsupported route for '{source_event}': {item!r}")
            routes.append((source_event, route))
    return routes


@dataclass
class Attachment:
    """Listeners registered on one source instance"""
    source: Any
    listeners: List[Tuple[str, Callable[..., Any]]] = field(default_factory=list)


class EventBridge:
    """Attaches source events to a target EventEmitter"""

    def __init__(self, target: EventEmitter):
        self._target = target
        self._attachments: Dict[int, Attachment] = {}

    def attach(self, source: Any, event_map: EventMap) -> bool:
        """
        Subscribe to ``source`` according to ``event_map``.

        Returns:
            False if ``source`` was already attached (nothing added)
        """
        if source is None:
            return False
        if self.is_attached(source):
            log.debug(f"{type(source).__name__} already attached - skipping")
            return False

        attachment = Attachment(source=source)
        for source_event, route in normalize_event_map(event_map):
            listener = self._make_listener(source_event, route)
            source.on(source_event, listener)
            attachment.listeners.append((source_event, listener))

        self._attachments[id(source)] = attachment
        log.debug(f"Attached {len(attachment.listeners)} listener(s) to {type(source).__name__}")
        return True

    def _make_listener(self, source_event: str, route: EventRoute) -> Callable[..., None]:
        outward = route.outward or source_event
        transform = route.transform
        target = self._target

        def relay(*payload: Any) -> None:
            if transform is not None:
                transformed = transform(*payload)
                payload = transformed if isinstance(transformed, tuple) else (transformed,)
            target.emit(outward, *payload)

        relay.__name__ = f"relay_{source_event}_to_{outward}"
        return relay

    def detach(self, source: Any) -> bool:
        attachment = self._attachments.pop(id(source), None)
        if attachment is None:
            return False
        for source_event, listener in attachment.listeners:
            _remove_listener(source, source_event, listener)
        log.debug(f"Detached {len(attachment.listeners)} listener(s) from {type(source).__name__}")
        return True

    def detach_all(self) -> int:
        """Detach every source; returns the number of sources detached."""
        sources = [attachment.source for attachment in self._attachments.values()]
        for source in sources:
            self.detach(source)
        return len(sources)

    def is_attached(self, source: Any) -> bool:
        attachment = self._attachments.get(id(source))
        return attachment is not None and attachment.source is source

    def attached_sources(self) -> List[Any]:
        return [attachment.source for attachment in self._attachments.values()]


def _remove_listener(source: Any, event: str, listener: Callable[..., Any]) -> None:
    remover = getattr(source, "off", None) or getattr(source, "remove_listener", None)
    if remover is None:
        log.warning(f"{type(source).__name__} cannot remove listeners - '{event}' stays attached")
        return
    remover(event, listener)
