#!/usr/bin/env python3
"""
Metamodel Event Stream

Applies firings to keyed model/state pairs in a single total order, records
them in an append-only history, and routes outcomes to handlers:

    s = Stream([new_model(schema="game", declaration=tictactoe)])
    s.dispatcher.on("X11", lambda stream, evt: print(evt.role, "moved"))
    s.dispatcher.on_fail(lambda stream, evt: print("illegal", evt.action))
    s.dispatch(Event(schema="game", action="X11"))

Handlers run synchronously inside ``dispatch``. A successful action with no
handler registered is a silent no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional

from .common.timebase import Timebase, WallClock
from .core.model import Model
from .core.specs import Result, Vector
from .exceptions import UnknownSchemaError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    """A request to fire ``action`` on the model registered as ``schema``"""
    schema: str
    action: str
    multiple: int = 1
    payload: Any = None
    role: Optional[str] = None  # filled in from the transition on dispatch


@dataclass(frozen=True)
class EventLog:
    seq: int
    event: Event
    timestamp: float


Handler = Callable[["Stream", Event], None]


class Dispatcher:
    """Maps action labels to handlers, plus one failure handler"""

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}
        self._fail_handler: Optional[Handler] = None

    def on(self, action: str, handler: Handler) -> None:
        self._handlers[action] = handler

    def off(self, action: str) -> None:
        self._handlers.pop(action, None)

    def on_fail(self, handler: Handler) -> None:
        self._fail_handler = handler

    def get_handler(self, action: str) -> Optional[Handler]:
        return self._handlers.get(action)

    def fail(self, stream: "Stream", event: Event) -> None:
        if self._fail_handler is not None:
            self._fail_handler(stream, event)


class Stream:
    """Sequenced dispatcher over one or more models keyed by schema"""

    def __init__(self, models: Iterable[Model], timebase: Optional[Timebase] = None):
        self.models: Dict[str, Model] = {m.schema: m for m in models}
        self.state: Dict[str, Vector] = {}
        self.history: List[EventLog] = []
        self.seq = 0
        self.timebase = timebase or WallClock()
        self.dispatcher = Dispatcher()

    def get_state(self, schema: str) -> Vector:
        """Stored state for schema, initialised on first use"""
        if schema not in self.state:
            self.state[schema] = self._model(schema).initial_vector()
        return self.state[schema]

    def _model(self, schema: str) -> Model:
        try:
            return self.models[schema]
        except KeyError:
            raise UnknownSchemaError(f"model not found: {schema}") from None

    def dispatch(self, event: Event) -> Result:
        model = self._model(event.schema)
        state = self.get_state(event.schema)

        def commit(res: Result):
            self.state[event.schema] = state
            self.history.append(EventLog(self.seq, event, self.timebase.now()))
            self.seq += 1
            logger.debug("[stream] #%d %s.%s committed", self.seq - 1, event.schema, event.action)
            handler = self.dispatcher.get_handler(event.action)
            if handler is not None:
                handler(self, replace(event, role=res.role))

        def reject(res: Result):
            logger.info(
                "[stream] %s.%s rejected inhibited=%s overflow=%s underflow=%s",
                event.schema, event.action, res.inhibited, res.overflow, res.underflow,
            )
            self.dispatcher.fail(self, replace(event, role=res.role))

        return model.fire(state, event.action, event.multiple, commit, reject)

    def restart(self) -> None:
        """Clear history and sequence, rewind the timebase and reset every model to its initial state"""
        self.seq = 0
        self.history = []
        self.state = {schema: m.initial_vector() for schema, m in self.models.items()}
        self.timebase.reset()
