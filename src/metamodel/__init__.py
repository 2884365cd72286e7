#!/usr/bin/env python3
"""
metamodel - Petri net rules engine

Define places, transitions and weighted arcs, compile them into integer
delta vectors, and fire transitions under general, elementary (safety) or
workflow semantics.

    from metamodel import new_model

    def counter(transition, place, role):
        foo = place("foo", 1)
        bar = transition("bar")
        foo.connect(1, bar)

    m = new_model(schema="counter", declaration=counter)
    state = m.initial_vector()
    m.fire(state, "bar").ok   # True, state is now [0]
"""

import logging

from .core import (
    Arc,
    Guard,
    Model,
    Net,
    NetBuilder,
    NetDeclaration,
    NetType,
    Place,
    PlaceNode,
    Position,
    Result,
    Role,
    Transition,
    TransitionNode,
    VERSION,
    Vector,
    loads,
    new_model,
)
from .exceptions import (
    InvalidArcError,
    InvalidDeclarationError,
    MetamodelError,
    UnknownActionError,
    UnknownPlaceError,
    UnknownSchemaError,
    UnknownTransitionError,
    UnsupportedOperationError,
    VersionMismatchError,
)
from .stream import Dispatcher, Event, EventLog, Stream

# Library does not configure handlers by default. Callers may configure logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Model
    "new_model",
    "loads",
    "Model",
    "NetBuilder",
    "PlaceNode",
    "TransitionNode",
    "NetDeclaration",
    "VERSION",

    # Data model
    "Arc",
    "Guard",
    "Net",
    "NetType",
    "Place",
    "Position",
    "Result",
    "Role",
    "Transition",
    "Vector",

    # Stream
    "Stream",
    "Dispatcher",
    "Event",
    "EventLog",

    # Errors
    "MetamodelError",
    "UnknownActionError",
    "UnknownPlaceError",
    "UnknownTransitionError",
    "UnknownSchemaError",
    "InvalidArcError",
    "UnsupportedOperationError",
    "VersionMismatchError",
    "InvalidDeclarationError",
]
