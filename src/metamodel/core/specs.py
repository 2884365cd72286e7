#!/usr/bin/env python3
"""
Metamodel - Specification Layer

Core data structures for a Petri net: places, transitions, arcs, guards and
the Result of firing. Everything else (builder, indexer, firing engine,
editor) operates on these.

Vectors are plain lists of ints with one slot per place, indexed by
``Place.offset``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from ..exceptions import (
    UnknownPlaceError,
    UnknownTransitionError,
    UnsupportedOperationError,
)


Vector = List[int]

DEFAULT_ROLE = "default"


class NetType(str, Enum):
    """Selects validation and commit rules for a net"""
    GENERAL = "general"
    ELEMENTARY = "elementary"
    WORKFLOW = "workflow"

    @classmethod
    def _missing_(cls, value):
        # Declarations written by older tooling use "petriNet"
        if value == "petriNet":
            return cls.GENERAL
        return None


@dataclass
class Position:
    """Layout metadata; stored but never interpreted by the core"""
    x: float = 0
    y: float = 0
    z: float = 0


@dataclass
class Role:
    """Groups transitions by actor/permission"""
    label: str


@dataclass
class Place:
    """A labeled token counter"""
    label: str
    offset: int
    initial: int = 0
    capacity: int = 0  # 0 means unbounded
    position: Position = field(default_factory=Position)


@dataclass
class Guard:
    """Inhibitor predicate on a single place.

    ``delta`` has one non-zero slot (``-threshold``) at the inspected place's
    offset. A standard guard blocks while the place holds at least the
    threshold; an inverted guard blocks until it does.
    """
    label: str
    delta: Vector
    inverted: bool = False

    @property
    def threshold(self) -> int:
        return -sum(self.delta)


@dataclass
class Transition:
    """A labeled operation with a fixed signed effect per place"""
    label: str
    role: Role
    position: Position = field(default_factory=Position)
    delta: Vector = field(default_factory=list)
    guards: Dict[str, Guard] = field(default_factory=dict)
    allow_reentry: bool = False


Node = Union[Place, Transition]


@dataclass
class Arc:
    """Edge between a place and a transition.

    Arcs reference, never own, their endpoints. The dense delta/guard index on
    each transition is authoritative at runtime; arcs are the authoring view.
    """
    source: Node
    target: Node
    weight: int = 1
    inhibit: bool = False
    inverted: bool = False
    reentry: bool = False
    offset: int = 0

    @property
    def place(self) -> Optional[Place]:
        if isinstance(self.source, Place):
            return self.source
        if isinstance(self.target, Place):
            return self.target
        return None

    @property
    def transition(self) -> Optional[Transition]:
        if isinstance(self.source, Transition):
            return self.source
        if isinstance(self.target, Transition):
            return self.target
        return None

    @property
    def is_production(self) -> bool:
        return isinstance(self.source, Transition) and isinstance(self.target, Place)

    @property
    def is_consumption(self) -> bool:
        return isinstance(self.source, Place) and isinstance(self.target, Transition)

    def __repr__(self):
        kind = "reentry" if self.reentry else "inhibit" if self.inhibit else "arc"
        return f"Arc[{self.offset}]({self.source.label} -{kind}:{self.weight}-> {self.target.label})"


@dataclass
class Result:
    """Outcome of (test-)firing a transition"""
    out: Vector
    ok: bool
    role: str
    inhibited: bool = False
    overflow: bool = False
    underflow: bool = False


@dataclass
class Net:
    """Complete Petri net: entity maps, arc list and net type"""
    schema: str = ""
    type: NetType = NetType.GENERAL
    roles: Dict[str, Role] = field(default_factory=dict)
    places: Dict[str, Place] = field(default_factory=dict)
    transitions: Dict[str, Transition] = field(default_factory=dict)
    arcs: List[Arc] = field(default_factory=list)

    def empty_vector(self) -> Vector:
        return [0] * len(self.places)

    def initial_vector(self) -> Vector:
        v = self.empty_vector()
        marked = 0
        for p in self.places.values():
            if self.type == NetType.ELEMENTARY and p.initial > 1:
                raise UnsupportedOperationError(
                    f"Elementary nets require initial values of 0 or 1, {p.label} has {p.initial}"
                )
            if p.initial > 0:
                marked += 1
            v[p.offset] = p.initial
        if self.type == NetType.ELEMENTARY and marked > 1:
            raise UnsupportedOperationError("Elementary nets can only have one initial token")
        return v

    def capacity_vector(self) -> Vector:
        v = self.empty_vector()
        for p in self.places.values():
            if self.type == NetType.ELEMENTARY and p.capacity > 1:
                raise UnsupportedOperationError(
                    f"Elementary nets require capacities of 0 or 1, {p.label} has {p.capacity}"
                )
            v[p.offset] = p.capacity
        return v

    def role(self, label: str) -> Role:
        """Return the role for label, registering it on first use"""
        if label not in self.roles:
            self.roles[label] = Role(label)
        return self.roles[label]

    def get_place(self, key: Union[str, int]) -> Place:
        """Find a place by label or by offset"""
        if isinstance(key, int):
            for p in self.places.values():
                if p.offset == key:
                    return p
        elif key in self.places:
            return self.places[key]
        raise UnknownPlaceError(f"No place {key!r} in {self.schema or 'net'}")

    def get_transition(self, label: str) -> Transition:
        try:
            return self.transitions[label]
        except KeyError:
            raise UnknownTransitionError(f"No transition {label!r} in {self.schema or 'net'}") from None

    def object_exists(self, label: str) -> bool:
        return label in self.places or label in self.transitions

    def get_object(self, label: str) -> Optional[Node]:
        return self.places.get(label) or self.transitions.get(label)
