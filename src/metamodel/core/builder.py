#!/usr/bin/env python3
"""
Metamodel - Builder Layer

NetBuilder provides the procedural API for constructing nets. A declaration
is a plain function that receives three constructors:

    def inhibit_test(transition, place, role):
        default = role("default")
        foo = place("foo", 1, 0)
        bar = transition("bar", default)
        baz = transition("baz", default)
        foo.guard(1, baz)
        foo.connect(1, bar)

Constructors return node handles whose ``connect``/``guard``/``reentry``
methods append arcs. Indexing happens once the declaration returns.
"""

import logging
from typing import Callable, Optional, Union

from ..exceptions import InvalidArcError, UnsupportedOperationError
from .specs import (
    DEFAULT_ROLE,
    Arc,
    Net,
    NetType,
    Place,
    Position,
    Role,
    Transition,
)

logger = logging.getLogger(__name__)


Declaration = Callable[..., None]


class PlaceNode:
    """Handle returned by ``place()``; arcs from here consume or inhibit"""

    node_type = "place"

    def __init__(self, builder: "NetBuilder", place: Place):
        self.builder = builder
        self.place = place

    def connect(self, weight: int, target: "TransitionNode") -> Arc:
        """Consumption arc: place -> transition"""
        self.builder._check_target(self, target, TransitionNode)
        return self.builder._add_arc(self.place, target.transition, weight)

    def guard(self, weight: int, target: "TransitionNode") -> Arc:
        """Standard inhibitor: blocks target while this place holds >= weight"""
        self.builder._check_target(self, target, TransitionNode)
        return self.builder._add_arc(self.place, target.transition, weight, inhibit=True)

    def __repr__(self):
        return f"PlaceNode({self.place.label})"


class TransitionNode:
    """Handle returned by ``transition()``; arcs from here produce or reverse-inhibit"""

    node_type = "transition"

    def __init__(self, builder: "NetBuilder", transition: Transition):
        self.builder = builder
        self.transition = transition

    def connect(self, weight: int, target: PlaceNode) -> Arc:
        """Production arc: transition -> place"""
        self.builder._check_target(self, target, PlaceNode)
        return self.builder._add_arc(self.transition, target.place, weight)

    def guard(self, weight: int, target: PlaceNode) -> Arc:
        """Reverse inhibitor: blocks this transition until target holds >= weight"""
        self.builder._check_target(self, target, PlaceNode)
        return self.builder._add_arc(
            self.transition, target.place, weight, inhibit=True, inverted=True
        )

    def reentry(self, target: PlaceNode) -> Arc:
        """Allow this transition to re-mark an already marked place (workflow only)"""
        self.builder._check_target(self, target, PlaceNode)
        if self.builder.net.type != NetType.WORKFLOW:
            raise UnsupportedOperationError("reentry is only supported for workflow nets")
        arc = self.builder._add_arc(self.transition, target.place, 0, reentry=True)
        self.transition.allow_reentry = True
        return arc

    def __repr__(self):
        return f"TransitionNode({self.transition.label})"


Node = Union[PlaceNode, TransitionNode]


class NetBuilder:
    """Builder for constructing a Net"""

    def __init__(self, schema: str = "", net_type: NetType = NetType.GENERAL):
        self.net = Net(schema=schema, type=NetType(net_type))

    def role(self, label: str) -> Role:
        return self.net.role(label)

    def place(
        self,
        label: str,
        initial: int = 0,
        capacity: int = 0,
        position: Optional[Position] = None,
    ) -> PlaceNode:
        """Declare a place; its offset is the current place count"""
        place = Place(
            label=label,
            offset=len(self.net.places),
            initial=initial or 0,
            capacity=capacity or 0,
            position=position or Position(),
        )
        self.net.places[label] = place
        return PlaceNode(self, place)

    def transition(
        self,
        label: str,
        role: Union[Role, str, None] = None,
        position: Optional[Position] = None,
    ) -> TransitionNode:
        """Declare a transition; role defaults to "default" """
        if role is None:
            role = DEFAULT_ROLE
        if isinstance(role, str):
            role = self.net.role(role)
        transition = Transition(
            label=label,
            role=role,
            position=position or Position(),
        )
        self.net.transitions[label] = transition
        return TransitionNode(self, transition)

    def declare(self, declaration: Declaration) -> "NetBuilder":
        """Run a procedural declaration against this builder's constructors"""
        declaration(self.transition, self.place, self.role)
        return self

    def _check_target(self, source: Node, target: Node, expected: type):
        if not isinstance(target, expected):
            raise InvalidArcError(
                f"Cannot connect {type(source).__name__} to {type(target).__name__} directly. "
                f"Arcs must alternate between places and transitions."
            )

    def _add_arc(self, source, target, weight: int, **flags) -> Arc:
        if not flags.get("reentry") and weight < 1:
            raise InvalidArcError(
                f"{source.label} -> {target.label} needs a positive weight, got {weight}"
            )
        if (
            self.net.type == NetType.ELEMENTARY
            and not flags.get("reentry")
            and weight != 1
        ):
            raise UnsupportedOperationError(
                f"elementary nets only support weight 1, got {weight}"
            )
        arc = Arc(source, target, weight, offset=len(self.net.arcs), **flags)
        self.net.arcs.append(arc)
        logger.debug("[builder] %r", arc)
        return arc
