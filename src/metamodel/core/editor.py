#!/usr/bin/env python3
"""
Metamodel - Structural Editor

Incremental mutations on a live Net. Every operation keeps place offsets,
arc offsets and the per-transition delta/guard vectors dense and aligned, so
``index_arcs``/``rebuild_arcs`` can re-derive a consistent state afterwards.

Deleting a place compacts by list deletion: every slot above the deleted
offset moves down by one, and so does every higher place offset.
"""

import logging
import re
from typing import Collection, Optional

from ..exceptions import (
    InvalidArcError,
    UnknownPlaceError,
    UnknownTransitionError,
    UnsupportedOperationError,
)
from .specs import DEFAULT_ROLE, Arc, Guard, Net, NetType, Place, Position, Transition

logger = logging.getLogger(__name__)

_TRAILING_DIGITS = re.compile(r"^(.*?)(\d+)$")


# =============================================================================
# Label generation
# =============================================================================


def next_label(taken: Collection[str], prefix: str) -> str:
    """Lowest ``prefix<N>`` not in ``taken``"""
    n = 0
    while f"{prefix}{n}" in taken:
        n += 1
    return f"{prefix}{n}"


def unique_label(label: str, taken: Collection[str]) -> str:
    """Return label, or the first free variant with an incremented suffix.

    ``foo`` -> ``foo1`` -> ``foo2`` ..., ``x9`` -> ``x10``.
    """
    if label not in taken:
        return label
    m = _TRAILING_DIGITS.match(label)
    if m:
        stem, digits = m.groups()
        return unique_label(f"{stem}{int(digits) + 1}", taken)
    return unique_label(f"{label}1", taken)


def _labels(net: Net) -> set:
    return set(net.places) | set(net.transitions)


def _renumber_arcs(net: Net) -> None:
    for i, arc in enumerate(net.arcs):
        arc.offset = i


def _get_arc(net: Net, offset: int) -> Arc:
    if not 0 <= offset < len(net.arcs):
        raise InvalidArcError(f"missing arc offset: {offset}")
    return net.arcs[offset]


def _endpoints(arc: Arc):
    place, transition = arc.place, arc.transition
    if place is None or transition is None:
        raise InvalidArcError(f"arc has no place/transition pair: {arc.offset}")
    return place, transition


def _signed_weight(arc: Arc) -> int:
    return arc.weight if arc.is_production else -arc.weight


def _has_reentry(net: Net, transition: Transition) -> bool:
    return any(a.reentry and a.source is transition for a in net.arcs)


# =============================================================================
# Adding
# =============================================================================


def add_place(net: Net, position: Optional[Position] = None) -> Place:
    offset = len(net.places)
    label = next_label(_labels(net), "place")
    place = Place(label=label, offset=offset, position=position or Position())
    net.places[label] = place
    for t in net.transitions.values():
        t.delta.append(0)
        for g in t.guards.values():
            g.delta.append(0)
    logger.debug("[edit] added place %s at offset %d", label, offset)
    return place


def add_transition(net: Net, position: Optional[Position] = None) -> Transition:
    label = next_label(_labels(net), "txn")
    transition = Transition(
        label=label,
        role=net.role(DEFAULT_ROLE),
        position=position or Position(),
        delta=net.empty_vector(),
    )
    net.transitions[label] = transition
    logger.debug("[edit] added transition %s", label)
    return transition


# =============================================================================
# Deleting
# =============================================================================


def delete_place(net: Net, label: str) -> None:
    if label not in net.places:
        raise UnknownPlaceError(f"No place {label!r}")
    place = net.places.pop(label)
    k = place.offset

    for t in net.transitions.values():
        del t.delta[k]
        t.guards.pop(label, None)
        for g in t.guards.values():
            del g.delta[k]

    for p in net.places.values():
        if p.offset > k:
            p.offset -= 1

    lost_reentry = [a.source for a in net.arcs if a.reentry and a.target is place]
    net.arcs = [a for a in net.arcs if a.source is not place and a.target is not place]
    for t in lost_reentry:
        t.allow_reentry = _has_reentry(net, t)
    _renumber_arcs(net)
    logger.debug("[edit] deleted place %s (offset %d)", label, k)


def delete_transition(net: Net, label: str) -> None:
    if label not in net.transitions:
        raise UnknownTransitionError(f"No transition {label!r}")
    transition = net.transitions.pop(label)
    net.arcs = [
        a for a in net.arcs
        if a.source is not transition and a.target is not transition
    ]
    _renumber_arcs(net)
    logger.debug("[edit] deleted transition %s", label)


def delete_arc(net: Net, offset: int) -> None:
    arc = _get_arc(net, offset)
    place, transition = _endpoints(arc)

    if arc.inhibit:
        transition.guards.pop(place.label, None)
    elif not arc.reentry:
        transition.delta[place.offset] = 0

    del net.arcs[offset]
    if arc.reentry:
        transition.allow_reentry = _has_reentry(net, transition)
    _renumber_arcs(net)
    logger.debug("[edit] deleted %r", arc)


# =============================================================================
# Renaming
# =============================================================================


def _relabel(mapping: dict, old: str, new: str) -> dict:
    return {(new if k == old else k): v for k, v in mapping.items()}


def rename_place(net: Net, old_label: str, new_label: str) -> None:
    if old_label not in net.places:
        raise UnknownPlaceError(f"No place {old_label!r}")
    if new_label != old_label and net.object_exists(new_label):
        raise UnsupportedOperationError(f"label already in use: {new_label}")
    place = net.places[old_label]
    place.label = new_label
    net.places = _relabel(net.places, old_label, new_label)
    for t in net.transitions.values():
        if old_label in t.guards:
            t.guards[old_label].label = new_label
            t.guards = _relabel(t.guards, old_label, new_label)


def rename_transition(net: Net, old_label: str, new_label: str) -> None:
    if old_label not in net.transitions:
        raise UnknownTransitionError(f"No transition {old_label!r}")
    if new_label != old_label and net.object_exists(new_label):
        raise UnsupportedOperationError(f"label already in use: {new_label}")
    net.transitions[old_label].label = new_label
    net.transitions = _relabel(net.transitions, old_label, new_label)


# =============================================================================
# Arc edits
# =============================================================================


def toggle_inhibitor(net: Net, offset: int) -> bool:
    """Flip an arc between a normal edge and an inhibitor edge"""
    arc = _get_arc(net, offset)
    if arc.reentry:
        raise UnsupportedOperationError("cannot toggle a reentry arc")
    place, transition = _endpoints(arc)

    arc.inhibit = not arc.inhibit
    if arc.inhibit:
        # transition -> place becomes a reverse guard
        arc.inverted = arc.is_production
        guard = Guard(label=place.label, delta=net.empty_vector(), inverted=arc.inverted)
        guard.delta[place.offset] = -arc.weight
        transition.guards[place.label] = guard
        transition.delta[place.offset] = 0
    else:
        arc.inverted = False
        transition.guards.pop(place.label, None)
        transition.delta[place.offset] = _signed_weight(arc)
    logger.debug("[edit] toggled %r", arc)
    return True


def set_arc_weight(net: Net, offset: int, weight: int) -> bool:
    """Reweight an arc; returns False for non-positive weights"""
    arc = _get_arc(net, offset)
    if weight <= 0:
        return False
    if arc.reentry:
        raise UnsupportedOperationError("reentry arcs have no weight")
    if net.type == NetType.ELEMENTARY and weight != 1:
        raise UnsupportedOperationError(f"elementary nets only support weight 1, got {weight}")
    place, transition = _endpoints(arc)

    arc.weight = weight
    if arc.inhibit:
        guard = transition.guards.get(place.label)
        if guard is None:
            guard = Guard(label=place.label, delta=net.empty_vector(), inverted=arc.inverted)
            transition.guards[place.label] = guard
        guard.delta[place.offset] = -weight
    else:
        transition.delta[place.offset] = _signed_weight(arc)
    return True
