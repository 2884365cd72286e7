#!/usr/bin/env python3
"""
Metamodel - Arc Indexer

Compiles the arc list into each transition's dense delta vector and guard
map (``index_arcs``), and regenerates an arc list from that index
(``rebuild_arcs``).

``rebuild_arcs`` is lossy: reentry arcs carry no delta so they cannot be
recovered (``allow_reentry`` stays set on the transition, so firing is
unaffected), and declared arc ordering is replaced by transition order. A
round trip reproduces an operationally equivalent net, not the same list.
"""

import logging

from ..exceptions import UnsupportedOperationError
from .specs import Arc, Guard, Net, NetType, Place, Transition

logger = logging.getLogger(__name__)


def _resolve_guard_endpoints(arc: Arc):
    if arc.inverted:
        return arc.target, arc.source
    return arc.source, arc.target


def index_arcs(net: Net) -> bool:
    """Build the vector index for every transition from ``net.arcs``.

    Returns False if any arc could not be indexed; callers must treat that as
    a fatal construction error.
    """
    for t in net.transitions.values():
        t.delta = net.empty_vector()
        t.guards = {}

    ok = True
    for arc in net.arcs:
        if arc.reentry:
            if net.type != NetType.WORKFLOW:
                raise UnsupportedOperationError("reentry is only supported for workflow nets")
            if isinstance(arc.source, Transition):
                arc.source.allow_reentry = True
            continue

        if net.type == NetType.ELEMENTARY and abs(arc.weight) > 1:
            raise UnsupportedOperationError(
                f"elementary nets only support weight 1, got {arc.weight}"
            )

        if arc.inhibit:
            place, transition = _resolve_guard_endpoints(arc)
            if not isinstance(place, Place) or not isinstance(transition, Transition):
                logger.warning("[index] unresolvable inhibitor %r", arc)
                ok = False
                continue
            guard = Guard(label=place.label, delta=net.empty_vector(), inverted=arc.inverted)
            guard.delta[place.offset] = -arc.weight
            transition.guards[place.label] = guard
        elif arc.is_production:
            arc.source.delta[arc.target.offset] = arc.weight
        elif arc.is_consumption:
            arc.target.delta[arc.source.offset] = -arc.weight
        else:
            logger.warning("[index] invalid arc %r", arc)
            ok = False

    logger.debug("[index] %s indexed %d arcs ok=%s", net.schema, len(net.arcs), ok)
    return ok


def rebuild_arcs(net: Net) -> None:
    """Regenerate ``net.arcs`` from the transitions' delta vectors and guards"""
    by_offset = {p.offset: p for p in net.places.values()}
    arcs = []

    def add(source, target, weight, **flags):
        arcs.append(Arc(source, target, abs(weight), offset=len(arcs), **flags))

    for t in net.transitions.values():
        for i, d in enumerate(t.delta):
            if d < 0:
                add(by_offset[i], t, d)
            elif d > 0:
                add(t, by_offset[i], d)

        for g in t.guards.values():
            place = net.places[g.label]
            weight = g.delta[place.offset]
            if g.inverted:
                add(t, place, weight, inhibit=True, inverted=True)
            else:
                add(place, t, weight, inhibit=True)

    net.arcs = arcs
    logger.debug("[rebuild] %s rebuilt %d arcs", net.schema, len(arcs))
