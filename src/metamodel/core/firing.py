#!/usr/bin/env python3
"""
Metamodel - Firing Engine

Guard checks, vector addition with capacity clipping, and the commit policy
for each net type:

- general:    the base result from ``test_fire`` is final
- elementary: additionally at most one marked place and no slot above 1
- workflow:   output saturated to 0/1, underflow forgiven, reentry honoured

``fire`` mutates the caller's state vector in place, and only on success.
Everything else here is read-only with respect to the state.
"""

import logging
from typing import Callable, Dict, List, NamedTuple, Optional

from ..exceptions import UnknownActionError
from .specs import Net, NetType, Result, Transition, Vector

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class VectorSum(NamedTuple):
    out: Vector
    ok: bool
    overflow: bool
    underflow: bool


def vector_add(
    state: Vector,
    delta: Vector,
    multiple: int,
    capacity: Optional[Vector] = None,
) -> VectorSum:
    """Compute ``state + delta * multiple`` and flag under/overflow.

    A capacity slot of 0 (or no capacity vector at all) means unbounded.
    """
    overflow = False
    underflow = False
    out = []
    for i, tokens in enumerate(state):
        d = delta[i] if i < len(delta) else 0
        value = tokens + d * multiple
        out.append(value)
        if value < 0:
            underflow = True
        elif capacity and capacity[i] > 0 and value > capacity[i]:
            overflow = True
    return VectorSum(out, not (overflow or underflow), overflow, underflow)


def _lookup(net: Net, action: str) -> Transition:
    try:
        return net.transitions[action]
    except KeyError:
        raise UnknownActionError(f"action not found: {action}") from None


def guard_fails(net: Net, state: Vector, action: str, multiple: int = 1) -> bool:
    """True when any guard on ``action`` blocks it in ``state``"""
    t = _lookup(net, action)
    for guard in t.guards.values():
        res = vector_add(state, guard.delta, multiple)
        if not guard.inverted and res.ok:
            return True  # inhibitor active
        if guard.inverted and not res.ok:
            return True  # inverted inhibitor active
    return False


def test_fire(net: Net, state: Vector, action: str, multiple: int = 1) -> Result:
    """Base result shared by every net type; never mutates ``state``"""
    t = _lookup(net, action)
    if guard_fails(net, state, action, multiple):
        return Result(out=list(state), ok=False, role=t.role.label, inhibited=True)
    res = vector_add(state, t.delta, multiple, net.capacity_vector())
    return Result(
        out=res.out,
        ok=res.ok,
        role=t.role.label,
        overflow=res.overflow,
        underflow=res.underflow,
    )


def _general(net: Net, state: Vector, action: str, multiple: int) -> Result:
    return test_fire(net, state, action, multiple)


def _elementary(net: Net, state: Vector, action: str, multiple: int) -> Result:
    res = test_fire(net, state, action, multiple)
    if not res.ok:
        return res
    fails_hard_cap = any(v > 1 for v in res.out)
    marked = sum(1 for v in res.out if v > 0)
    res.ok = not fails_hard_cap and marked < 2
    res.overflow = fails_hard_cap
    return res


def _workflow(net: Net, state: Vector, action: str, multiple: int) -> Result:
    res = test_fire(net, state, action, multiple)
    if res.inhibited:
        return res

    outputs = 0
    overflow_outputs = 0
    saturated = net.empty_vector()
    for i, value in enumerate(res.out):
        if value > 1:
            overflow_outputs += 1
        if value > 0:
            outputs += 1
            saturated[i] = 1
    # consumption below zero is forgiven; the slot is already clamped to 0
    res.underflow = False
    res.overflow = overflow_outputs > 0

    if outputs == 0:
        res.ok = True
    elif outputs == 1 and overflow_outputs == 0:
        res.ok = True
    elif outputs == 1:
        res.ok = net.transitions[action].allow_reentry
        if res.ok:
            res.overflow = False
    else:
        res.ok = False

    res.out = saturated
    return res


_POLICIES: Dict[NetType, Callable[[Net, Vector, str, int], Result]] = {
    NetType.GENERAL: _general,
    NetType.ELEMENTARY: _elementary,
    NetType.WORKFLOW: _workflow,
}


def evaluate(net: Net, state: Vector, action: str, multiple: int = 1) -> Result:
    """Apply the net type's commit policy without touching ``state``"""
    return _POLICIES[net.type](net, state, action, multiple)


def fire(
    net: Net,
    state: Vector,
    action: str,
    multiple: int = 1,
    on_commit: Optional[Callable[[Result], None]] = None,
    on_reject: Optional[Callable[[Result], None]] = None,
) -> Result:
    """Fire ``action``; on success write the result into ``state`` in place.

    ``on_commit``/``on_reject`` run synchronously before this returns.
    """
    res = evaluate(net, state, action, multiple)
    if res.ok:
        for i, value in enumerate(res.out):
            state[i] = value
        logger.debug("[fire] %s x%d committed out=%s", action, multiple, res.out)
        if on_commit:
            on_commit(res)
    else:
        logger.debug(
            "[fire] %s x%d rejected inhibited=%s overflow=%s underflow=%s",
            action, multiple, res.inhibited, res.overflow, res.underflow,
        )
        if on_reject:
            on_reject(res)
    return res


def push_state(net: Net, state: Vector, action: str, multiple: int = 1) -> Result:
    """OR-branch firing without full workflow validation.

    Negative slots are clamped to 0 and the result is accepted as long as the
    action is not inhibited and at most one slot ends up marked.
    """
    res = test_fire(net, state, action, multiple)
    out = [max(v, 0) for v in res.out]
    marked = sum(1 for v in out if v > 0)
    ok = not res.inhibited and marked <= 1
    if ok:
        for i, value in enumerate(out):
            state[i] = value
    return Result(out=out, ok=ok, role=res.role, inhibited=res.inhibited)


def enabled_actions(net: Net, state: Vector, multiple: int = 1) -> List[str]:
    """Labels of every transition that would commit in ``state``"""
    return [
        label for label in net.transitions
        if evaluate(net, state, label, multiple).ok
    ]
