"""Pytest configuration and shared nets for metamodel tests"""

import pytest

from metamodel import NetType, Position, new_model


# =============================================================================
# Declarations
# =============================================================================


def pos(x: int, y: int) -> Position:
    return Position(x * 80, y * 80)


def inhibit_test(transition, place, role):
    """foo starts marked; bar consumes it, baz is blocked while it is marked"""
    default = role("default")
    foo = place("foo", 1, 0, pos(6, 2))
    bar = transition("bar", default, pos(5, 4))
    baz = transition("baz", default, pos(7, 4))
    foo.guard(1, baz)
    foo.connect(1, bar)


def reverse_guard_test(transition, place, role):
    """baz stays blocked until bar has filled foo up to 3"""
    foo = place("foo", 0, 0, pos(1, 1))
    bar = transition("bar", role("default"), pos(0, 2))
    baz = transition("baz", role("default"), pos(2, 2))
    bar.connect(1, foo)
    baz.guard(3, foo)


def tictactoe(transition, place, role):
    dx, dy = 220, 140
    board = [
        [place(f"{i}{j}", 1, 1, Position((j + 1) * dx, (i + 1) * dy)) for j in range(3)]
        for i in range(3)
    ]
    players = {
        "X": {"turn": place("X", 1, 1, Position(40, 200)), "role": role("X"), "dx": -60, "next": "O"},
        "O": {"turn": place("O", 0, 1, Position(830, 370)), "role": role("O"), "dx": 60, "next": "X"},
    }
    for i, row in enumerate(board):
        for j, cell in enumerate(row):
            for marking, player in players.items():
                p = cell.place.position
                move = transition(f"{marking}{i}{j}", player["role"], Position(p.x + player["dx"], p.y))
                player["turn"].connect(1, move)
                cell.connect(1, move)
                move.connect(1, players[player["next"]]["turn"])


def reentry_test(transition, place, role):
    """Workflow step that may re-mark the place it already occupies"""
    review = place("review", 1)
    again = transition("again")
    again.connect(1, review)
    again.reentry(review)


def no_reentry_test(transition, place, role):
    review = place("review", 1)
    again = transition("again")
    again.connect(1, review)


def elementary_test(transition, place, role):
    a = place("a", 1, 1)
    b = place("b", 0, 1)
    c = place("c", 0, 1)
    step = transition("step")
    back = transition("back")
    split = transition("split")
    spawn = transition("spawn")
    a.connect(1, step)
    step.connect(1, b)
    b.connect(1, back)
    back.connect(1, a)
    a.connect(1, split)
    split.connect(1, b)
    split.connect(1, c)
    spawn.connect(1, b)


WF_NET = {
    "netType": "workflow",
    "version": "v0",
    "places": {
        "entry": {"offset": 0, "initial": 1, "capacity": 0, "x": 852, "y": 54},
        "exit": {"offset": 1, "initial": 0, "capacity": 0, "x": 863, "y": 546},
        "place2": {"offset": 2, "initial": 0, "capacity": 0, "x": 738, "y": 367},
        "place3": {"offset": 3, "initial": 0, "capacity": 0, "x": 962, "y": 359},
    },
    "transitions": {
        "txn0": {"x": 728, "y": 155},
        "txn1": {"x": 964, "y": 147},
        "txn6": {"x": 861, "y": 455},
    },
    "arcs": [
        {"source": "entry", "target": "txn0", "weight": 1},
        {"source": "entry", "target": "txn1", "weight": 1},
        {"source": "place3", "target": "txn6", "weight": 1},
        {"source": "place2", "target": "txn6", "weight": 1},
        {"source": "txn6", "target": "exit", "weight": 1},
        {"source": "txn0", "target": "place2", "weight": 1},
        {"source": "txn1", "target": "place3", "weight": 1},
    ],
}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def inhibit_model():
    return new_model(schema="inhibit", declaration=inhibit_test)


@pytest.fixture
def reverse_guard_model():
    return new_model(schema="reverse", declaration=reverse_guard_test)


@pytest.fixture
def game_model():
    return new_model(schema="game", declaration=tictactoe)


@pytest.fixture
def elementary_model():
    return new_model(schema="safety", declaration=elementary_test, net_type=NetType.ELEMENTARY)


@pytest.fixture
def wf_declaration():
    return {**WF_NET, "places": dict(WF_NET["places"]), "arcs": list(WF_NET["arcs"])}


@pytest.fixture
def wf_model(wf_declaration):
    return new_model(schema="wfNet", declaration=wf_declaration)


@pytest.fixture
def reentry_model():
    return new_model(schema="reentry", declaration=reentry_test, net_type=NetType.WORKFLOW)


@pytest.fixture
def no_reentry_model():
    return new_model(schema="noReentry", declaration=no_reentry_test, net_type=NetType.WORKFLOW)


@pytest.fixture
def snapshot():
    """Comparable view of a net's dense index: deltas and guards per transition"""
    def take(net):
        return {
            label: (
                list(t.delta),
                {k: (list(g.delta), g.inverted) for k, g in t.guards.items()},
            )
            for label, t in net.transitions.items()
        }
    return take
