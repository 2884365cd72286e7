#!/usr/bin/env python3
"""
Tests for structural edits on a live net.

After every edit the dense index must agree with what ``index_arcs`` derives
from the arc list, and ``rebuild_arcs`` must reproduce the same index again.

Run with: pytest tests/core/test_editor.py -v
"""

import pytest

from metamodel import (
    InvalidArcError,
    NetType,
    Position,
    UnknownPlaceError,
    UnknownTransitionError,
    UnsupportedOperationError,
    loads,
    new_model,
)
from metamodel.core.editor import next_label, unique_label


@pytest.fixture
def consistent(snapshot):
    """Assert the live index survives a re-index and a rebuild round trip"""
    def check(model):
        live = snapshot(model.net)
        assert model.index_arcs()
        assert snapshot(model.net) == live
        model.rebuild_arcs()
        assert model.index_arcs()
        assert snapshot(model.net) == live
        assert [a.offset for a in model.arcs] == list(range(len(model.arcs)))
    return check


def chain(transition, place, role):
    a = place("a", 1)
    b = place("b")
    c = place("c")
    t1 = transition("t1")
    t2 = transition("t2")
    a.connect(1, t1)
    t1.connect(2, b)
    b.connect(2, t2)
    t2.connect(1, c)
    c.guard(1, t1)


@pytest.fixture
def chain_model():
    return new_model(schema="chain", declaration=chain)


# =============================================================================
# Labels
# =============================================================================


class TestLabels:
    def test_next_label(self):
        assert next_label([], "place") == "place0"
        assert next_label(["place0", "place1", "place3"], "place") == "place2"

    def test_unique_label_free(self):
        assert unique_label("foo", {"bar"}) == "foo"

    def test_unique_label_appends(self):
        assert unique_label("foo", {"foo"}) == "foo1"
        assert unique_label("foo", {"foo", "foo1"}) == "foo2"

    def test_unique_label_increments_suffix(self):
        assert unique_label("x9", {"x9"}) == "x10"
        assert unique_label("p01", {"p01"}) == "p2"

    def test_model_sequences(self, wf_model):
        assert wf_model.place_seq() == "place0"
        assert wf_model.transition_seq() == "txn2"
        assert wf_model.new_label("entry") == "entry1"
        assert wf_model.new_label("txn0") == "txn1"


# =============================================================================
# Adding
# =============================================================================


class TestAdd:
    def test_add_place_extends_vectors(self, chain_model, consistent):
        p = chain_model.add_place(Position(10, 20))
        assert p.label == "place0"
        assert p.offset == 3
        assert p.position.x == 10
        for t in chain_model.transitions.values():
            assert len(t.delta) == 4
            for g in t.guards.values():
                assert len(g.delta) == 4
        assert chain_model.initial_vector() == [1, 0, 0, 0]
        consistent(chain_model)

    def test_add_transition_defaults(self, chain_model, consistent):
        t = chain_model.add_transition()
        assert t.label == "txn0"
        assert t.role.label == "default"
        assert t.delta == [0, 0, 0]
        assert chain_model.add_transition().label == "txn1"
        consistent(chain_model)

    def test_generated_labels_avoid_both_kinds(self, consistent):
        def decl(transition, place, role):
            place("txn0")
            transition("place0")

        m = new_model(schema="crossed", declaration=decl)
        assert m.transition_seq() == "txn1"
        assert m.add_transition().label == "txn1"
        assert m.add_place().label == "place1"
        consistent(m)

        reloaded = loads(m.to_json())
        assert list(reloaded.places) == ["txn0", "place1"]
        assert list(reloaded.transitions) == ["place0", "txn1"]


# =============================================================================
# Deleting
# =============================================================================


class TestDelete:
    def test_delete_place_compacts(self, chain_model, consistent):
        chain_model.delete_place("b")

        assert list(chain_model.places) == ["a", "c"]
        assert chain_model.places["c"].offset == 1
        assert chain_model.transitions["t1"].delta == [-1, 0]
        assert chain_model.transitions["t2"].delta == [0, 1]
        assert chain_model.transitions["t1"].guards["c"].delta == [0, -1]
        assert all(a.place.label != "b" for a in chain_model.arcs)
        consistent(chain_model)

    def test_delete_guarded_place_drops_guard(self, chain_model, consistent):
        chain_model.delete_place("c")
        assert chain_model.transitions["t1"].guards == {}
        consistent(chain_model)

    def test_delete_missing_place(self, chain_model):
        with pytest.raises(UnknownPlaceError):
            chain_model.delete_place("zz")

    def test_delete_transition(self, chain_model, consistent):
        chain_model.delete_transition("t1")
        assert "t1" not in chain_model.transitions
        assert all(a.transition.label != "t1" for a in chain_model.arcs)
        assert len(chain_model.arcs) == 2
        consistent(chain_model)

    def test_delete_missing_transition(self, chain_model):
        with pytest.raises(UnknownTransitionError):
            chain_model.delete_transition("zz")

    def test_delete_arc(self, chain_model, consistent):
        chain_model.delete_arc(1)
        assert chain_model.transitions["t1"].delta == [-1, 0, 0]
        assert len(chain_model.arcs) == 4
        consistent(chain_model)

    def test_delete_guard_arc(self, chain_model, consistent):
        chain_model.delete_arc(4)
        assert chain_model.transitions["t1"].guards == {}
        consistent(chain_model)

    def test_delete_reentry_arc(self, reentry_model, consistent):
        reentry_model.delete_arc(1)
        assert not reentry_model.transitions["again"].allow_reentry
        consistent(reentry_model)
        state = reentry_model.initial_vector()
        assert not reentry_model.fire(state, "again").ok

    def test_delete_reentry_place_clears_flag(self, reentry_model, consistent):
        reentry_model.delete_place("review")
        assert reentry_model.arcs == []
        assert not reentry_model.transitions["again"].allow_reentry
        consistent(reentry_model)

    def test_delete_place_keeps_other_reentry(self, consistent):
        def decl(transition, place, role):
            a = place("a", 1)
            b = place("b")
            c = place("c")
            t = transition("t")
            a.connect(1, t)
            t.connect(1, b)
            t.reentry(b)
            t.reentry(c)

        m = new_model(schema="twoReentry", declaration=decl, net_type=NetType.WORKFLOW)
        m.delete_place("b")
        assert m.transitions["t"].allow_reentry
        consistent(m)
        m.delete_place("c")
        assert not m.transitions["t"].allow_reentry
        consistent(m)

    def test_delete_bad_offset(self, chain_model):
        with pytest.raises(InvalidArcError):
            chain_model.delete_arc(99)
        with pytest.raises(InvalidArcError):
            chain_model.delete_arc(-1)


# =============================================================================
# Renaming
# =============================================================================


class TestRename:
    def test_rename_place_keeps_order_and_guards(self, chain_model, consistent):
        chain_model.rename_place("c", "done")
        assert list(chain_model.places) == ["a", "b", "done"]
        assert chain_model.places["done"].label == "done"
        guard = chain_model.transitions["t1"].guards["done"]
        assert guard.label == "done"
        consistent(chain_model)

    def test_rename_transition(self, chain_model, consistent):
        chain_model.rename_transition("t2", "finish")
        assert list(chain_model.transitions) == ["t1", "finish"]
        state = chain_model.initial_vector()
        assert chain_model.fire(state, "t1").ok
        assert chain_model.fire(state, "finish").ok
        consistent(chain_model)

    def test_rename_collision(self, chain_model):
        with pytest.raises(UnsupportedOperationError):
            chain_model.rename_place("a", "t1")
        with pytest.raises(UnsupportedOperationError):
            chain_model.rename_transition("t1", "b")

    def test_rename_missing(self, chain_model):
        with pytest.raises(UnknownPlaceError):
            chain_model.rename_place("nope", "x")
        with pytest.raises(UnknownTransitionError):
            chain_model.rename_transition("nope", "x")


# =============================================================================
# Arc edits
# =============================================================================


class TestArcEdits:
    def test_toggle_consumption_to_guard_and_back(self, chain_model, consistent):
        assert chain_model.toggle_inhibitor(0)
        arc = chain_model.arcs[0]
        assert arc.inhibit and not arc.inverted
        t1 = chain_model.transitions["t1"]
        assert t1.delta[0] == 0
        assert t1.guards["a"].delta == [-1, 0, 0]
        consistent(chain_model)

        assert chain_model.toggle_inhibitor(0)
        arc = chain_model.arcs[0]
        assert not arc.inhibit
        assert "a" not in t1.guards
        assert t1.delta[0] == -1
        consistent(chain_model)

    def test_toggle_production_makes_inverted_guard(self, chain_model, consistent):
        chain_model.toggle_inhibitor(1)
        arc = chain_model.arcs[1]
        assert arc.inhibit and arc.inverted
        guard = chain_model.transitions["t1"].guards["b"]
        assert guard.inverted
        assert guard.delta == [0, -2, 0]
        consistent(chain_model)

    def test_toggle_reentry_rejected(self, reentry_model):
        with pytest.raises(UnsupportedOperationError):
            reentry_model.toggle_inhibitor(1)

    def test_set_weight(self, chain_model, consistent):
        assert chain_model.set_arc_weight(0, 3)
        assert chain_model.arcs[0].weight == 3
        assert chain_model.transitions["t1"].delta[0] == -3
        consistent(chain_model)

    def test_set_guard_weight(self, chain_model, consistent):
        assert chain_model.set_arc_weight(4, 2)
        assert chain_model.transitions["t1"].guards["c"].delta == [0, 0, -2]
        consistent(chain_model)

    def test_non_positive_weight_ignored(self, chain_model):
        assert not chain_model.set_arc_weight(0, 0)
        assert not chain_model.set_arc_weight(0, -2)
        assert chain_model.arcs[0].weight == 1

    def test_set_weight_reentry_rejected(self, reentry_model):
        with pytest.raises(UnsupportedOperationError):
            reentry_model.set_arc_weight(1, 2)

    def test_set_weight_elementary(self, elementary_model):
        with pytest.raises(UnsupportedOperationError):
            elementary_model.set_arc_weight(0, 2)
        assert elementary_model.set_arc_weight(0, 1)
        assert elementary_model.type is NetType.ELEMENTARY


# =============================================================================
# Mixed edit sequence
# =============================================================================


class TestEditSequence:
    def test_build_from_scratch(self, consistent):
        m = new_model(schema="scratch")
        p0 = m.add_place()
        p1 = m.add_place()
        t0 = m.add_transition()
        assert (p0.label, p1.label, t0.label) == ("place0", "place1", "txn0")
        assert t0.delta == [0, 0]
        consistent(m)

        # a transition with no arcs fires as a no-op on general nets
        state = m.initial_vector()
        assert m.fire(state, "txn0").ok
        assert state == [0, 0]

    def test_edits_then_fire(self, game_model, consistent):
        game_model.delete_place("22")
        game_model.delete_transition("X00")
        game_model.rename_place("11", "center")
        p = game_model.add_place()
        consistent(game_model)

        state = game_model.initial_vector()
        assert p.offset == len(state) - 1
        assert "X22" in game_model.transitions
        assert game_model.fire(state, "X22").ok
        assert game_model.fire(state, "O11").ok
        assert state[game_model.places["center"].offset] == 0
