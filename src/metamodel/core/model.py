#!/usr/bin/env python3
"""
Metamodel - Model

Model binds a Net to the indexer, firing engine and structural editor. This
is what callers hold:

    m = new_model(schema="game", declaration=tictactoe)
    state = m.initial_vector()
    m.fire(state, "X11")

The Net is the single source of truth; Model holds no state of its own
beyond it. State vectors belong to the caller.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..common import mermaid
from ..exceptions import InvalidDeclarationError
from . import declaration as decl
from . import editor, firing, indexer
from .builder import Declaration, NetBuilder
from .specs import Arc, Net, NetType, Place, Position, Result, Transition, Vector

logger = logging.getLogger(__name__)


Callback = Optional[Callable[[Result], None]]


class Model:
    """A Petri net plus the operations that read and edit it"""

    def __init__(self, net: Net):
        self.net = net

    # ------------------------------------------------------------------
    # Definition
    # ------------------------------------------------------------------

    @property
    def schema(self) -> str:
        return self.net.schema

    @property
    def type(self) -> NetType:
        return self.net.type

    @property
    def places(self) -> Dict[str, Place]:
        return self.net.places

    @property
    def transitions(self) -> Dict[str, Transition]:
        return self.net.transitions

    @property
    def arcs(self) -> List[Arc]:
        return self.net.arcs

    def empty_vector(self) -> Vector:
        return self.net.empty_vector()

    def initial_vector(self) -> Vector:
        return self.net.initial_vector()

    def capacity_vector(self) -> Vector:
        return self.net.capacity_vector()

    def get_place(self, key: Union[str, int]) -> Place:
        return self.net.get_place(key)

    def get_object(self, label: str):
        return self.net.get_object(label)

    def object_exists(self, label: str) -> bool:
        return self.net.object_exists(label)

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def index_arcs(self) -> bool:
        return indexer.index_arcs(self.net)

    def rebuild_arcs(self) -> None:
        indexer.rebuild_arcs(self.net)

    # ------------------------------------------------------------------
    # Firing
    # ------------------------------------------------------------------

    def guard_fails(self, state: Vector, action: str, multiple: int = 1) -> bool:
        return firing.guard_fails(self.net, state, action, multiple)

    def test_fire(self, state: Vector, action: str, multiple: int = 1) -> Result:
        return firing.test_fire(self.net, state, action, multiple)

    def evaluate(self, state: Vector, action: str, multiple: int = 1) -> Result:
        return firing.evaluate(self.net, state, action, multiple)

    def fire(
        self,
        state: Vector,
        action: str,
        multiple: int = 1,
        on_commit: Callback = None,
        on_reject: Callback = None,
    ) -> Result:
        return firing.fire(self.net, state, action, multiple, on_commit, on_reject)

    def push_state(self, state: Vector, action: str, multiple: int = 1) -> Result:
        return firing.push_state(self.net, state, action, multiple)

    def enabled_actions(self, state: Vector, multiple: int = 1) -> List[str]:
        return firing.enabled_actions(self.net, state, multiple)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def add_place(self, position: Optional[Position] = None) -> Place:
        return editor.add_place(self.net, position)

    def add_transition(self, position: Optional[Position] = None) -> Transition:
        return editor.add_transition(self.net, position)

    def delete_place(self, label: str) -> None:
        editor.delete_place(self.net, label)

    def delete_transition(self, label: str) -> None:
        editor.delete_transition(self.net, label)

    def delete_arc(self, offset: int) -> None:
        editor.delete_arc(self.net, offset)

    def rename_place(self, old_label: str, new_label: str) -> None:
        editor.rename_place(self.net, old_label, new_label)

    def rename_transition(self, old_label: str, new_label: str) -> None:
        editor.rename_transition(self.net, old_label, new_label)

    def toggle_inhibitor(self, offset: int) -> bool:
        return editor.toggle_inhibitor(self.net, offset)

    def set_arc_weight(self, offset: int, weight: int) -> bool:
        return editor.set_arc_weight(self.net, offset, weight)

    def new_label(self, label: str) -> str:
        return editor.unique_label(label, set(self.net.places) | set(self.net.transitions))

    def place_seq(self) -> str:
        return editor.next_label(set(self.net.places) | set(self.net.transitions), "place")

    def transition_seq(self) -> str:
        return editor.next_label(set(self.net.places) | set(self.net.transitions), "txn")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_declaration(self) -> decl.NetDeclaration:
        return decl.export_declaration(self.net)

    def to_object(self, mode: str = "sparse") -> Dict[str, Any]:
        return decl.to_object(self.net, mode)

    def to_json(self) -> bytes:
        return decl.dumps(self.net)

    def to_mermaid(self, state: Optional[Vector] = None) -> str:
        """Mermaid diagram; transitions are classed by a hypothetical firing in ``state``"""
        if state is None:
            state = self.initial_vector()
        ids = mermaid.node_ids(list(self.net.places) + list(self.net.transitions))
        lines = [
            "graph TD",
            mermaid.format_comment(f"{self.schema or 'net'} ({self.type.value})"),
        ]
        for p in self.net.places.values():
            lines.append(mermaid.format_place_node(
                p.label, state[p.offset], p.capacity, ident=ids[p.label]
            ))
        for t in self.net.transitions.values():
            res = self.evaluate(state, t.label)
            status = "enabled" if res.ok else "inhibited" if res.inhibited else "disabled"
            lines.append(mermaid.format_transition_node(
                t.label, t.role.label, status, ident=ids[t.label]
            ))
        for a in self.net.arcs:
            lines.append(mermaid.format_arc(
                ids[a.source.label], ids[a.target.label], a.weight,
                inhibit=a.inhibit, reentry=a.reentry,
            ))
        lines.extend(mermaid.status_class_defs())
        return "\n".join(lines)

    def __repr__(self):
        return (
            f"Model({self.schema!r}, {self.type.value}, places={len(self.places)}, "
            f"transitions={len(self.transitions)}, arcs={len(self.arcs)})"
        )


def new_model(
    schema: str = "",
    declaration: Union[Declaration, decl.NetDeclaration, Mapping[str, Any], None] = None,
    net_type: Union[NetType, str, None] = None,
) -> Model:
    """Build and index a Model from a procedural or declarative declaration.

    For declarative objects the net type comes from the object unless
    ``net_type`` is given explicitly.
    """
    if declaration is None or callable(declaration):
        builder = NetBuilder(schema, net_type or NetType.GENERAL)
        if declaration is not None:
            builder.declare(declaration)
    else:
        parsed = decl.parse_declaration(declaration)
        builder = NetBuilder(schema, net_type or parsed.net_type)
        decl.load_declaration(builder, parsed)

    net = builder.net
    if not indexer.index_arcs(net):
        raise InvalidDeclarationError(f"invalid declaration: {schema or 'net'}")
    logger.debug(
        "[model] built %s (%s) places=%d transitions=%d arcs=%d",
        schema, net.type.value, len(net.places), len(net.transitions), len(net.arcs),
    )
    return Model(net)


def loads(data: Union[bytes, str], schema: str = "") -> Model:
    """Decode a JSON declaration produced by ``Model.to_json``"""
    return new_model(schema=schema, declaration=decl.decode(data))
