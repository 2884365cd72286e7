#!/usr/bin/env python3
"""
Metamodel - Declarative Format

Pydantic models for the JSON-shaped declaration object, plus loading a Net
from it, exporting a Net back to it, and a compact JSON codec.

    {
      "netType": "workflow",
      "version": "v0",
      "places": {"entry": {"initial": 1, "x": 852, "y": 54}},
      "transitions": {"txn0": {"role": "default", "x": 728, "y": 155}},
      "arcs": [{"source": "entry", "target": "txn0", "weight": 1}]
    }

The ``version`` tag is checked before anything else so a declaration from
another format revision fails with VersionMismatchError, not a schema error.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from ..exceptions import (
    InvalidArcError,
    InvalidDeclarationError,
    VersionMismatchError,
)
from .builder import NetBuilder, PlaceNode, TransitionNode
from .specs import DEFAULT_ROLE, Net, NetType, Position

VERSION = "v0"

Coordinate = Union[int, float]


class PlaceDeclaration(BaseModel):
    model_config = ConfigDict(extra="ignore")

    initial: int = Field(default=0, ge=0)
    capacity: int = Field(default=0, ge=0)
    x: Coordinate = 0
    y: Coordinate = 0


class TransitionDeclaration(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Optional[str] = None
    x: Coordinate = 0
    y: Coordinate = 0


class ArcDeclaration(BaseModel):
    model_config = ConfigDict(extra="ignore")

    source: str
    target: str
    weight: int = 1
    inhibit: bool = False
    reentry: bool = False

    @model_validator(mode="after")
    def _positive_weight(self):
        # reentry arcs are exported with weight 0
        if not self.reentry and self.weight < 1:
            raise ValueError(
                f"arc {self.source} -> {self.target} needs a positive weight, got {self.weight}"
            )
        return self


class NetDeclaration(BaseModel):
    """Declarative description of a net, versioned by a literal tag"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    net_type: NetType = Field(
        default=NetType.GENERAL,
        alias="netType",
        validation_alias=AliasChoices("netType", "modelType"),
    )
    version: str = VERSION
    places: Dict[str, PlaceDeclaration] = Field(default_factory=dict)
    transitions: Dict[str, TransitionDeclaration] = Field(default_factory=dict)
    arcs: List[ArcDeclaration] = Field(default_factory=list)

    @field_validator("net_type", mode="before")
    @classmethod
    def _legacy_net_type(cls, value):
        return NetType(value) if isinstance(value, str) else value


def check_version(version: Any) -> None:
    if version != VERSION:
        raise VersionMismatchError(f"invalid model version: {version!r} expected: {VERSION!r}")


def parse_declaration(obj: Union[NetDeclaration, Mapping[str, Any]]) -> NetDeclaration:
    """Validate a declaration object, checking its version first"""
    if isinstance(obj, NetDeclaration):
        check_version(obj.version)
        return obj
    if not isinstance(obj, Mapping):
        raise InvalidDeclarationError(f"expected a mapping, got {type(obj).__name__}")
    check_version(obj.get("version"))
    try:
        return NetDeclaration.model_validate(obj)
    except ValidationError as e:
        raise InvalidDeclarationError(str(e)) from e


def load_declaration(builder: NetBuilder, declaration: NetDeclaration) -> None:
    """Push the declaration's places, transitions and arcs into ``builder``"""
    shared = sorted(set(declaration.places) & set(declaration.transitions))
    if shared:
        raise InvalidDeclarationError(f"labels used by both a place and a transition: {shared}")

    nodes: Dict[str, Union[PlaceNode, TransitionNode]] = {}
    for label, p in declaration.places.items():
        nodes[label] = builder.place(label, p.initial, p.capacity, Position(p.x, p.y))
    for label, t in declaration.transitions.items():
        nodes[label] = builder.transition(label, t.role or DEFAULT_ROLE, Position(t.x, t.y))

    for arc in declaration.arcs:
        source = nodes.get(arc.source)
        target = nodes.get(arc.target)
        if source is None:
            raise InvalidArcError(f"invalid arc source: {arc.source}")
        if target is None:
            raise InvalidArcError(f"invalid arc target: {arc.target}")

        if isinstance(source, PlaceNode):
            if arc.reentry:
                raise InvalidArcError("reentry must use a transition -> place arc")
            if arc.inhibit:
                source.guard(arc.weight, target)
            else:
                source.connect(arc.weight, target)
        elif arc.reentry:
            source.reentry(target)
        elif arc.inhibit:
            source.guard(arc.weight, target)
        else:
            source.connect(arc.weight, target)


def export_declaration(net: Net) -> NetDeclaration:
    places = {
        p.label: PlaceDeclaration(
            initial=p.initial, capacity=p.capacity, x=p.position.x, y=p.position.y
        )
        for p in net.places.values()
    }
    transitions = {
        t.label: TransitionDeclaration(
            role=t.role.label if t.role.label != DEFAULT_ROLE else None,
            x=t.position.x,
            y=t.position.y,
        )
        for t in net.transitions.values()
    }
    arcs = [
        ArcDeclaration(
            source=a.source.label,
            target=a.target.label,
            weight=abs(a.weight),
            inhibit=a.inhibit,
            reentry=a.reentry,
        )
        for a in net.arcs
    ]
    return NetDeclaration(
        net_type=net.type,
        places=places,
        transitions=transitions,
        arcs=arcs,
    )


def _sparse(model: BaseModel, always=("x", "y")) -> Dict[str, Any]:
    rec = model.model_dump(exclude_defaults=True)
    for name in always:
        rec[name] = getattr(model, name)
    return rec


def to_object(net: Net, mode: str = "sparse") -> Dict[str, Any]:
    """Plain-dict export.

    ``sparse`` drops zero/default fields and is accepted by the loader.
    ``full`` also records offsets, guards and reentry flags for inspection.
    """
    if mode == "full":
        return {
            "netType": net.type.value,
            "version": VERSION,
            "places": {
                p.label: {
                    "offset": p.offset,
                    "initial": p.initial,
                    "capacity": p.capacity,
                    "x": p.position.x,
                    "y": p.position.y,
                }
                for p in net.places.values()
            },
            "transitions": {
                t.label: {
                    "role": t.role.label,
                    "x": t.position.x,
                    "y": t.position.y,
                    "allowReentry": t.allow_reentry,
                    "guards": {
                        k: {"delta": list(g.delta), "inverted": g.inverted}
                        for k, g in t.guards.items()
                    },
                }
                for t in net.transitions.values()
            },
            "arcs": [
                {
                    "offset": a.offset,
                    "source": a.source.label,
                    "target": a.target.label,
                    "weight": a.weight,
                    "inhibit": a.inhibit,
                    "reentry": a.reentry,
                }
                for a in net.arcs
            ],
        }

    decl = export_declaration(net)
    return {
        "netType": net.type.value,
        "version": VERSION,
        "places": {label: _sparse(p) for label, p in decl.places.items()},
        "transitions": {label: _sparse(t) for label, t in decl.transitions.items()},
        "arcs": [_sparse(a, always=("source", "target", "weight")) for a in decl.arcs],
    }


def dumps(net: Net) -> bytes:
    """Encode a net's sparse declaration as compact JSON bytes"""
    return json.dumps(to_object(net), separators=(",", ":")).encode("utf-8")


def decode(data: Union[bytes, str]) -> NetDeclaration:
    """Decode JSON bytes into a validated declaration"""
    try:
        raw = json.loads(data)
    except json.JSONDecodeError as e:
        raise InvalidDeclarationError(f"declaration is not valid JSON: {e}") from e
    return parse_declaration(raw)
