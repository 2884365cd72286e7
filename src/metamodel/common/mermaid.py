#!/usr/bin/env python3
"""
Mermaid diagram formatting utilities for Petri nets.

These helpers produce the individual lines of a Mermaid ``graph``; the
Model assembles them (see ``Model.to_mermaid``). Node ids are assigned once
per diagram by ``node_ids`` and then passed to the place, transition and arc
formatters, so two labels never share a node.

Usage:
    from metamodel.common.mermaid import node_ids, format_place_node, format_arc

    ids = node_ids(["foo", "bar"])
    node = format_place_node("foo", tokens=1, ident=ids["foo"])
    edge = format_arc(ids["foo"], ids["bar"], weight=2)
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional

STATUS_STYLES = {
    "enabled": "fill:#d4f7d4,stroke:#2e7d32",
    "inhibited": "fill:#fde0e0,stroke:#c62828",
    "disabled": "fill:#eeeeee,stroke:#9e9e9e",
}

_UNSAFE = re.compile(r"[^A-Za-z0-9_]")


def node_id(label: str) -> str:
    """
    Make a label safe for use as a Mermaid node id.

    Different labels may map to the same id; use ``node_ids`` when building
    a whole diagram.

    Example:
        >>> node_id("place-1")
        'place_1'
        >>> node_id("11")
        'n_11'
    """
    safe = _UNSAFE.sub("_", label)
    if not safe or safe[0].isdigit():
        safe = f"n_{safe}"
    return safe


def node_ids(labels: Iterable[str]) -> Dict[str, str]:
    """
    Assign every label a distinct node id, suffixing ``_<n>`` on collision.

    Example:
        >>> node_ids(["place-1", "place_1", "11", "n_11"])
        {'place-1': 'place_1', 'place_1': 'place_1_1', '11': 'n_11', 'n_11': 'n_11_1'}
    """
    ids: Dict[str, str] = {}
    taken = set()
    for label in labels:
        base = ident = node_id(label)
        n = 1
        while ident in taken:
            ident = f"{base}_{n}"
            n += 1
        taken.add(ident)
        ids[label] = ident
    return ids


def format_place_node(
    label: str, tokens: int, capacity: int = 0, ident: Optional[str] = None
) -> str:
    """
    Format a place as a circle showing its token count.

    Args:
        label: Place label
        tokens: Current token count
        capacity: Capacity bound, 0 for unbounded
        ident: Node id, defaults to ``node_id(label)``

    Example:
        >>> format_place_node("foo", 1)
        '    foo(("foo: 1"))'
        >>> format_place_node("foo", 0, capacity=3)
        '    foo(("foo: 0/3"))'
    """
    count = f"{tokens}/{capacity}" if capacity else f"{tokens}"
    return f'    {ident or node_id(label)}(("{label}: {count}"))'


def format_transition_node(
    label: str, role: str, status: str, ident: Optional[str] = None
) -> str:
    """
    Format a transition as a box, classed by whether it can fire.

    Example:
        >>> format_transition_node("bar", "default", "enabled")
        '    bar["bar"]:::enabled'
        >>> format_transition_node("X11", "X", "inhibited")
        '    X11["X11 (X)"]:::inhibited'
    """
    text = label if role == "default" else f"{label} ({role})"
    return f'    {ident or node_id(label)}["{text}"]:::{status}'


def format_arc(
    source: str,
    target: str,
    weight: int = 1,
    inhibit: bool = False,
    reentry: bool = False,
) -> str:
    """
    Format an arc between two node ids. Inhibitors end in a circle, reentry
    arcs are dotted.

    Example:
        >>> format_arc("foo", "bar")
        '    foo --> bar'
        >>> format_arc("foo", "baz", 3, inhibit=True)
        '    foo --o|3| baz'
        >>> format_arc("t", "p", 0, reentry=True)
        '    t -.->|reentry| p'
    """
    if reentry:
        return f"    {source} -.->|reentry| {target}"
    edge = "--o" if inhibit else "-->"
    label = f"|{weight}|" if weight != 1 else ""
    return f"    {source} {edge}{label} {target}"


def status_class_defs() -> List[str]:
    """classDef lines for the transition statuses"""
    return [f"    classDef {name} {style}" for name, style in STATUS_STYLES.items()]


def format_comment(text: str) -> str:
    """Mermaid ``%%`` comment line; line breaks in ``text`` are flattened"""
    return f"    %% {' '.join(text.split())}"
