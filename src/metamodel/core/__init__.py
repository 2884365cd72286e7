#!/usr/bin/env python3
"""
metamodel.core - net definition, indexing, firing and editing

Public API for defining Petri nets and executing them as integer vectors.
"""

from .specs import (
    Vector,
    NetType,
    Position,
    Role,
    Place,
    Guard,
    Transition,
    Arc,
    Result,
    Net,
)

from .builder import (
    NetBuilder,
    PlaceNode,
    TransitionNode,
)

from .declaration import (
    VERSION,
    NetDeclaration,
    PlaceDeclaration,
    TransitionDeclaration,
    ArcDeclaration,
)

from .indexer import index_arcs, rebuild_arcs

from .firing import (
    VectorSum,
    vector_add,
    guard_fails,
    evaluate,
    fire,
    push_state,
    enabled_actions,
)

from .model import Model, new_model, loads

__all__ = [
    # Core types
    'Vector',
    'NetType',
    'Position',
    'Role',
    'Place',
    'Guard',
    'Transition',
    'Arc',
    'Result',
    'Net',

    # Builder
    'NetBuilder',
    'PlaceNode',
    'TransitionNode',

    # Declarative format
    'VERSION',
    'NetDeclaration',
    'PlaceDeclaration',
    'TransitionDeclaration',
    'ArcDeclaration',

    # Indexer
    'index_arcs',
    'rebuild_arcs',

    # Firing
    'VectorSum',
    'vector_add',
    'guard_fails',
    'evaluate',
    'fire',
    'push_state',
    'enabled_actions',

    # Main API
    'Model',
    'new_model',
    'loads',
]
