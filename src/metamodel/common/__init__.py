"""
Common utilities shared across metamodel: Mermaid formatting and timebases.
"""
