"""Core Layer — the map parser: converters, Type/Record engine, error model. No IO, no async.

Invariants:
    - No module in core/ imports from services/, api/, or infrastructure/
    - Converters are pure and deterministic

Design Decisions:
    - Functional core separated from the async command shell and HTTP adapter
"""
