"""API Layer — ASGI JSON command handler, routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All error responses share the FlexmapError envelope

Design Decisions:
    - Thin handlers delegate to the Shell; no business logic in the API layer
"""
