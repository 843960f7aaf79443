"""Pydantic Schemas — response models for the API surface.

Invariants:
    - Schemas describe API contracts only; parsing of command params is done by flexmap Types
"""
