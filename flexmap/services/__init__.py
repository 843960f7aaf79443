"""Services Layer — the command shell and handler-result codec.

Invariants:
    - Shell uses an explicit name -> Command mapping (no auto-discovery)
    - Services consume core only through Type.parse and Record
"""
