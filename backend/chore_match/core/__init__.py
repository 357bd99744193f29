"""Core Layer — pure domain logic and in-memory registries, no HTTP, no IO.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or schemas/
    - Registries are the only owners of mutable state; everything else is pure

Design Decisions:
    - Functional core separated from imperative shell
"""
