"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Domain types from core/ used for enum fields
    - Response schemas are built from frozen domain values, never from raw dicts

Design Decisions:
    - Separate from core entities: schemas are API contracts, entities are domain state
"""
