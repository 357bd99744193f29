"""Infrastructure Layer — logging, credential hashing and external-service boundaries.

Invariants:
    - Infrastructure never holds domain state
    - Implementations satisfy the Protocols in core/repository_protocols.py

Design Decisions:
    - Concrete collaborators live here so core stays free of crypto and IO
"""
