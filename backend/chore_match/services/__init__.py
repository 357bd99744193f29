"""Services Layer — the Marketplace application service.

Invariants:
    - Services orchestrate core registries; they hold no state of their own
    - Routes call services, never registries directly

Design Decisions:
    - One composition root wires every collaborator from Settings
"""
