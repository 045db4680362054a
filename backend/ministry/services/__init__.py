"""Services Layer — async orchestration of DB, providers and core rules.

Invariants:
    - One service module per feature area; routes call services, never models directly
    - Services commit their own unit of work

Design Decisions:
    - Decisions live in core/; services only load, call core, persist
"""
