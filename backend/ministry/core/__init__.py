"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions take "now" as a parameter where time matters, so they stay deterministic

Design Decisions:
    - Functional core separated from imperative shell (ADR: pure core, IO at the edges)
"""
