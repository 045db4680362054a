"""Route Modules — one file per audience/concern (public, member, admin, cron).

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain business logic (delegate to services/core)
    - Access checks happen in dependencies, never inline

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
