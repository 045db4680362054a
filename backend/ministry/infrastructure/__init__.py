"""Infrastructure Layer — provider clients (Anthropic, Resend, Twilio), DB, logging.

Invariants:
    - Infrastructure never imports from core/ domain logic
    - All external calls wrapped with timeout and error mapping to MinistryError

Design Decisions:
    - Thin resilient wrappers over raw clients, one file per provider
"""
