"""Access Rules — role hierarchy, tier gating, and partner tier catalogue.

Invariants:
    - Pure functions: no IO, no DB, no FastAPI imports
    - Unknown or missing roles/tiers index as the lowest rung (free)
    - A missing role satisfies only a `free` requirement
    - Staff and admins bypass tier gating on content

Design Decisions:
    - Ordinal comparison over permission tables: the ladders are strictly linear
    - PARTNER_TIERS lives here (not DB): the giving forecast and the public
      partner page must agree on the monthly amounts
"""

from typing import Any, Iterable

from ministry.core.domain_types import Role, Tier

ROLE_HIERARCHY: tuple[Role, ...] = (
    Role.FREE, Role.MEMBER, Role.PARTNER, Role.STAFF, Role.ADMIN,
)
TIER_HIERARCHY: tuple[Tier, ...] = (Tier.FREE, Tier.PARTNER, Tier.COVENANT)

PARTNER_TIERS: tuple[dict, ...] = (
    {
        "slug": Tier.FREE.value,
        "name": "Friend",
        "monthly_amount": 0,
        "benefits": [
            "Public teachings and prophetic words",
            "Prayer wall access",
            "Weekly newsletter",
        ],
    },
    {
        "slug": Tier.PARTNER.value,
        "name": "Partner",
        "monthly_amount": 50,
        "benefits": [
            "Everything in Friend",
            "Partner-only teachings and ebooks",
            "Live service replays",
            "Monthly partner call",
        ],
    },
    {
        "slug": Tier.COVENANT.value,
        "name": "Covenant Partner",
        "monthly_amount": 150,
        "benefits": [
            "Everything in Partner",
            "Full resource library",
            "Personal prophetic word each season",
            "Covenant gatherings",
        ],
    },
)

TIER_MONTHLY_AMOUNT: dict[str, int] = {
    t["slug"]: t["monthly_amount"] for t in PARTNER_TIERS
}


def role_level(role: str | None) -> int:
    """Numeric position of role in ROLE_HIERARCHY (0 when unknown)."""
    for index, candidate in enumerate(ROLE_HIERARCHY):
        if candidate.value == role:
            return index
    return 0


def has_minimum_role(role: str | None, required: Role) -> bool:
    if not role:
        return required == Role.FREE
    return role_level(role) >= role_level(required.value)


def is_staff_or_above(role: str | None) -> bool:
    return has_minimum_role(role, Role.STAFF)


def is_admin(role: str | None) -> bool:
    return role == Role.ADMIN.value


def assignable_roles(assigner_role: str | None) -> list[str]:
    """Roles the assigner may hand out. Staff cannot mint staff or admins."""
    if is_admin(assigner_role):
        return [r.value for r in ROLE_HIERARCHY]
    if is_staff_or_above(assigner_role):
        return [Role.FREE.value, Role.MEMBER.value, Role.PARTNER.value]
    return []


def can_change_role(assigner_role: str | None, current_role: str | None, new_role: str) -> bool:
    """Both the target's current role and the new one must be assignable by the assigner.

    Staff can move people between free/member/partner but cannot touch staff or admins.
    """
    allowed = assignable_roles(assigner_role)
    return new_role in allowed and (current_role or Role.FREE.value) in allowed


def normalize_tier(tier: str | None) -> str:
    """Map unknown/missing tier strings to `free`."""
    for candidate in TIER_HIERARCHY:
        if candidate.value == tier:
            return tier
    return Tier.FREE.value


def tier_level(tier: str | None) -> int:
    return [t.value for t in TIER_HIERARCHY].index(normalize_tier(tier))


def can_access_tier(
    member_tier: str | None, tier_required: str | None, role: str | None = None,
) -> bool:
    """Tier gating: member's tier index must reach the content's requirement."""
    if is_staff_or_above(role):
        return True
    return tier_level(member_tier) >= tier_level(tier_required)


def add_access_info(
    items: Iterable[dict[str, Any]],
    member_tier: str | None,
    role: str | None = None,
    tier_field: str = "tier_required",
) -> list[dict[str, Any]]:
    """Copy items, normalizing tier_required and adding has_access."""
    annotated = []
    for item in items:
        required = normalize_tier(item.get(tier_field))
        annotated.append({
            **item,
            tier_field: required,
            "has_access": can_access_tier(member_tier, required, role),
        })
    return annotated


def upgrade_message(tier_required: str | None) -> str:
    match normalize_tier(tier_required):
        case Tier.COVENANT.value:
            return "Become a Covenant Partner to unlock this content."
        case Tier.PARTNER.value:
            return "Become a Partner to unlock this content."
        case _:
            return "Sign up to access this content."
