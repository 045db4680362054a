"""Giving Forecast Service — loads a year of donations and tier counts, adds AI insights.

Invariants:
    - Every donation from the trailing 365 days feeds the monthly history, whatever its status
    - current_mrr = sum of recurring donations whose status is "active" (live subscriptions),
      independent of when they were created
    - AI insight failures degrade to "" and never fail the request
"""

import logging
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ministry.config import get_settings
from ministry.core.dates import utcnow
from ministry.core.errors import AnthropicAPIError
from ministry.core.giving_forecast import build_forecast, insight_prompt
from ministry.infrastructure.anthropic_client import ResilientAnthropicClient
from ministry.models.donation import Donation
from ministry.models.member import Member

logger = logging.getLogger(__name__)

INSIGHT_SYSTEM_PROMPT = (
    "You are a financial advisor for a ministry. Analyze giving data and provide "
    "2-3 brief, actionable insights. Be encouraging but realistic. Use specific "
    "numbers. Keep it under 100 words."
)


async def current_mrr(db: AsyncSession) -> float:
    total = await db.scalar(
        select(func.coalesce(func.sum(Donation.amount), 0)).where(
            Donation.is_recurring.is_(True),
            Donation.status == "active",
        ),
    )
    return float(total or 0)


async def get_forecast(
    db: AsyncSession, llm: ResilientAnthropicClient, months: int = 6,
) -> dict:
    settings = get_settings()
    now = utcnow()
    donations = [
        d.as_dict() for d in (await db.execute(
            select(Donation)
            .where(Donation.created_at >= now - timedelta(days=365))
            .order_by(Donation.created_at),
        )).scalars().all()
    ]
    tier_rows = await db.execute(
        select(Member.tier, func.count()).group_by(Member.tier),
    )
    tier_counts = {row[0]: row[1] for row in tier_rows.all()}

    forecast = build_forecast(
        donations=donations,
        current_mrr=await current_mrr(db),
        tier_counts=tier_counts,
        now=now,
        months=months,
        annual_goal=settings.annual_giving_goal,
    )
    forecast["insights"] = await _insights(llm, forecast)
    return forecast


async def _insights(llm: ResilientAnthropicClient, forecast: dict) -> str:
    try:
        completion = await llm.complete(
            system=INSIGHT_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": insight_prompt(forecast)}],
            max_tokens=300,
        )
    except AnthropicAPIError as e:
        logger.warning(f"Giving insights unavailable: {e.message}")
        return ""
    return completion.text.strip()
