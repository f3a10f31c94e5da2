from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from llm.providers.base import LLMProvider
from llm.schemas import GenerationOptions
from workbench.errors import GenerationError
from workbench.models import ChatMessage, PlanItem, StrategyContext

logger = logging.getLogger(__name__)

PLAN_DAYS = 14
CUSTOMER_ROLE = "assistant"

# prompt-size budgets (characters)
MAX_CUSTOMER_CHARS = 1000
MAX_MARKET_CHARS = 500
MAX_TIMELINE_CHARS = 300
MAX_RECOMMENDATIONS = 5


def customer_insights(transcript: Sequence[ChatMessage], limit: int = MAX_CUSTOMER_CHARS) -> str:
    """Concatenate what the simulated customer said, truncated to `limit` chars."""
    said = [m.content for m in transcript if m.role == CUSTOMER_ROLE and m.content]
    return "\n\n".join(said)[:limit]


def build_schedule_prompt(strategy: StrategyContext, transcript: Sequence[ChatMessage]) -> str:
    recommendations = strategy.strategic_recommendations[:MAX_RECOMMENDATIONS]
    return f"""You are a product management expert. Create a detailed 2-week (14-day) action plan for a product manager based on their strategy and customer insights.

STRATEGY CONTEXT:
- North Star Metric: {strategy.north_star}
- Strategic Recommendations: {', '.join(recommendations)}
- Market Opportunity: {strategy.market_opportunity[:MAX_MARKET_CHARS]}
- Timeline: {strategy.timeline[:MAX_TIMELINE_CHARS]}
- Risks: {', '.join(strategy.risks)}

CUSTOMER INSIGHTS FROM CHAT:
{customer_insights(transcript)}

Generate a JSON array with 14 items, one for each day. Each item should have:
- day: number (1-14)
- task: string (specific, actionable task title)
- description: string (what to accomplish that day)
- duration: string (e.g., "2 hours", "3 hours")
- priority: "high" | "medium" | "low"
- category: string (e.g., "Research", "Development", "Customer Validation", "Planning")"""


def to_plan_items(raw: Any, start_date: date) -> List[PlanItem]:
    """Turn the provider's JSON array into dated PlanItems.

    Day and date come from position: element i is day i+1 on start_date + i.
    The number of elements is not enforced.
    """
    if not isinstance(raw, list):
        raise GenerationError(
            f"Expected a JSON array of plan items, got {type(raw).__name__}"
        )

    items: List[PlanItem] = []
    for index, element in enumerate(raw):
        if not isinstance(element, dict):
            raise GenerationError(f"Plan item {index + 1} is not an object")
        fields = {k: v for k, v in element.items() if k not in {"day", "date", "status"}}
        try:
            items.append(
                PlanItem(
                    **fields,
                    day=index + 1,
                    date=start_date + timedelta(days=index),
                )
            )
        except ValidationError as e:
            raise GenerationError(f"Plan item {index + 1} is invalid: {e}") from e
    return items


class ScheduleGenerator:
    """Builds a day-by-day plan from strategy output and the customer chat."""

    def __init__(self, provider: LLMProvider, options: Optional[GenerationOptions] = None):
        self.provider = provider
        self.options = options

    async def generate(
        self,
        strategy: StrategyContext,
        transcript: Sequence[ChatMessage],
        start_date: date,
    ) -> List[PlanItem]:
        prompt = build_schedule_prompt(strategy, transcript)
        raw = await self.provider.generate_json(prompt, self.options)
        plan = to_plan_items(raw, start_date)
        if len(plan) != PLAN_DAYS:
            logger.warning(f"{self.provider.name} returned {len(plan)} plan items, expected {PLAN_DAYS}")
        logger.info(f"Generated {len(plan)}-day plan starting {start_date.isoformat()}")
        return plan
