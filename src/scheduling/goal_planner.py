from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List, Sequence, Tuple

from llm.provider_selector import ProviderSelector
from scheduling.schedule_generator import PLAN_DAYS, to_plan_items
from workbench.errors import WorkbenchError
from workbench.models import PlanItem

logger = logging.getLogger(__name__)


def build_fallback_plan(goal: str, start_date: date, days: int = PLAN_DAYS) -> List[PlanItem]:
    """Deterministic plan used when no AI provider can produce one."""
    return [
        PlanItem(
            day=i,
            date=start_date + timedelta(days=i - 1),
            task=f"Work on: {goal} (Day {i})",
            description=f"Day {i} tasks and milestones",
        )
        for i in range(1, days + 1)
    ]


def build_goal_prompt(goal: str, strategy: str, constraints: Sequence[str]) -> str:
    lines = [
        "You are a productivity expert. Create a detailed 2-week (14-day) plan "
        f'to achieve this goal: "{goal}"',
        "",
    ]
    if strategy:
        lines.append(f"Strategy: {strategy}")
    if constraints:
        lines.append(f"Constraints: {', '.join(constraints)}")
    lines += [
        "",
        "Generate a JSON array with 14 items, one for each day. Each item should have:",
        "- day: number (1-14)",
        "- task: string (specific task for that day)",
        "- description: string (what to do)",
        '- duration: string (estimated time, e.g., "2 hours")',
        "",
        "Make it specific, actionable, and broken down into daily tasks that build toward the goal.",
    ]
    return "\n".join(lines)


class GoalPlanner:
    """Goal-only planning: uses a real provider when one exists, else a fixed plan."""

    def __init__(self, selector: ProviderSelector):
        self.selector = selector

    async def generate(
        self,
        goal: str,
        start_date: date,
        strategy: str = "",
        constraints: Sequence[str] = (),
    ) -> Tuple[List[PlanItem], str]:
        """Returns (plan, source) where source is the provider name or "fallback"."""
        try:
            provider = await self.selector.select_provider(strict=True)
            raw = await provider.generate_json(build_goal_prompt(goal, strategy, constraints))
            return to_plan_items(raw, start_date), provider.name
        except WorkbenchError as e:
            logger.warning(f"Falling back to fixed plan for goal {goal!r}: {e}")
            return build_fallback_plan(goal, start_date), "fallback"
