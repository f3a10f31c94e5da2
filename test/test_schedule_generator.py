import json
from datetime import date, timedelta

import pytest

from llm.providers.mock_provider import MockProvider
from scheduling.schedule_generator import (
    MAX_CUSTOMER_CHARS,
    ScheduleGenerator,
    build_schedule_prompt,
    customer_insights,
)
from workbench.errors import GenerationError
from workbench.models import ChatMessage, StrategyContext

STRATEGY = StrategyContext.model_validate(
    {
        "northStar": "Weekly active teams",
        "strategicRecommendations": ["Ship onboarding v2", "Partner with Slack"],
        "marketOpportunity": "Mid-market PM tooling is fragmented.",
        "risksAndChallenges": [{"risk": "Incumbent bundling", "mitigation": "Integrate"}, "Churn"],
    }
)

TRANSCRIPT = [
    ChatMessage(role="user", content="What slows you down?"),
    ChatMessage(role="assistant", content="Status meetings eat my mornings."),
    ChatMessage(role="user", content="Anything else?"),
    ChatMessage(role="assistant", content="Jira is too heavy for my team."),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("start", [date(2026, 1, 1), date(2026, 2, 20), date(2026, 12, 25)])
async def test_dates_follow_day_numbers(fake_provider_factory, plan_json, start):
    provider = fake_provider_factory(plan_json())
    plan = await ScheduleGenerator(provider).generate(STRATEGY, TRANSCRIPT, start)

    assert len(plan) == 14
    for item in plan:
        assert item.date == start + timedelta(days=item.day - 1)
        assert item.status == "planned"
    assert [item.day for item in plan] == list(range(1, 15))


@pytest.mark.asyncio
async def test_model_day_numbers_are_overridden(fake_provider_factory):
    raw = json.dumps([{"day": 7, "task": "A"}, {"day": 3, "task": "B", "date": "1999-01-01"}])
    plan = await ScheduleGenerator(fake_provider_factory(raw)).generate(
        STRATEGY, TRANSCRIPT, date(2026, 3, 1)
    )
    assert [(p.day, p.date) for p in plan] == [(1, date(2026, 3, 1)), (2, date(2026, 3, 2))]


@pytest.mark.asyncio
async def test_count_mismatch_passes_through(fake_provider_factory, plan_json):
    plan = await ScheduleGenerator(fake_provider_factory(plan_json(days=3))).generate(
        STRATEGY, TRANSCRIPT, date(2026, 3, 1)
    )
    assert len(plan) == 3


@pytest.mark.asyncio
async def test_fenced_reply_is_accepted(fake_provider_factory, plan_json):
    provider = fake_provider_factory(f"```json\n{plan_json()}\n```")
    plan = await ScheduleGenerator(provider).generate(STRATEGY, TRANSCRIPT, date(2026, 3, 1))
    assert plan[0].task == "Task 1"
    assert plan[0].priority == "high"


@pytest.mark.asyncio
async def test_unknown_priority_becomes_medium(fake_provider_factory, plan_json):
    provider = fake_provider_factory(plan_json(priority="URGENT"))
    plan = await ScheduleGenerator(provider).generate(STRATEGY, TRANSCRIPT, date(2026, 3, 1))
    assert {item.priority for item in plan} == {"medium"}


@pytest.mark.asyncio
async def test_object_reply_fails(fake_provider_factory):
    provider = fake_provider_factory('{"plan": "later"}')
    with pytest.raises(GenerationError):
        await ScheduleGenerator(provider).generate(STRATEGY, TRANSCRIPT, date(2026, 3, 1))


@pytest.mark.asyncio
async def test_item_without_task_fails(fake_provider_factory):
    provider = fake_provider_factory('[{"day": 1, "description": "no title"}]')
    with pytest.raises(GenerationError):
        await ScheduleGenerator(provider).generate(STRATEGY, TRANSCRIPT, date(2026, 3, 1))


@pytest.mark.asyncio
async def test_provider_failure_propagates():
    class FailingProvider:
        name = "failing"

        async def generate_json(self, prompt, options=None):
            raise GenerationError("upstream down")

    with pytest.raises(GenerationError, match="upstream down"):
        await ScheduleGenerator(FailingProvider()).generate(STRATEGY, TRANSCRIPT, date(2026, 3, 1))


def test_prompt_embeds_strategy_and_customer_turns_only():
    prompt = build_schedule_prompt(STRATEGY, TRANSCRIPT)

    assert "Weekly active teams" in prompt
    assert "Ship onboarding v2, Partner with Slack" in prompt
    assert "Mid-market PM tooling" in prompt
    assert "Incumbent bundling, Churn" in prompt
    assert "Status meetings eat my mornings." in prompt
    assert "Jira is too heavy" in prompt
    assert "What slows you down?" not in prompt


def test_customer_insights_are_truncated():
    long_turns = [ChatMessage(role="assistant", content="x" * 800) for _ in range(3)]
    assert len(customer_insights(long_turns)) == MAX_CUSTOMER_CHARS


@pytest.mark.asyncio
async def test_demo_provider_cannot_produce_a_plan():
    with pytest.raises(GenerationError):
        await ScheduleGenerator(MockProvider()).generate(STRATEGY, TRANSCRIPT, date(2026, 3, 1))
