"""End-to-end pipeline tests: answers -> completion -> streak -> trophies."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from techpath.db.models import Notification, UserTrophy
from techpath.errors import StoreUnavailable
from techpath.progress import streak_service, trophy_engine, trophy_service
from techpath.progress.course_tracker import CourseProgressTracker
from techpath.progress.events import AnswerSubmitted
from techpath.progress.pipeline import ProgressPipeline
from techpath.progress.trophy_engine import TrophyEngine
from techpath.progress.trophy_service import get_user_trophies
from techpath.social.friends_service import add_friend_by_code, ensure_friend_code

NOON = datetime(2025, 6, 10, 12, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock(monkeypatch) -> Clock:
    c = Clock(NOON)
    monkeypatch.setattr("techpath.progress.course_tracker.utc_now", c)
    return c


async def complete(pipeline, user_id, course_id, questions=4, all_first_try=True):
    result = None
    for i in range(questions):
        if not all_first_try:
            await pipeline.handle(
                AnswerSubmitted(user_id=user_id, course_id=course_id, question_index=i, is_correct=False, is_first_attempt=True)
            )
        result = await pipeline.handle(
            AnswerSubmitted(
                user_id=user_id,
                course_id=course_id,
                question_index=i,
                is_correct=True,
                is_first_attempt=all_first_try,
            )
        )
    return result


async def held_slugs(db, user_id):
    shelf = await get_user_trophies(db, user_id)
    return {t["slug"] for t in shelf["earned"]}


class TestFirstCompletion:
    @pytest.mark.asyncio
    async def test_completion_runs_every_stage(self, db_session, alice, clock):
        result = await complete(ProgressPipeline(db_session), alice.id, "data-analyst-easy")

        assert result.completed is not None
        assert result.evaluation_pending is False
        assert result.streak.current_streak == 1
        assert result.streak.activity_date == date(2025, 6, 10)
        assert [a.trophy_slug for a in result.awarded] == ["first_steps", "perfectionist"]

    @pytest.mark.asyncio
    async def test_answers_before_completion_skip_later_stages(self, db_session, alice, clock):
        result = await ProgressPipeline(db_session).handle(
            AnswerSubmitted(
                user_id=alice.id, course_id="data-analyst-easy", question_index=0, is_correct=True, is_first_attempt=True
            )
        )
        assert result.completed is None
        assert result.streak is None
        assert result.awarded == []

    @pytest.mark.asyncio
    async def test_not_perfect_without_first_try_answers(self, db_session, alice, clock):
        result = await complete(ProgressPipeline(db_session), alice.id, "data-analyst-easy", all_first_try=False)
        assert [a.trophy_slug for a in result.awarded] == ["first_steps"]

    @pytest.mark.asyncio
    async def test_completion_event_processed_twice(self, db_session, alice, clock):
        pipeline = ProgressPipeline(db_session)
        await complete(pipeline, alice.id, "data-analyst-easy")

        replay = await pipeline.handle(
            AnswerSubmitted(
                user_id=alice.id, course_id="data-analyst-easy", question_index=3, is_correct=True, is_first_attempt=True
            )
        )
        assert replay.outcome.already_completed is True
        assert replay.streak.changed is False
        assert replay.awarded == []

        count = await db_session.scalar(select(func.count(UserTrophy.id)).where(UserTrophy.user_id == alice.id))
        assert count == 2

    @pytest.mark.asyncio
    async def test_concurrent_evaluations_grant_once(self, db_session, other_session, alice, clock, monkeypatch):
        """A second evaluation that read state before the first committed."""
        await complete(ProgressPipeline(db_session), alice.id, "data-analyst-easy")

        async def nothing_held(*_args, **_kwargs):
            return set()

        async def not_held(*_args, **_kwargs):
            return False

        monkeypatch.setattr(trophy_engine, "held_trophy_ids", nothing_held)
        monkeypatch.setattr(trophy_service, "has_trophy", not_held)

        awarded = await TrophyEngine(other_session).evaluate(alice.id)
        assert awarded == []
        assert await held_slugs(db_session, alice.id) == {"first_steps", "perfectionist"}

    @pytest.mark.asyncio
    async def test_notifications_recorded(self, db_session, alice, clock):
        await complete(ProgressPipeline(db_session), alice.id, "data-analyst-easy")
        rows = (await db_session.execute(select(Notification.subtype).where(Notification.user_id == alice.id))).scalars()
        assert sorted(rows) == ["course_completed", "streak_updated", "trophy_awarded", "trophy_awarded"]


class TestStreakAcrossDays:
    @pytest.mark.asyncio
    async def test_completions_over_several_days(self, db_session, alice, clock):
        pipeline = ProgressPipeline(db_session)

        r = await complete(pipeline, alice.id, "data-analyst-easy")
        assert (r.streak.current_streak, r.streak.max_streak) == (1, 1)

        r = await complete(pipeline, alice.id, "ux-designer-easy")
        assert (r.streak.current_streak, r.streak.changed) == (1, False)

        clock.now = NOON + timedelta(days=1)
        r = await complete(pipeline, alice.id, "software-engineer-easy")
        assert (r.streak.current_streak, r.streak.max_streak) == (2, 2)
        # Three roles explored
        assert "explorer" in {a.trophy_slug for a in r.awarded}

        clock.now = NOON + timedelta(days=4)
        r = await complete(pipeline, alice.id, "data-analyst-medium")
        assert (r.streak.current_streak, r.streak.max_streak) == (1, 2)
        assert "role_halfway" in {a.trophy_slug for a in r.awarded}

    @pytest.mark.asyncio
    async def test_late_evening_and_early_morning_are_different_days(self, db_session, alice, clock):
        pipeline = ProgressPipeline(db_session)
        clock.now = datetime(2025, 6, 10, 23, 59, tzinfo=timezone.utc)
        r = await complete(pipeline, alice.id, "data-analyst-easy")
        assert "night_owl" in {a.trophy_slug for a in r.awarded}

        clock.now = datetime(2025, 6, 11, 0, 1, tzinfo=timezone.utc)
        r = await complete(pipeline, alice.id, "ux-designer-easy")
        assert r.streak.current_streak == 2
        assert "early_bird" in {a.trophy_slug for a in r.awarded}


class TestStageFailures:
    @pytest.mark.asyncio
    async def test_streak_failure_leaves_evaluation_pending(self, db_session, alice, clock, monkeypatch):
        # The failed stage rolls the session back, expiring loaded rows
        user_id = alice.id
        real_stage = streak_service.record_activity

        async def unavailable(*_args, **_kwargs):
            raise StoreUnavailable("record_activity failed: connection reset")

        monkeypatch.setattr(streak_service, "record_activity", unavailable)
        pipeline = ProgressPipeline(db_session)
        result = await complete(pipeline, user_id, "data-analyst-easy")

        assert result.completed is not None
        assert result.evaluation_pending is True
        assert result.streak is None
        assert result.progress.completed_at is not None
        assert result.awarded == []
        # The answer itself was recorded
        progress = await CourseProgressTracker(db_session).get_progress(user_id, "data-analyst-easy")
        assert progress.completed_at is not None

        monkeypatch.setattr(streak_service, "record_activity", real_stage)
        retried = await pipeline.retry_evaluation(user_id, "data-analyst-easy")
        assert retried.evaluation_pending is False
        assert retried.streak.current_streak == 1
        assert [a.trophy_slug for a in retried.awarded] == ["first_steps", "perfectionist"]

    @pytest.mark.asyncio
    async def test_trophy_failure_keeps_streak(self, db_session, alice, clock, monkeypatch):
        user_id = alice.id
        real_stage = TrophyEngine.evaluate

        async def unavailable(*_args, **_kwargs):
            raise StoreUnavailable("evaluate_trophies failed: timeout")

        monkeypatch.setattr(TrophyEngine, "evaluate", unavailable)
        pipeline = ProgressPipeline(db_session)
        result = await complete(pipeline, user_id, "data-analyst-easy")
        assert result.evaluation_pending is True
        assert result.streak.current_streak == 1
        assert result.awarded == []

        monkeypatch.setattr(TrophyEngine, "evaluate", real_stage)
        retried = await ProgressPipeline(db_session).retry_evaluation(user_id, "data-analyst-easy")
        # Same completion day: the streak does not move twice
        assert retried.streak.changed is False
        assert retried.streak.current_streak == 1
        assert [a.trophy_slug for a in retried.awarded] == ["first_steps", "perfectionist"]

    @pytest.mark.asyncio
    async def test_redis_failure_does_not_break_pipeline(self, db_session, alice, clock):
        redis = AsyncMock()
        redis.publish.side_effect = ConnectionError("redis down")
        result = await complete(ProgressPipeline(db_session, redis=redis), alice.id, "data-analyst-easy")
        assert result.evaluation_pending is False
        assert len(result.awarded) == 2
        assert redis.publish.await_count == 4


class TestMonotonicTrophies:
    @pytest.mark.asyncio
    async def test_reset_keeps_trophies(self, db_session, alice, clock):
        pipeline = ProgressPipeline(db_session)
        await complete(pipeline, alice.id, "data-analyst-easy")
        await CourseProgressTracker(db_session).reset_course(alice.id, "data-analyst-easy")

        assert await held_slugs(db_session, alice.id) == {"first_steps", "perfectionist"}

        # Completing again grants nothing new
        r = await complete(pipeline, alice.id, "data-analyst-easy")
        assert r.awarded == []

    @pytest.mark.asyncio
    async def test_top_of_the_class_survives_friend_catching_up(self, db_session, alice, bob, clock):
        code = await ensure_friend_code(db_session, alice.id)
        await add_friend_by_code(db_session, bob.id, code)
        pipeline = ProgressPipeline(db_session)

        r = await complete(pipeline, alice.id, "data-analyst-easy")
        assert [a.trophy_slug for a in r.awarded] == ["first_steps", "perfectionist", "top_of_the_class"]

        # Bob catches up with Alice's three trophies; she keeps hers
        await complete(pipeline, bob.id, "ux-designer-easy")
        await complete(pipeline, bob.id, "ux-designer-medium")
        bob_trophies = await held_slugs(db_session, bob.id)
        assert bob_trophies == {"first_steps", "perfectionist", "role_halfway"}
        assert "top_of_the_class" in await held_slugs(db_session, alice.id)

    @pytest.mark.asyncio
    async def test_tie_with_friend_is_not_top(self, db_session, alice, bob, clock):
        pipeline = ProgressPipeline(db_session)
        # Bob earns first_steps and perfectionist before they are friends
        await complete(pipeline, bob.id, "ux-designer-easy")

        code = await ensure_friend_code(db_session, alice.id)
        await add_friend_by_code(db_session, bob.id, code)

        r = await complete(pipeline, alice.id, "data-analyst-easy")
        assert [a.trophy_slug for a in r.awarded] == ["first_steps", "perfectionist"]
