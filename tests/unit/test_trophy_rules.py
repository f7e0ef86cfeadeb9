"""Trophy rule table tests: pure predicates over a TrophyContext."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from techpath.progress.seed import TROPHY_SEED_DATA
from techpath.progress.trophy_engine import RULES, CompletedCourse, TrophyContext

UTC = ZoneInfo("UTC")
NOON = datetime(2025, 6, 10, 12, 0, tzinfo=timezone.utc)
PER_ROLE = {"Data Analyst": 3, "UX Designer": 3, "Software Engineer": 3}


def done(course_id, role="Data Analyst", at=NOON, correct=4, total=4):
    return CompletedCourse(course_id, role, at, correct, total)


def ctx(completions=(), streak=0, held=(), friends=None, tz=UTC):
    return TrophyContext(
        user_id="u",
        completions=list(completions),
        courses_per_role=PER_ROLE,
        current_streak=streak,
        held=set(held),
        friend_trophy_counts=friends or {},
        tz=tz,
    )


class TestRuleTable:
    def test_every_seeded_trophy_has_a_rule(self):
        for trophy in TROPHY_SEED_DATA:
            assert trophy["criteria_type"] in RULES, trophy["slug"]

    def test_social_rule_runs_last(self):
        last = max(TROPHY_SEED_DATA, key=lambda t: t["sort_order"])
        assert last["criteria_type"] == "friends_top_trophies"


class TestCourseRules:
    def test_courses_completed(self):
        rule = RULES["courses_completed"]
        assert rule(ctx(), {"count": 1}) is False
        assert rule(ctx([done("a")]), {"count": 1}) is True
        assert rule(ctx([done(str(i)) for i in range(4)]), {"count": 5}) is False

    def test_perfect_course(self):
        rule = RULES["perfect_course"]
        assert rule(ctx([done("a", correct=3)]), {}) is False
        assert rule(ctx([done("a", correct=3), done("b", correct=4)]), {}) is True

    @pytest.mark.parametrize(
        ("completed", "percent", "expected"),
        [
            (1, 50, False),
            (2, 50, True),
            (2, 100, False),
            (3, 100, True),
        ],
    )
    def test_role_completion(self, completed, percent, expected):
        completions = [done(f"da-{i}") for i in range(completed)]
        assert RULES["role_completion"](ctx(completions), {"percent": percent}) is expected

    def test_role_completion_does_not_mix_roles(self):
        completions = [done("da-1"), done("ux-1", role="UX Designer")]
        assert RULES["role_completion"](ctx(completions), {"percent": 50}) is False

    def test_roles_explored(self):
        rule = RULES["roles_explored"]
        two = [done("a"), done("b", role="UX Designer")]
        assert rule(ctx(two), {"count": 3}) is False
        assert rule(ctx([*two, done("c", role="Software Engineer")]), {"count": 3}) is True


class TestStreakRule:
    def test_threshold(self):
        rule = RULES["streak"]
        assert rule(ctx(streak=6), {"days": 7}) is False
        assert rule(ctx(streak=7), {"days": 7}) is True


class TestTimeOfDayRules:
    def test_early_bird(self):
        rule = RULES["completed_before_hour"]
        assert rule(ctx([done("a", at=NOON.replace(hour=8, minute=59))]), {"hour": 9}) is True
        assert rule(ctx([done("a", at=NOON.replace(hour=9))]), {"hour": 9}) is False

    def test_night_owl(self):
        rule = RULES["completed_from_hour"]
        assert rule(ctx([done("a", at=NOON.replace(hour=22))]), {"hour": 22}) is True
        assert rule(ctx([done("a", at=NOON.replace(hour=21, minute=59))]), {"hour": 22}) is False

    def test_uses_configured_zone(self):
        # 23:00 UTC is 08:00 in Tokyo
        late = NOON.replace(hour=23)
        assert RULES["completed_before_hour"](ctx([done("a", at=late)], tz=ZoneInfo("Asia/Tokyo")), {"hour": 9})


class TestSocialRule:
    rule = staticmethod(RULES["friends_top_trophies"])

    def test_needs_friends(self):
        assert self.rule(ctx(held={1, 2}), {}) is False

    def test_needs_a_trophy(self):
        assert self.rule(ctx(held=set(), friends={"f": 0}), {}) is False

    def test_strictly_more_than_every_friend(self):
        assert self.rule(ctx(held={1, 2, 3}, friends={"f1": 2, "f2": 0}), {}) is True

    def test_tie_excludes(self):
        assert self.rule(ctx(held={1, 2}, friends={"f1": 2, "f2": 0}), {}) is False
