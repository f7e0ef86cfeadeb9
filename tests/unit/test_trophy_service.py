"""Trophy service tests: catalogue, awarding, duplicate prevention."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from techpath.db.models import UserTrophy
from techpath.errors import NotFound
from techpath.progress import trophy_service
from techpath.progress.seed import TROPHY_SEED_DATA, seed_catalogue
from techpath.progress.trophy_service import (
    TrophySpec,
    award_trophy,
    count_trophies,
    get_trophy_by_slug,
    get_user_trophies,
    grant_trophy,
    has_trophy,
    list_trophies,
)


async def trophy_rows(db, user_id, slug):
    trophy = await get_trophy_by_slug(db, slug)
    result = await db.execute(
        select(func.count(UserTrophy.id)).where(UserTrophy.user_id == user_id, UserTrophy.trophy_id == trophy.id)
    )
    return result.scalar_one()


class TestCatalogue:
    @pytest.mark.asyncio
    async def test_seeded_in_sort_order(self, db_session):
        catalogue = await list_trophies(db_session)
        assert [t.slug for t in catalogue] == [t["slug"] for t in sorted(TROPHY_SEED_DATA, key=lambda t: t["sort_order"])]

    @pytest.mark.asyncio
    async def test_reseeding_is_idempotent(self, db_session):
        await seed_catalogue(db_session)
        assert len(await list_trophies(db_session)) == len(TROPHY_SEED_DATA)

    @pytest.mark.asyncio
    async def test_lookup_by_slug(self, db_session):
        trophy = await get_trophy_by_slug(db_session, "first_steps")
        assert trophy.name == "First Steps"
        assert trophy.criteria_type == "courses_completed"
        assert trophy.criteria_value == {"count": 1}
        assert await get_trophy_by_slug(db_session, "nope") is None


class TestAwardTrophy:
    @pytest.mark.asyncio
    async def test_award(self, db_session, alice):
        event = await award_trophy(db_session, alice.id, "first_steps")
        assert event is not None
        assert event.trophy_slug == "first_steps"
        assert event.trophy_name == "First Steps"

        trophy = await get_trophy_by_slug(db_session, "first_steps")
        assert await has_trophy(db_session, alice.id, trophy.id) is True

    @pytest.mark.asyncio
    async def test_second_award_is_a_no_op(self, db_session, alice):
        await award_trophy(db_session, alice.id, "first_steps")
        assert await award_trophy(db_session, alice.id, "first_steps") is None
        assert await trophy_rows(db_session, alice.id, "first_steps") == 1

    @pytest.mark.asyncio
    async def test_unknown_slug(self, db_session, alice):
        with pytest.raises(NotFound):
            await award_trophy(db_session, alice.id, "does_not_exist")

    @pytest.mark.asyncio
    async def test_race_loser_gets_no_error(self, db_session, other_session, alice, monkeypatch):
        """Both evaluations pass the check; the UNIQUE constraint picks one."""
        spec = TrophySpec.from_model(await get_trophy_by_slug(db_session, "first_steps"))

        winner = await grant_trophy(db_session, alice.id, spec)
        assert winner is not None

        async def stale_check(*_args, **_kwargs):
            return False

        monkeypatch.setattr(trophy_service, "has_trophy", stale_check)
        loser = await grant_trophy(other_session, alice.id, spec)
        assert loser is None
        assert await trophy_rows(db_session, alice.id, "first_steps") == 1


class TestUserTrophies:
    @pytest.mark.asyncio
    async def test_shelf(self, db_session, alice):
        await award_trophy(db_session, alice.id, "first_steps")
        shelf = await get_user_trophies(db_session, alice.id)
        assert shelf["total_earned"] == 1
        assert shelf["total_available"] == len(TROPHY_SEED_DATA)
        assert [t["slug"] for t in shelf["earned"]] == ["first_steps"]
        assert shelf["earned"][0]["earned_at"].tzinfo is not None
        assert "first_steps" not in {t["slug"] for t in shelf["locked"]}

    @pytest.mark.asyncio
    async def test_count_trophies(self, db_session, alice, bob):
        await award_trophy(db_session, alice.id, "first_steps")
        await award_trophy(db_session, alice.id, "perfectionist")
        assert await count_trophies(db_session, [alice.id, bob.id]) == {alice.id: 2, bob.id: 0}
        assert await count_trophies(db_session, []) == {}
