# tests/test_statistics_service.py
import pytest

from egghunt.repositories import FindHistoryFilter
from egghunt.services import campaigns, finds, qr_codes, users
from egghunt.services import statistics as stats


async def _seed(db):
    camp = await campaigns.create(db, name="Easter", description="hunt", created_by="admin")
    q1 = await qr_codes.create(db, campaign_id=camp.id, title="Lobby")
    q2 = await qr_codes.create(db, campaign_id=camp.id, title="Roof")
    q3 = await qr_codes.create(db, campaign_id=camp.id, title="Cellar")
    await qr_codes.create(db, campaign_id=camp.id, title="Garage")
    alice = await users.create(db, name="alice")
    bob = await users.create(db, name="bob")
    await users.create(db, name="idle")
    for u, q in [(alice, q1), (bob, q1), (alice, q2), (alice, q2)]:
        await finds.register_find(db, qr_code_id=q.id, user_id=u.id, ip_address="10.0.0.1", user_agent="ua")
    await qr_codes.set_active(db, q3.id, False)
    return camp, (q1, q2, q3), (alice, bob)


@pytest.mark.asyncio
class TestStatisticsLoaders:
    async def test_overview_matches_raw_counts(self, db):
        await _seed(db)
        result = await stats.get_system_overview(db)

        assert result.total_campaigns == 1
        assert result.active_campaigns == 1
        assert result.total_qr_codes == 4
        assert result.total_users == 3
        assert result.total_finds == 4
        assert result.completed_finds == 4
        assert result.generated_at is not None

    async def test_campaign_statistics(self, db):
        camp, _, _ = await _seed(db)
        result = await stats.get_campaign_statistics(db, camp.id)

        assert result.campaign_name == "Easter"
        assert result.total_qr_codes == 4
        assert result.total_finds == 4
        assert result.unique_finders == 2
        assert result.completion_rate == pytest.approx(1.0)

    async def test_campaign_qr_code_statistics(self, db):
        camp, (q1, q2, q3), _ = await _seed(db)
        result = await stats.get_campaign_qr_code_statistics(db, camp.id)

        assert result.found_qr_codes == 2
        assert result.unfound_qr_codes == 2
        assert [s.find_count for s in result.qr_codes] == [2, 2, 0, 0]
        assert {s.qr_code_id for s in result.qr_codes[:2]} == {q1.id, q2.id}

    async def test_qr_code_statistics(self, db):
        _, (q1, _, _), (alice, bob) = await _seed(db)
        result = await stats.get_qr_code_statistics(db, q1.id)

        assert result.find_count == 2
        assert result.unique_finders == 2
        assert [f.user_name for f in result.finders] == ["bob", "alice"]
        assert result.first_find_date <= result.last_find_date
        assert result.first_find_date.tzinfo is not None

    async def test_user_statistics(self, db):
        _, _, (alice, _) = await _seed(db)
        result = await stats.get_user_statistics(db, alice.id)

        assert result.user_name == "alice"
        assert result.total_finds == 3
        assert result.unique_qr_codes_found == 2

    async def test_missing_ids_give_empty_aggregates(self, db):
        assert (await stats.get_user_statistics(db, 404)).total_finds == 0
        qr = await stats.get_qr_code_statistics(db, 404)
        assert qr.is_found is False and qr.finders == []
        camp = await stats.get_campaign_statistics(db, 404)
        assert camp.completion_rate == 0.0
        assert (await stats.get_campaign_qr_code_statistics(db, 404)).qr_codes == []

    async def test_top_performers(self, db):
        _, _, (alice, bob) = await _seed(db)
        result = await stats.get_top_performers(db)

        assert [s.user_name for s in result.top_by_total_finds] == ["alice", "bob", "idle"]
        assert result.most_recent_activity[0].user_id == alice.id
        assert result.most_recent_activity[-1].user_name == "idle"

    async def test_time_based_statistics(self, db):
        await _seed(db)
        result = await stats.get_time_based_statistics(db)

        assert sum(d.count for d in result.daily) == 4
        assert sum(w.count for w in result.weekly) == 4
        assert sum(m.count for m in result.monthly) == 4

    async def test_find_history(self, db):
        _, (q1, _, _), (alice, _) = await _seed(db)
        result = await stats.get_find_history(db, FindHistoryFilter(user_id=alice.id, take=2))

        assert result.total_count == 3
        assert len(result.items) == 2
        assert result.items[0].user_name == "alice"
        assert result.items[0].campaign_name == "Easter"
