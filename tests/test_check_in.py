from datetime import datetime, timedelta, timezone

import pytest

from auditionapi.config import settings
from auditionapi.core.exceptions import RateLimitError
from auditionapi.models import CheckInReward, DiamondTransactionLog
from auditionapi.services.check_in_service import (
    CheckInService,
    calculate_reward,
    calculate_streak,
)

from conftest import API, auth_headers, get_user

DAY_ONE = datetime(2025, 3, 1, 3, 0, tzinfo=timezone.utc)  # 10:00 in UTC+7


class TestRewardFormula:
    @pytest.mark.parametrize(
        "streak,expected", [(1, 5), (2, 6), (7, 11), (8, 11), (30, 11)]
    )
    def test_reward_caps_streak_bonus(self, streak, expected):
        assert calculate_reward(streak, settings) == expected

    def test_streak_continues_from_previous_local_day(self):
        assert calculate_streak(DAY_ONE, 3, DAY_ONE + timedelta(days=1)) == 4

    def test_streak_resets_after_gap(self):
        assert calculate_streak(DAY_ONE, 3, DAY_ONE + timedelta(days=2)) == 1

    def test_streak_uses_local_calendar_day(self):
        # 23:30 and 00:30 the next day in UTC+7, one hour apart in UTC
        late = datetime(2025, 3, 1, 16, 30, tzinfo=timezone.utc)
        early_next = datetime(2025, 3, 1, 17, 30, tzinfo=timezone.utc)
        assert calculate_streak(late, 1, early_next) == 2


class TestDailyCheckInService:
    def test_consecutive_days(self, db_session, make_user):
        user_id = make_user(diamonds=0)
        service = CheckInService(db_session, settings)

        first = service.daily_check_in(user_id, now=DAY_ONE)
        second = service.daily_check_in(user_id, now=DAY_ONE + timedelta(days=1))

        assert (first.streak, first.reward) == (1, 5)
        assert (second.streak, second.reward) == (2, 6)
        assert second.new_diamond_count == 11
        assert second.new_xp == 2 * settings.CHECK_IN_XP_REWARD

    def test_gap_resets_streak(self, db_session, make_user):
        user_id = make_user(diamonds=0)
        service = CheckInService(db_session, settings)

        service.daily_check_in(user_id, now=DAY_ONE)
        service.daily_check_in(user_id, now=DAY_ONE + timedelta(days=1))
        third = service.daily_check_in(user_id, now=DAY_ONE + timedelta(days=3))

        assert third.streak == 1
        assert third.reward == settings.CHECK_IN_BASE_REWARD

    def test_same_day_twice_is_rejected(self, db_session, make_user):
        user_id = make_user(diamonds=0)
        service = CheckInService(db_session, settings)
        service.daily_check_in(user_id, now=DAY_ONE)

        with pytest.raises(RateLimitError):
            service.daily_check_in(user_id, now=DAY_ONE + timedelta(hours=5))

        user = get_user(db_session, user_id)
        assert user.diamonds == 5
        assert user.consecutive_check_in_days == 1


class TestDailyCheckInRoute:
    def test_check_in_then_429(self, client, db_session, make_user):
        user_id = make_user(diamonds=2)

        response = client.post(f"{API}/daily-check-in", headers=auth_headers(user_id))
        assert response.status_code == 200
        data = response.json()
        assert data["reward"] == 5
        assert data["streak"] == 1
        assert data["newDiamondCount"] == 7
        assert data["xpReward"] == settings.CHECK_IN_XP_REWARD

        again = client.post(f"{API}/daily-check-in", headers=auth_headers(user_id))
        assert again.status_code == 429
        assert again.json()["success"] is False

        user = get_user(db_session, user_id)
        assert user.diamonds == 7
        assert user.consecutive_check_in_days == 1

    def test_requires_token(self, client):
        response = client.post(f"{API}/daily-check-in")
        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_001"


class TestMilestone:
    def _configure(self, db_session, days=7, diamonds=20, xp=50):
        db_session.add(
            CheckInReward(consecutive_days=days, diamond_reward=diamonds, xp_reward=xp)
        )
        db_session.commit()

    def test_claim_once_per_window(self, client, db_session, make_user):
        self._configure(db_session)
        user_id = make_user(diamonds=0, consecutive_check_in_days=7)

        response = client.post(
            f"{API}/claim-milestone-reward",
            json={"milestoneDays": 7},
            headers=auth_headers(user_id),
        )
        assert response.status_code == 200
        assert response.json()["newDiamondCount"] == 20
        assert response.json()["newXp"] == 50

        again = client.post(
            f"{API}/claim-milestone-reward",
            json={"milestoneDays": 7},
            headers=auth_headers(user_id),
        )
        assert again.status_code == 409

    def test_claim_after_window_expired(self, client, db_session, make_user):
        self._configure(db_session)
        user_id = make_user(diamonds=0, consecutive_check_in_days=8)
        db_session.add(
            DiamondTransactionLog(
                user_id=user_id,
                amount=20,
                transaction_type="MILESTONE_REWARD_7",
                description="old claim",
                created_at=datetime.now(timezone.utc) - timedelta(days=10),
            )
        )
        db_session.commit()

        response = client.post(
            f"{API}/claim-milestone-reward",
            json={"milestoneDays": 7},
            headers=auth_headers(user_id),
        )
        assert response.status_code == 200

    def test_streak_too_short(self, client, db_session, make_user):
        self._configure(db_session)
        user_id = make_user(consecutive_check_in_days=3)

        response = client.post(
            f"{API}/claim-milestone-reward",
            json={"milestoneDays": 7},
            headers=auth_headers(user_id),
        )
        assert response.status_code == 403

    def test_unknown_milestone(self, client, make_user):
        user_id = make_user()
        response = client.post(
            f"{API}/claim-milestone-reward",
            json={"milestoneDays": 5},
            headers=auth_headers(user_id),
        )
        assert response.status_code == 400

    def test_unconfigured_milestone(self, client, make_user):
        user_id = make_user(consecutive_check_in_days=30)
        response = client.post(
            f"{API}/claim-milestone-reward",
            json={"milestoneDays": 30},
            headers=auth_headers(user_id),
        )
        assert response.status_code == 404
