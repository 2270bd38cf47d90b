"""
Unit Tests: BackerService

Run with:
    pytest tests/backer/unit/test_backer_service.py -v
"""

from datetime import datetime, timedelta

import pytest

from conftest import create_order
from enums.payment_status import PaymentStatus
from exceptions.user import UserNotFoundException
from models.user import User, UserDTO
from services.backer import BackerService


class TestBackerPredicates:

    @pytest.mark.parametrize("user", [
        UserDTO(id=1, backer_number=5),
        UserDTO(id=1, pledge_amount=35.0),
        UserDTO(id=1, reward_title="Humble Vaanar"),
    ])
    def test_any_backer_field_makes_a_backer(self, user):
        assert BackerService.is_backer(user) is True

    def test_plain_account_is_not_a_backer(self):
        assert BackerService.is_backer(UserDTO(id=1, email="x@example.com")) is False
        assert BackerService.is_backer(None) is False

    @pytest.mark.parametrize("user", [
        UserDTO(id=1, pledge_amount=0.0),
        UserDTO(id=1, reward_title=""),
        UserDTO(id=1, backer_number=0, pledge_amount=0.0, reward_title=""),
    ])
    def test_empty_backer_fields_are_not_a_backer(self, user):
        assert BackerService.is_backer(user) is False
        assert BackerService.qualifies_for_backer_pricing(user) is False

    @pytest.mark.parametrize("status", ["dropped", "DROPPED", " Dropped "])
    def test_dropped_case_insensitive(self, status):
        user = UserDTO(id=1, backer_number=5, pledged_status=status)

        assert BackerService.is_dropped_backer(user) is True
        assert BackerService.is_eligible_backer(user) is False

    def test_collected_backer_is_eligible(self):
        user = UserDTO(id=1, backer_number=5, pledged_status="collected")

        assert BackerService.is_eligible_backer(user) is True

    def test_late_pledge_pays_retail(self):
        user = UserDTO(id=1, backer_number=5, is_late_pledge=True)

        assert BackerService.is_backer(user) is True
        assert BackerService.qualifies_for_backer_pricing(user) is False

    def test_paid_kickstarter_backer(self):
        paid = UserDTO(id=1, reward_title="Humble Vaanar", pledge_amount=35.0)

        assert BackerService.is_paid_kickstarter_backer(paid) is True
        assert BackerService.is_paid_kickstarter_backer(paid.model_copy(update={"pledge_amount": 0.0})) is False
        assert BackerService.is_paid_kickstarter_backer(paid.model_copy(update={"reward_title": None})) is False
        assert BackerService.is_paid_kickstarter_backer(
            paid.model_copy(update={"pledged_status": "dropped"})) is False
        assert BackerService.is_paid_kickstarter_backer(None) is False

    def test_login_staleness(self):
        now = datetime(2026, 3, 10, 12, 0)

        assert BackerService.is_login_stale(UserDTO(id=1, last_login_at=now - timedelta(days=2)), now) is False
        assert BackerService.is_login_stale(UserDTO(id=1, last_login_at=now - timedelta(days=8)), now) is True
        assert BackerService.is_login_stale(UserDTO(id=1), now) is True


class TestGetAccount:

    @pytest.mark.asyncio
    async def test_existing_account(self, test_session):
        test_session.add(User(id=5, email="backer@example.com", backer_number=12, pledged_status="collected"))
        await test_session.commit()

        user = await BackerService.get_account(5, test_session)

        assert user.email == "backer@example.com"
        assert BackerService.is_eligible_backer(user) is True

    @pytest.mark.asyncio
    async def test_missing_account(self, test_session):
        with pytest.raises(UserNotFoundException):
            await BackerService.get_account(404, test_session)


class TestIsCustomer:

    @pytest.mark.asyncio
    async def test_eligible_backer_is_customer(self, test_session):
        assert await BackerService.is_customer(UserDTO(id=1, backer_number=5), test_session) is True

    @pytest.mark.asyncio
    async def test_saved_card_makes_customer(self, test_session):
        await create_order(test_session, user_id=42, payment_status=PaymentStatus.CARD_SAVED)

        assert await BackerService.is_customer(UserDTO(id=42), test_session) is True

    @pytest.mark.asyncio
    async def test_pending_order_is_not_enough(self, test_session):
        await create_order(test_session, user_id=43, payment_status=PaymentStatus.PENDING)

        assert await BackerService.is_customer(UserDTO(id=43), test_session) is False
        assert await BackerService.is_customer(None, test_session) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
