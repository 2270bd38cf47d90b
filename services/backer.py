import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

import config
from exceptions.user import UserNotFoundException
from models.user import UserDTO
from repositories.order import OrderRepository
from repositories.user import UserRepository

logger = logging.getLogger(__name__)


class BackerService:
    """Kickstarter backer status predicates used by pricing and payment decisions."""

    @staticmethod
    async def get_account(user_id: int, session: AsyncSession) -> UserDTO:
        """
        Load the account a checkout session belongs to.

        Raises:
            UserNotFoundException: no such account
        """
        user = await UserRepository.get_by_id(user_id, session)
        if user is None:
            logger.warning(f"[Backer] Account {user_id} not found")
            raise UserNotFoundException(user_id=user_id)
        return user

    @staticmethod
    def is_backer(user: UserDTO | None) -> bool:
        """A backer has a non-empty backer number, pledge amount or reward title."""
        if user is None:
            return False
        return bool(user.backer_number or user.pledge_amount or user.reward_title)

    @staticmethod
    def is_dropped_backer(user: UserDTO | None) -> bool:
        """Original Kickstarter payment failed."""
        if user is None or not user.pledged_status:
            return False
        return user.pledged_status.strip().lower() == "dropped"

    @staticmethod
    def is_eligible_backer(user: UserDTO | None) -> bool:
        return BackerService.is_backer(user) and not BackerService.is_dropped_backer(user)

    @staticmethod
    def is_late_pledge(user: UserDTO | None) -> bool:
        return bool(user and user.is_late_pledge)

    @staticmethod
    def qualifies_for_backer_pricing(user: UserDTO | None) -> bool:
        """
        Backer prices go to campaign backers only. Late pledges look like
        backers but pay retail.
        """
        return BackerService.is_backer(user) and not BackerService.is_late_pledge(user)

    @staticmethod
    def is_paid_kickstarter_backer(user: UserDTO | None) -> bool:
        """Pledge already paid on Kickstarter: may check out with add-ons only (pays shipping)."""
        if user is None or BackerService.is_dropped_backer(user):
            return False
        return bool(user.reward_title) and (user.pledge_amount or 0) > 0

    @staticmethod
    async def is_customer(user: UserDTO | None, session: AsyncSession) -> bool:
        """Eligible backer, or anyone with a paid order or a saved card."""
        if user is None:
            return False
        if BackerService.is_eligible_backer(user):
            return True
        return await OrderRepository.user_has_committed_order(user.id, session)

    @staticmethod
    def is_login_stale(user: UserDTO | None, now: datetime | None = None) -> bool:
        """True when the last login is older than LOGIN_STALE_DAYS (or never happened)."""
        if user is None or user.last_login_at is None:
            return True
        now = now or datetime.utcnow()
        return now - user.last_login_at > timedelta(days=config.LOGIN_STALE_DAYS)
