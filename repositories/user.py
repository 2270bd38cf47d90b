from sqlalchemy import select, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User, UserDTO


class UserRepository:

    @staticmethod
    async def get_by_id(user_id: int, session: AsyncSession) -> UserDTO | None:
        result = await session.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            return None
        return UserDTO.model_validate(user, from_attributes=True)

    @staticmethod
    async def count_backers(session: AsyncSession) -> int:
        stmt = select(func.count(User.id)).where(or_(
            and_(User.backer_number.is_not(None), User.backer_number != 0),
            and_(User.pledge_amount.is_not(None), User.pledge_amount != 0),
            and_(User.reward_title.is_not(None), User.reward_title != ""),
        ))
        result = await session.execute(stmt)
        return result.scalar() or 0
