from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.email_log import EmailLog, EmailLogDTO


class EmailLogRepository:

    @staticmethod
    async def create(email_log_dto: EmailLogDTO, session: AsyncSession) -> int:
        email_log = EmailLog(**email_log_dto.model_dump(exclude_none=True))
        session.add(email_log)
        await session.flush()
        return email_log.id

    @staticmethod
    async def get_by_order_id(order_id: int, session: AsyncSession) -> list[EmailLogDTO]:
        stmt = select(EmailLog).where(EmailLog.order_id == order_id).order_by(EmailLog.id)
        result = await session.execute(stmt)
        return [EmailLogDTO.model_validate(log, from_attributes=True) for log in result.scalars().all()]
