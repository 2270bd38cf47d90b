from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.addon import Addon
from models.catalog_item import CatalogItemDTO
from models.product import Product


class CatalogRepository:

    @staticmethod
    async def get_active_product(product_id: int, session: AsyncSession) -> CatalogItemDTO | None:
        stmt = select(Product).where(Product.id == product_id, Product.active.is_(True))
        result = await session.execute(stmt)
        product = result.scalar_one_or_none()
        if product is None:
            return None
        return CatalogItemDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def get_active_addon(addon_id: int, session: AsyncSession) -> CatalogItemDTO | None:
        stmt = select(Addon).where(Addon.id == addon_id, Addon.active.is_(True))
        result = await session.execute(stmt)
        addon = result.scalar_one_or_none()
        if addon is None:
            return None
        return CatalogItemDTO.model_validate(addon, from_attributes=True)
