from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Float, Boolean, Text


# Shared columns of the two physical catalog tables (products / addons)
class CatalogItemMixin:
    id = Column(Integer, primary_key=True, unique=True)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    # NULL means "no backer discount", retail price applies to everyone
    backer_price = Column(Float, nullable=True)
    weight = Column(Float, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    description = Column(Text, nullable=True)
    # Explicit shipping category (PledgeTier / AddonCategory value); NULL falls back to name matching
    shipping_category = Column(String(50), nullable=True)


class CatalogItemDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    price: float | None = None
    backer_price: float | None = None
    weight: float | None = None
    active: bool | None = None
    description: str | None = None
    shipping_category: str | None = None
    type: str | None = None

    def unit_price(self, is_backer_tier: bool) -> float:
        """Backer price when requested and defined, retail price otherwise."""
        if is_backer_tier and self.backer_price is not None:
            return self.backer_price
        return self.price
