from sqlalchemy import Column, String, CheckConstraint

from models.base import Base
from models.catalog_item import CatalogItemMixin


# Pledge tiers (Humble Vaanar ... Founders of Neh)
class Product(CatalogItemMixin, Base):
    __tablename__ = 'products'

    type = Column(String(20), nullable=False, default='pledge')

    # backer_price <= price is a business expectation only, not enforced here
    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_non_negative'),
        CheckConstraint('backer_price IS NULL OR backer_price >= 0', name='check_product_backer_price_non_negative'),
    )
