from sqlalchemy import CheckConstraint

from models.base import Base
from models.catalog_item import CatalogItemMixin


class Addon(CatalogItemMixin, Base):
    __tablename__ = 'addons'

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_addon_price_non_negative'),
        CheckConstraint('backer_price IS NULL OR backer_price >= 0', name='check_addon_backer_price_non_negative'),
    )
