from enum import Enum


class CatalogSource(str, Enum):
    PRODUCTS = "products"  # Pledge tiers
    ADDONS = "addons"
