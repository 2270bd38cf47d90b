"""
Shipping Service

Computes shipping cost from the destination country and cart contents using the
static zone table in shipping_rates/. Pure functions, no database access.
"""

import logging
from typing import Iterable

from enums.addon_category import AddonCategory
from enums.pledge_tier import PledgeTier
from enums.shipping_zone import ShippingZone
from models.cart import ValidatedLineDTO
from models.shipping import ShippingLineDTO, ZoneRatesDTO
from utils.shipping_rates_loader import load_zone_rates, load_country_aliases, normalize_country

logger = logging.getLogger(__name__)

ShippableLine = ShippingLineDTO | ValidatedLineDTO


class ShippingService:

    @staticmethod
    def resolve_zone(country: str | None) -> ShippingZone:
        """
        Map a free-text country to its shipping zone.

        Matching is case- and whitespace-insensitive. Blank or unknown
        countries fall back to REST OF WORLD.
        """
        key = normalize_country(country)
        if not key:
            return ShippingZone.REST_OF_WORLD
        return load_country_aliases().get(key, ShippingZone.REST_OF_WORLD)

    @staticmethod
    def get_rate_card(country: str | None) -> ZoneRatesDTO:
        zone = ShippingService.resolve_zone(country)
        return load_zone_rates()[zone]

    @staticmethod
    def classify_pledge(line: ShippableLine) -> PledgeTier | None:
        """Explicit shipping_category first, otherwise the first tier keyword found in the name."""
        if line.shipping_category:
            try:
                return PledgeTier(line.shipping_category)
            except ValueError:
                return None
        name = (line.name or "").strip().lower()
        for tier in PledgeTier:
            if tier.value in name:
                return tier
        return None

    @staticmethod
    def classify_addon(line: ShippableLine) -> AddonCategory | None:
        """
        Explicit shipping_category first, otherwise keyword match in the order
        Built Environments, Lorebook, Paperback, Hardcover (first match wins).
        """
        if line.shipping_category:
            try:
                return AddonCategory(line.shipping_category)
            except ValueError:
                return None
        name = (line.name or "").strip().lower()
        for category in AddonCategory:
            if category.value in name:
                return category
        return None

    @staticmethod
    def calculate_shipping(country: str | None, lines: Iterable[ShippableLine]) -> float:
        """
        Calculate the shipping total for a cart.

        Algorithm:
        1. Resolve the destination zone (unknown -> REST OF WORLD)
        2. The first line identified as a pledge tier adds that tier's flat rate once
           (a pledge ships as one parcel, quantity is ignored)
        3. Every line identified as a shippable add-on adds the category rate x quantity
           (quantity defaults to 1)

        Example:
            >>> ShippingService.calculate_shipping("India", [ShippingLineDTO(name="Humble Vaanar", quantity=1)])
            5.0

        Args:
            country: Destination country as typed by the customer
            lines: Cart lines (client shape or validated lines)

        Returns:
            Shipping total in store currency, 0 for carts without shippable lines
        """
        lines = list(lines)
        zone = ShippingService.resolve_zone(country)
        rates = load_zone_rates()[zone]
        total = 0.0

        for line in lines:
            tier = ShippingService.classify_pledge(line)
            if tier is not None:
                total += rates.pledges.get(tier.value, 0)
                break

        for line in lines:
            category = ShippingService.classify_addon(line)
            if category is None:
                continue
            quantity = line.quantity or 1
            total += rates.addons.get(category.value, 0) * quantity

        total = round(total, 2)
        logger.info(f"[Shipping] {len(lines)} line(s) to zone {zone.value}: {total:.2f}")
        return total
