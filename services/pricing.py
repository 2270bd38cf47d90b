import logging
import math

from sqlalchemy.ext.asyncio import AsyncSession

import config
from enums.catalog_source import CatalogSource
from exceptions.item import ItemNotFoundException
from exceptions.payment import PriceMismatchException
from models.cart import (
    AddonRef,
    AmbiguousRef,
    CartValidationDTO,
    CatalogLine,
    LegacyAddonLine,
    LegacyPledgeLine,
    PaidPledgeLine,
    PledgeRef,
    PledgeUpgradeLine,
    ValidatedLineDTO,
)
from models.catalog_item import CatalogItemDTO
from repositories.catalog import CatalogRepository

logger = logging.getLogger(__name__)


class PricingService:
    """Authoritative server-side cart pricing."""

    @staticmethod
    async def validate_cart(
        lines: list,
        is_backer_tier: bool,
        session: AsyncSession
    ) -> CartValidationDTO:
        """
        Re-derive every line price and the cart total, ignoring client prices.

        Pricing rules per line variant:
        - CatalogLine: active catalog row price (backer price when is_backer_tier and set)
        - PledgeUpgradeLine / LegacyPledgeLine / LegacyAddonLine: submitted price trusted
          (upgrade differences and campaign carry-overs have no single catalog row)
        - PaidPledgeLine: price 0, quantity 1, nothing added to the total

        Example:
            products row 1: price=45, backer_price=35
            [CatalogLine(ref=PledgeRef(id=1))], is_backer_tier=True  -> total 35
            [CatalogLine(ref=PledgeRef(id=1))], is_backer_tier=False -> total 45

        Args:
            lines: Parsed cart lines (see models.cart.parse_cart)
            is_backer_tier: Whether backer prices apply
            session: Database session

        Returns:
            CartValidationDTO with total and one ValidatedLineDTO per input line

        Raises:
            ItemNotFoundException: A catalog line has no active matching row
        """
        total = 0.0
        validated_lines = []

        for line in lines:
            validated = await PricingService._price_line(line, is_backer_tier, session)
            total += validated.subtotal
            validated_lines.append(validated)

        total = round(total, 2)
        logger.info(f"[Pricing] Validated {len(validated_lines)} line(s), total {total:.2f} "
                    f"({'backer' if is_backer_tier else 'retail'} prices)")
        return CartValidationDTO(total=total, validated_lines=validated_lines)

    @staticmethod
    async def _price_line(line, is_backer_tier: bool, session: AsyncSession) -> ValidatedLineDTO:
        match line:
            case CatalogLine():
                item, source = await PricingService._resolve_catalog_item(line, session)
                unit_price = item.unit_price(is_backer_tier)
                return ValidatedLineDTO(
                    id=item.id,
                    name=item.name,
                    price=unit_price,
                    quantity=line.quantity,
                    subtotal=round(unit_price * line.quantity, 2),
                    kind=line.kind,
                    source=source,
                    shipping_category=item.shipping_category,
                    is_pledge=source == CatalogSource.PRODUCTS,
                )
            case PledgeUpgradeLine() | LegacyPledgeLine() | LegacyAddonLine():
                return ValidatedLineDTO(
                    id=line.id,
                    name=line.name,
                    price=line.price,
                    quantity=line.quantity,
                    subtotal=round(line.price * line.quantity, 2),
                    kind=line.kind,
                    is_pledge=line.is_pledge,
                    dropped_backer=getattr(line, "dropped_backer", False),
                )
            case PaidPledgeLine():
                return ValidatedLineDTO(
                    id=line.id,
                    name=line.name,
                    price=0.0,
                    quantity=1,
                    subtotal=0.0,
                    kind=line.kind,
                    is_pledge=True,
                )
            case _:
                raise TypeError(f"Unsupported cart line type: {type(line).__name__}")

    @staticmethod
    async def _resolve_catalog_item(line: CatalogLine, session: AsyncSession) -> tuple[CatalogItemDTO, CatalogSource]:
        """Find the active catalog row a reference points at."""
        ref = line.ref
        match ref:
            case PledgeRef(id=product_id):
                item = await CatalogRepository.get_active_product(product_id, session)
                if item is not None:
                    return item, CatalogSource.PRODUCTS
                raise ItemNotFoundException(item_id=f"pledge-{product_id}", source=CatalogSource.PRODUCTS.value)
            case AddonRef(id=addon_id):
                item = await CatalogRepository.get_active_addon(addon_id, session)
                if item is not None:
                    return item, CatalogSource.ADDONS
                raise ItemNotFoundException(item_id=f"addon-{addon_id}", source=CatalogSource.ADDONS.value)
            case AmbiguousRef(id=item_id):
                item = await CatalogRepository.get_active_product(item_id, session)
                if item is not None:
                    return item, CatalogSource.PRODUCTS
                item = await CatalogRepository.get_active_addon(item_id, session)
                if item is not None:
                    return item, CatalogSource.ADDONS
                logger.warning(f"[Pricing] Bare id {item_id} matched neither products nor addons")
                raise ItemNotFoundException(item_id=item_id)
            case _:
                raise TypeError(f"Unsupported catalog reference: {type(ref).__name__}")

    @staticmethod
    def verify_total(expected_total: float, submitted_total: float,
                     tolerance: float | None = None) -> None:
        """
        Tamper check: reject a client total that drifts more than the tolerance
        (one cent by default) from the server total.

        Raises:
            PriceMismatchException: difference exceeds the tolerance, or a total is not finite
        """
        tolerance = config.PRICE_TOLERANCE if tolerance is None else tolerance
        if not (math.isfinite(expected_total) and math.isfinite(submitted_total)):
            logger.error(f"[Pricing] Non-finite total: expected {expected_total}, submitted {submitted_total}")
            raise PriceMismatchException(expected=expected_total, submitted=submitted_total, tolerance=tolerance)
        difference = abs(round(expected_total - submitted_total, 2))
        if difference > tolerance:
            logger.error(f"[Pricing] Price mismatch: expected {expected_total:.2f}, "
                         f"submitted {submitted_total:.2f}, difference {difference:.2f}")
            raise PriceMismatchException(expected=expected_total, submitted=submitted_total, tolerance=tolerance)
