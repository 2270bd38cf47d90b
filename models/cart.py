"""
Cart line types.

Client carts arrive as loosely shaped JSON objects; they are parsed exactly once
into the tagged variants below and every downstream consumer matches on the
variant instead of re-inspecting ids or boolean flags.
"""

import math
import re
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from enums.catalog_source import CatalogSource
from enums.pledge_tier import PledgeTier
from exceptions.cart import InvalidCartLineException
from exceptions.item import ItemNotFoundException


# ---------------------------------------------------------------------------
# Catalog references
# ---------------------------------------------------------------------------

class PledgeRef(BaseModel):
    """Row id in the products table."""
    kind: Literal["pledge"] = "pledge"
    id: int


class AddonRef(BaseModel):
    """Row id in the addons table."""
    kind: Literal["addon"] = "addon"
    id: int


class AmbiguousRef(BaseModel):
    """Bare id: products first, then addons."""
    kind: Literal["ambiguous"] = "ambiguous"
    id: int


CatalogRef = Annotated[Union[PledgeRef, AddonRef, AmbiguousRef], Field(discriminator="kind")]

_PREFIXED_ID = re.compile(r'^(pledge|addon)-(\d+)$')


def parse_catalog_ref(raw_id: Any) -> PledgeRef | AddonRef | AmbiguousRef:
    """
    Parse a client-submitted catalog id.

    "pledge-4" -> PledgeRef(4), "addon-4" -> AddonRef(4), 4 / "4" -> AmbiguousRef(4).

    Raises:
        ItemNotFoundException: id cannot reference any catalog row
    """
    if isinstance(raw_id, bool) or raw_id is None:
        raise ItemNotFoundException(item_id=raw_id)
    if isinstance(raw_id, int):
        return AmbiguousRef(id=raw_id)

    text = str(raw_id).strip()
    match = _PREFIXED_ID.match(text)
    if match:
        prefix, number = match.groups()
        if prefix == "pledge":
            return PledgeRef(id=int(number))
        return AddonRef(id=int(number))
    if text.isdigit():
        return AmbiguousRef(id=int(text))
    raise ItemNotFoundException(item_id=raw_id)


def _mentions_pledge_tier(name: str | None) -> bool:
    normalized = (name or "").strip().lower()
    return any(tier.value in normalized for tier in PledgeTier)


# ---------------------------------------------------------------------------
# Cart lines
# ---------------------------------------------------------------------------

class CatalogLine(BaseModel):
    """Regular line priced from the catalog, client price ignored."""
    kind: Literal["catalog"] = "catalog"
    ref: CatalogRef
    name: str | None = None
    quantity: int = 1
    type: str | None = None

    @property
    def is_pledge(self) -> bool:
        return isinstance(self.ref, PledgeRef) or self.type == "pledge" or _mentions_pledge_tier(self.name)


class PledgeUpgradeLine(BaseModel):
    """Price difference between the backer's pledge and a higher tier, computed upstream."""
    kind: Literal["pledge_upgrade"] = "pledge_upgrade"
    id: str | int | None = None
    name: str | None = None
    price: float
    quantity: int = 1

    @property
    def is_pledge(self) -> bool:
        return True


class LegacyPledgeLine(BaseModel):
    """Original campaign pledge carried over (dropped backers pay it again)."""
    kind: Literal["legacy_pledge"] = "legacy_pledge"
    id: str | int | None = None
    name: str | None = None
    price: float
    quantity: int = 1
    dropped_backer: bool = False

    @property
    def is_pledge(self) -> bool:
        return True


class LegacyAddonLine(BaseModel):
    """Original campaign add-on carried over."""
    kind: Literal["legacy_addon"] = "legacy_addon"
    id: str | int | None = None
    name: str | None = None
    price: float
    quantity: int = 1

    @property
    def is_pledge(self) -> bool:
        return False


class PaidPledgeLine(BaseModel):
    """Pledge already paid on Kickstarter; always free, always a single unit."""
    kind: Literal["paid_pledge"] = "paid_pledge"
    id: str | int = "ks-pledge"
    name: str | None = None

    @property
    def is_pledge(self) -> bool:
        return True


CartLine = Annotated[
    Union[CatalogLine, PledgeUpgradeLine, LegacyPledgeLine, LegacyAddonLine, PaidPledgeLine],
    Field(discriminator="kind"),
]


def _parse_quantity(raw: Any) -> int:
    """Integer quantity, 1 when missing, zero or unparsable."""
    if raw is None or isinstance(raw, bool):
        return 1
    try:
        quantity = int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return 1
    if quantity < 0:
        raise InvalidCartLineException(f"Negative quantity {raw}")
    return quantity or 1


def _parse_price(raw: Any) -> float:
    """Client-supplied price, 0 when missing, unparsable or not finite."""
    try:
        price = float(raw)
    except (TypeError, ValueError):
        return 0.0
    return price if math.isfinite(price) else 0.0


def parse_cart_line(raw: dict) -> CatalogLine | PledgeUpgradeLine | LegacyPledgeLine | LegacyAddonLine | PaidPledgeLine:
    """
    Turn one client cart entry into its variant.

    Tag precedence: isPledgeUpgrade, isOriginalPledge / isDroppedBackerPledge,
    isOriginalAddon, isPaidKickstarterPledge, then catalog lookup.
    """
    if not isinstance(raw, dict):
        raise InvalidCartLineException(f"Cart line must be an object, got {type(raw).__name__}")

    name = raw.get("name")
    if raw.get("isPledgeUpgrade"):
        return PledgeUpgradeLine(id=raw.get("id"), name=name, price=_parse_price(raw.get("price")),
                                 quantity=_parse_quantity(raw.get("quantity")))
    if raw.get("isOriginalPledge") or raw.get("isDroppedBackerPledge"):
        return LegacyPledgeLine(id=raw.get("id"), name=name, price=_parse_price(raw.get("price")),
                                quantity=_parse_quantity(raw.get("quantity")),
                                dropped_backer=bool(raw.get("isDroppedBackerPledge")))
    if raw.get("isOriginalAddon"):
        return LegacyAddonLine(id=raw.get("id"), name=name, price=_parse_price(raw.get("price")),
                               quantity=_parse_quantity(raw.get("quantity")))
    if raw.get("isPaidKickstarterPledge"):
        return PaidPledgeLine(id=raw.get("id") or "ks-pledge", name=name)
    return CatalogLine(ref=parse_catalog_ref(raw.get("id")), name=name,
                       quantity=_parse_quantity(raw.get("quantity")), type=raw.get("type"))


def parse_cart(raw_lines: list[dict]) -> list[CatalogLine | PledgeUpgradeLine | LegacyPledgeLine | LegacyAddonLine | PaidPledgeLine]:
    return [parse_cart_line(raw) for raw in raw_lines]


# ---------------------------------------------------------------------------
# Validation output
# ---------------------------------------------------------------------------

class ValidatedLineDTO(BaseModel):
    id: str | int | None = None
    name: str | None = None
    price: float
    quantity: int
    subtotal: float
    kind: str
    source: CatalogSource | None = None
    shipping_category: str | None = None
    is_pledge: bool = False
    dropped_backer: bool = False


class CartValidationDTO(BaseModel):
    total: float
    validated_lines: list[ValidatedLineDTO]

    @property
    def pledge_lines(self) -> list[ValidatedLineDTO]:
        return [line for line in self.validated_lines if line.is_pledge]
