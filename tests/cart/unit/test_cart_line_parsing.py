"""
Unit Tests: Cart line parsing

Tests for models/cart.py covering:
- Catalog id references (prefixed / bare / invalid)
- Tag precedence between line variants
- Quantity normalization

Run with:
    pytest tests/cart/unit/test_cart_line_parsing.py -v
"""

import pytest

from exceptions.cart import InvalidCartLineException
from exceptions.item import ItemNotFoundException
from models.cart import (
    AddonRef,
    AmbiguousRef,
    CatalogLine,
    LegacyAddonLine,
    LegacyPledgeLine,
    PaidPledgeLine,
    PledgeRef,
    PledgeUpgradeLine,
    parse_cart_line,
    parse_catalog_ref,
)


class TestParseCatalogRef:

    def test_pledge_prefix(self):
        assert parse_catalog_ref("pledge-4") == PledgeRef(id=4)

    def test_addon_prefix(self):
        assert parse_catalog_ref("addon-12") == AddonRef(id=12)

    def test_bare_int(self):
        assert parse_catalog_ref(7) == AmbiguousRef(id=7)

    def test_bare_numeric_string(self):
        assert parse_catalog_ref(" 7 ") == AmbiguousRef(id=7)

    @pytest.mark.parametrize("raw_id", ["pledge-", "addon-x", "ks-pledge", "", None, True])
    def test_invalid_ids(self, raw_id):
        with pytest.raises(ItemNotFoundException):
            parse_catalog_ref(raw_id)


class TestParseCartLine:

    def test_plain_catalog_line(self):
        line = parse_cart_line({"id": "addon-1", "name": "Lorebook", "price": 1, "quantity": 2})

        assert isinstance(line, CatalogLine)
        assert line.ref == AddonRef(id=1)
        assert line.quantity == 2
        assert line.is_pledge is False

    def test_catalog_pledge_detected_by_prefix(self):
        line = parse_cart_line({"id": "pledge-1", "name": "Something"})

        assert line.is_pledge is True

    def test_catalog_pledge_detected_by_type(self):
        line = parse_cart_line({"id": 1, "name": "Something", "type": "pledge"})

        assert line.is_pledge is True

    def test_catalog_pledge_detected_by_tier_keyword(self):
        line = parse_cart_line({"id": 1, "name": "Benevolent Divya Pledge"})

        assert line.is_pledge is True

    def test_upgrade_wins_over_other_tags(self):
        line = parse_cart_line({"id": "u", "price": 30, "isPledgeUpgrade": True,
                                "isOriginalPledge": True, "isPaidKickstarterPledge": True})

        assert isinstance(line, PledgeUpgradeLine)
        assert line.price == 30.0

    def test_original_pledge(self):
        line = parse_cart_line({"id": "ks", "price": "35", "isOriginalPledge": True})

        assert isinstance(line, LegacyPledgeLine)
        assert line.dropped_backer is False
        assert line.price == 35.0

    @pytest.mark.parametrize("raw_price", ["NaN", "nan", "Infinity", "-Infinity", float("nan"), None, "abc"])
    def test_unusable_price_becomes_zero(self, raw_price):
        line = parse_cart_line({"id": "ks", "price": raw_price, "isOriginalPledge": True})

        assert line.price == 0.0

    def test_dropped_backer_pledge(self):
        line = parse_cart_line({"id": "ks", "price": 35, "isDroppedBackerPledge": True})

        assert isinstance(line, LegacyPledgeLine)
        assert line.dropped_backer is True

    def test_original_addon(self):
        line = parse_cart_line({"id": "ks-a", "price": 18, "isOriginalAddon": True})

        assert isinstance(line, LegacyAddonLine)
        assert line.is_pledge is False

    def test_paid_kickstarter_pledge(self):
        line = parse_cart_line({"name": "Humble Vaanar", "isPaidKickstarterPledge": True})

        assert isinstance(line, PaidPledgeLine)
        assert line.id == "ks-pledge"
        assert line.is_pledge is True

    @pytest.mark.parametrize("raw_quantity", [None, 0, "abc", "0", "inf", "-inf", float("inf")])
    def test_quantity_defaults_to_one(self, raw_quantity):
        line = parse_cart_line({"id": "addon-1", "quantity": raw_quantity})

        assert line.quantity == 1

    def test_float_quantity_truncated(self):
        line = parse_cart_line({"id": "addon-1", "quantity": "3.0"})

        assert line.quantity == 3

    def test_negative_quantity_rejected(self):
        with pytest.raises(InvalidCartLineException):
            parse_cart_line({"id": "addon-1", "quantity": -2})

    def test_non_object_rejected(self):
        with pytest.raises(InvalidCartLineException):
            parse_cart_line(["addon-1"])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
