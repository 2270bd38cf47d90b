"""
Shipping Rates Loader

Loads the zone rate table and the country alias table from shipping_rates/*.json.
Both files are read once per process and cached.

Usage:
    from utils.shipping_rates_loader import load_zone_rates, load_country_aliases

    rates = load_zone_rates()               # {"USA": ZoneRatesDTO(...), ...}
    aliases = load_country_aliases()        # {"germany": "EU-1", ...}
"""

import json
import logging
from functools import lru_cache
from pathlib import Path

from enums.shipping_zone import ShippingZone
from models.shipping import ZoneRatesDTO

logger = logging.getLogger(__name__)

RATES_DIR = Path(__file__).parent.parent / "shipping_rates"


def _read_json(file_name: str) -> dict:
    path = RATES_DIR / file_name
    if not path.exists():
        raise FileNotFoundError(
            f"Shipping rates file not found: {path}\n"
            f"Please create shipping_rates/{file_name}"
        )
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"[ShippingRates] Failed to parse {path}: {e}")
        raise


@lru_cache(maxsize=1)
def load_zone_rates() -> dict[ShippingZone, ZoneRatesDTO]:
    """
    Load per-zone flat rates.

    Raises:
        ValueError: a configured zone is missing from the table
    """
    raw = _read_json("zones.json")
    rates = {}
    for zone in ShippingZone:
        if zone.value not in raw:
            raise ValueError(f"Shipping zone '{zone.value}' missing from zones.json")
        rates[zone] = ZoneRatesDTO(zone=zone.value, **raw[zone.value])
    logger.info(f"[ShippingRates] Loaded rates for {len(rates)} zones")
    return rates


@lru_cache(maxsize=1)
def load_country_aliases() -> dict[str, ShippingZone]:
    """
    Load the normalized country name -> zone lookup.

    Raises:
        ValueError: an alias is assigned to more than one zone
    """
    raw = _read_json("countries.json")
    aliases: dict[str, ShippingZone] = {}
    for zone_name, names in raw.items():
        zone = ShippingZone(zone_name)
        for name in names:
            key = normalize_country(name)
            if key in aliases and aliases[key] != zone:
                raise ValueError(f"Country alias '{name}' assigned to both {aliases[key].value} and {zone.value}")
            aliases[key] = zone
    return aliases


def normalize_country(country: str | None) -> str:
    """Trim, lowercase and collapse inner whitespace."""
    return " ".join((country or "").split()).lower()
