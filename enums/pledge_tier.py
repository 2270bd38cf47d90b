from enum import Enum


class PledgeTier(str, Enum):
    """Kickstarter reward tiers, cheapest first. Values are the name keywords used for matching."""
    HUMBLE_VAANAR = "humble vaanar"
    INDUSTRIOUS_MANUSHYA = "industrious manushya"
    RESPLENDENT_GARUDA = "resplendent garuda"
    BENEVOLENT_DIVYA = "benevolent divya"
    FOUNDERS_OF_NEH = "founders of neh"
