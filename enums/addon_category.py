from enum import Enum


class AddonCategory(str, Enum):
    """Shippable add-on categories in keyword match order."""
    BUILT_ENVIRONMENTS = "built environments"
    LOREBOOK = "lorebook"
    PAPERBACK = "paperback"
    HARDCOVER = "hardcover"
