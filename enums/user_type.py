from enum import Enum


class UserType(str, Enum):
    GUEST = "guest"
    DROPPED_BACKER = "dropped-backer"
    INDIAN_BACKER = "indian-backer"
    BACKER = "backer"
