from enum import Enum


class PaymentStrategy(str, Enum):
    CHARGE_NOW = "charge_now"   # PaymentIntent confirmed during checkout
    SAVE_CARD = "save_card"     # SetupIntent now, off-session charge later
