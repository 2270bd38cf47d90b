from enum import Enum


class PaymentStatus(str, Enum):
    PENDING = "pending"              # Order created, no payment method captured yet
    CARD_SAVED = "card_saved"        # Card stored for scheduled autodebit
    CHARGED = "charged"              # Autodebit succeeded
    CHARGE_FAILED = "charge_failed"  # Autodebit attempt declined or errored (retryable)
    SUCCEEDED = "succeeded"          # Charged immediately at checkout
