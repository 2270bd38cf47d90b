from enum import Enum


class EmailType(str, Enum):
    CARD_SAVED = "card_saved"
    PAYMENT_SUCCESSFUL = "payment_successful"
    PAYMENT_FAILED = "payment_failed"
    ADMIN_BULK_CHARGE_SUMMARY = "admin_bulk_charge_summary"
