from enum import Enum


class OrderType(str, Enum):
    IMMEDIATE_CHARGE = "immediate-charge"
    PRE_ORDER_AUTODEBIT = "pre-order-autodebit"
    BULK_CHARGE_AUTODEBIT = "bulk-charge-autodebit"
    SINGLE_CHARGE_AUTODEBIT = "single-charge-autodebit"
