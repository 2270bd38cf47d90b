"""
Payment State Machine for validating order payment status transitions.

Every change of Order.payment_status goes through validate_and_log_transition
so the audit log shows who moved which order where.
"""

import logging
from typing import Dict, List, Optional, Set

from enums.payment_status import PaymentStatus

logger = logging.getLogger(__name__)


class PaymentStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: PaymentStatus, to_status: PaymentStatus, description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.description = description

    def __repr__(self):
        return f"{self.from_status.value} -> {self.to_status.value}"


class PaymentStateMachine:
    """
    Finite state machine for order payment status.

    Valid status transitions:
    - PENDING -> CARD_SAVED (SetupIntent confirmed, autodebit later)
    - PENDING -> SUCCEEDED (PaymentIntent confirmed at checkout)
    - PENDING -> CHARGE_FAILED (immediate charge declined)
    - CARD_SAVED -> CHARGED (autodebit succeeded)
    - CARD_SAVED -> CHARGE_FAILED (autodebit declined)
    - CHARGE_FAILED -> CHARGED (manual or batched retry)
    - CHARGE_FAILED -> CHARGE_FAILED (retry declined again)

    CHARGED and SUCCEEDED are final.
    """

    VALID_TRANSITIONS: List[PaymentStatusTransition] = [
        PaymentStatusTransition(
            PaymentStatus.PENDING,
            PaymentStatus.CARD_SAVED,
            description="Card saved for scheduled autodebit"
        ),
        PaymentStatusTransition(
            PaymentStatus.PENDING,
            PaymentStatus.SUCCEEDED,
            description="Charged immediately at checkout"
        ),
        PaymentStatusTransition(
            PaymentStatus.PENDING,
            PaymentStatus.CHARGE_FAILED,
            description="Immediate charge failed"
        ),
        PaymentStatusTransition(
            PaymentStatus.CARD_SAVED,
            PaymentStatus.CHARGED,
            description="Saved card charged off-session"
        ),
        PaymentStatusTransition(
            PaymentStatus.CARD_SAVED,
            PaymentStatus.CHARGE_FAILED,
            description="Off-session charge failed"
        ),
        PaymentStatusTransition(
            PaymentStatus.CHARGE_FAILED,
            PaymentStatus.CHARGED,
            description="Retry succeeded"
        ),
        PaymentStatusTransition(
            PaymentStatus.CHARGE_FAILED,
            PaymentStatus.CHARGE_FAILED,
            description="Retry failed"
        ),
    ]

    FINAL_STATUSES: Set[PaymentStatus] = {PaymentStatus.CHARGED, PaymentStatus.SUCCEEDED}

    _transition_map: Dict[PaymentStatus, Set[PaymentStatus]] = {}
    _transition_descriptions: Dict[tuple, str] = {}

    @classmethod
    def _build_transition_map(cls):
        if cls._transition_map:
            return

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            cls._transition_descriptions[(transition.from_status, transition.to_status)] = transition.description

    @classmethod
    def is_valid_transition(cls, from_status: PaymentStatus, to_status: PaymentStatus) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Args:
            from_status: Current payment status
            to_status: Desired new status

        Returns:
            True if transition is valid, False otherwise
        """
        cls._build_transition_map()
        return to_status in cls._transition_map.get(from_status, set())

    @classmethod
    def get_valid_transitions(cls, from_status: PaymentStatus) -> List[PaymentStatus]:
        cls._build_transition_map()
        return sorted(cls._transition_map.get(from_status, set()), key=lambda status: status.value)

    @classmethod
    def is_final_status(cls, status: PaymentStatus) -> bool:
        return status in cls.FINAL_STATUSES

    @classmethod
    def validate_and_log_transition(cls, order_id: int, from_status: PaymentStatus, to_status: PaymentStatus,
                                    performer: Optional[str] = None) -> bool:
        """
        Validate a status transition and write the audit log line.

        Args:
            order_id: ID of the order being transitioned
            from_status: Current payment status
            to_status: Desired new status
            performer: Who triggered the change ("bulk-charge", "admin", "checkout", ...)

        Returns:
            True if transition is valid and logged, False otherwise
        """
        if not cls.is_valid_transition(from_status, to_status):
            logger.error(f"Invalid payment transition for order {order_id}: {from_status.value} -> {to_status.value}")
            return False

        description = cls._transition_descriptions.get((from_status, to_status), "")
        logger.info(f"PAYMENT_STATUS_TRANSITION: Order {order_id} {from_status.value} -> {to_status.value} "
                    f"by {performer or 'system'}: {description}")
        return True
