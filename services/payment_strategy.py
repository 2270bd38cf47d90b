import logging

from enums.order_type import OrderType
from enums.payment_strategy import PaymentStrategy
from enums.shipping_zone import ShippingZone
from enums.user_type import UserType
from models.payment import PaymentDecisionDTO
from utils.shipping_rates_loader import load_country_aliases, normalize_country

logger = logging.getLogger(__name__)


class PaymentStrategyService:

    @staticmethod
    def is_india_destination(country: str | None) -> bool:
        """Destination resolves to India through the shared country alias table."""
        return load_country_aliases().get(normalize_country(country)) == ShippingZone.INDIA

    @staticmethod
    def select(
        is_authenticated: bool,
        is_dropped_backer: bool,
        destination_country: str | None,
        is_late_pledge: bool = False
    ) -> PaymentDecisionDTO:
        """
        Decide between charging now and saving the card for autodebit.

        Decision table (first match wins):
        - not authenticated               -> charge now, guest
        - dropped backer                  -> charge now, dropped-backer
        - destination India               -> charge now, indian-backer
        - otherwise                       -> save card, backer (pre-order autodebit)

        Guests and dropped backers have no payment relationship to rely on for a
        later off-session charge. Indian card networks restrict off-session
        charges, so Indian orders are charged upfront.

        Args:
            is_authenticated: Session belongs to a logged-in account
            is_dropped_backer: Original Kickstarter payment failed
            destination_country: Shipping country as typed by the customer
            is_late_pledge: Accepted for completeness; pricing handles late pledges

        Returns:
            PaymentDecisionDTO with strategy and order/user metadata tags
        """
        if not is_authenticated:
            decision = PaymentDecisionDTO(strategy=PaymentStrategy.CHARGE_NOW,
                                          order_type=OrderType.IMMEDIATE_CHARGE,
                                          user_type=UserType.GUEST)
        elif is_dropped_backer:
            decision = PaymentDecisionDTO(strategy=PaymentStrategy.CHARGE_NOW,
                                          order_type=OrderType.IMMEDIATE_CHARGE,
                                          user_type=UserType.DROPPED_BACKER)
        elif PaymentStrategyService.is_india_destination(destination_country):
            decision = PaymentDecisionDTO(strategy=PaymentStrategy.CHARGE_NOW,
                                          order_type=OrderType.IMMEDIATE_CHARGE,
                                          user_type=UserType.INDIAN_BACKER)
        else:
            decision = PaymentDecisionDTO(strategy=PaymentStrategy.SAVE_CARD,
                                          order_type=OrderType.PRE_ORDER_AUTODEBIT,
                                          user_type=UserType.BACKER)

        logger.info(f"[PaymentStrategy] {decision.user_type.value} -> {decision.strategy.value} "
                    f"({decision.order_type.value}), late_pledge={is_late_pledge}")
        return decision
