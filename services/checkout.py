import json
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from enums.payment_status import PaymentStatus
from exceptions.cart import EmptyCartException, MultiplePledgesException, PledgeRequiredException
from exceptions.order import OrderNotFoundException
from exceptions.payment import GatewayChargeException, MissingPaymentMethodException
from models.cart import CartValidationDTO, PaidPledgeLine, parse_cart
from models.order import OrderDTO
from models.payment import CheckoutDTO, CheckoutRequestDTO
from models.user import UserDTO
from repositories.order import OrderRepository
from services.backer import BackerService
from services.notification import NotificationService
from services.payment_gateway import PaymentGateway
from services.payment_strategy import PaymentStrategyService
from services.pricing import PricingService
from services.shipping import ShippingService

logger = logging.getLogger(__name__)


class CheckoutService:

    @staticmethod
    async def apply_pledge_rules(validation: CartValidationDTO, user: UserDTO | None,
                                 session: AsyncSession) -> CartValidationDTO:
        """
        Enforce "exactly one pledge per order" on the priced cart.

        Runs after pricing because bare catalog ids only reveal their table
        (products = pledge tiers) on lookup. A paid Kickstarter backer may check
        out add-ons only (paying shipping for the already paid pledge); their
        pledge is added as a free PaidPledgeLine.

        Raises:
            PledgeRequiredException: no pledge and not a paid backer
            MultiplePledgesException: more than one pledge line
        """
        pledge_count = len(validation.pledge_lines)
        if pledge_count > 1:
            raise MultiplePledgesException(pledge_count)
        if pledge_count == 1:
            return validation

        if not BackerService.is_paid_kickstarter_backer(user):
            raise PledgeRequiredException()
        logger.info(f"[Checkout] Paid Kickstarter backer {user.id} checking out for shipping only")
        paid_pledge = await PricingService.validate_cart([PaidPledgeLine(name=user.reward_title)], False, session)
        return CartValidationDTO(total=validation.total,
                                 validated_lines=validation.validated_lines + paid_pledge.validated_lines)

    @staticmethod
    async def prepare(request: CheckoutRequestDTO, user: UserDTO | None, gateway: PaymentGateway,
                      session: AsyncSession) -> CheckoutDTO:
        """
        Price, verify and persist a checkout, then open the gateway intent.

        Flow:
        1. Authoritative subtotal (PricingService.validate_cart)
        2. Exactly one pledge (apply_pledge_rules)
        3. Shipping for the destination (ShippingService.calculate_shipping)
        4. Tamper check against the client total (one cent tolerance)
        5. Payment strategy (PaymentStrategyService.select)
        6. Pending order row + Stripe customer + SetupIntent or PaymentIntent

        Args:
            request: Client checkout payload
            user: Logged-in account, None for guests
            gateway: Payment gateway
            session: Database session (committed here)

        Raises:
            EmptyCartException, PledgeRequiredException, MultiplePledgesException,
            ItemNotFoundException, PriceMismatchException
        """
        if not request.cart_items:
            raise EmptyCartException(user.id if user else None)

        validation = await PricingService.validate_cart(
            parse_cart(request.cart_items), BackerService.qualifies_for_backer_pricing(user), session)
        validation = await CheckoutService.apply_pledge_rules(validation, user, session)

        country = request.shipping_address.country
        shipping_cost = ShippingService.calculate_shipping(country, validation.validated_lines)
        expected_total = round(validation.total + shipping_cost, 2)
        PricingService.verify_total(expected_total, request.amount)

        decision = PaymentStrategyService.select(
            is_authenticated=user is not None,
            is_dropped_backer=BackerService.is_dropped_backer(user),
            destination_country=country,
            is_late_pledge=BackerService.is_late_pledge(user),
        )

        email = request.shipping_address.email or (user.email if user else None)
        metadata = {
            "userId": user.id if user else "guest",
            "userEmail": email or "unknown",
            "orderAmount": f"{expected_total:.2f}",
            "orderType": decision.order_type.value,
            "userType": decision.user_type.value,
            "shippingCountry": country or "unknown",
        }
        customer_id = await gateway.create_customer(email, request.shipping_address.full_name, metadata)
        if decision.charge_now:
            intent = await gateway.create_payment_intent(customer_id, expected_total, metadata)
        else:
            intent = await gateway.create_setup_intent(customer_id, metadata)

        order_id = await OrderRepository.create(OrderDTO(
            user_id=user.id if user else 0,
            new_addons=json.dumps([line.model_dump(mode="json") for line in validation.validated_lines]),
            shipping_address=request.shipping_address.model_dump_json(by_alias=True, exclude_none=True),
            shipping_cost=shipping_cost,
            addons_subtotal=validation.total,
            total=expected_total,
            stripe_customer_id=customer_id,
            stripe_payment_intent_id=intent.id if decision.charge_now else None,
            stripe_setup_intent_id=None if decision.charge_now else intent.id,
            payment_status=PaymentStatus.PENDING,
            paid=False,
            order_type=decision.order_type.value,
            user_type=decision.user_type.value,
        ), session)
        await session.commit()

        logger.info(f"[Checkout] Order {order_id} created: ${expected_total:.2f} "
                    f"({decision.order_type.value}, {decision.user_type.value})")
        return CheckoutDTO(
            order_id=order_id,
            customer_id=customer_id,
            intent_id=intent.id,
            client_secret=intent.client_secret,
            intent_type="payment" if decision.charge_now else "setup",
            subtotal=validation.total,
            shipping_cost=shipping_cost,
            total=expected_total,
            decision=decision,
        )

    @staticmethod
    async def confirm_payment_method(intent_id: str, gateway: PaymentGateway, session: AsyncSession,
                                     payment_method_id: str | None = None) -> OrderDTO:
        """
        Record the outcome of a client-confirmed intent.

        SetupIntent (seti_...) -> card_saved, paid stays false.
        PaymentIntent succeeded -> succeeded, paid true.
        PaymentIntent in any other state -> charge_failed.

        Raises:
            OrderNotFoundException: no order references the intent
            MissingPaymentMethodException: setup intent confirmed without a payment method
        """
        order = await OrderRepository.get_by_intent_id(intent_id, session)
        if order is None:
            raise OrderNotFoundException(intent_id=intent_id)

        if intent_id.startswith("seti_"):
            intent = await gateway.retrieve_setup_intent(intent_id)
            payment_method_id = payment_method_id or intent.payment_method_id
            if not payment_method_id:
                logger.warning(f"[Checkout] SetupIntent {intent_id} for order {order.id} has no payment method")
                raise MissingPaymentMethodException(order.id)
            await OrderRepository.mark_card_saved(order.id, intent.customer_id, payment_method_id, intent_id, session)
            await session.commit()
            order = await OrderRepository.get_by_id(order.id, session)
            await NotificationService.send_card_saved_confirmation(order, session)
        else:
            intent = await gateway.retrieve_payment_intent(intent_id)
            if intent.status == "succeeded":
                await OrderRepository.mark_succeeded(order.id, intent_id,
                                                     payment_method_id or intent.payment_method_id, session)
                await session.commit()
                order = await OrderRepository.get_by_id(order.id, session)
                await NotificationService.send_payment_successful(order, session)
            else:
                failure = GatewayChargeException(f"Payment not completed (status {intent.status})",
                                                 code=intent.status, order_id=order.id)
                await OrderRepository.mark_charge_failed(order.id, failure.message, failure.code, session,
                                                         performer="checkout")
                await session.commit()
                order = await OrderRepository.get_by_id(order.id, session)
                await NotificationService.send_payment_failed(order, failure.message, failure.code, session)

        await session.commit()
        return order
