# pos_api/services/order_service.py
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from fastapi import UploadFile
from sqlalchemy import update
from sqlmodel import Session, func, select

from pos_api.config import Settings, settings as default_settings
from pos_api.constants.order_status import (
    ALLOWED_TRANSITIONS,
    OrderStatus,
    PaymentMethod,
    initial_status,
)
from pos_api.errors import (
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from pos_api.models.order import Order
from pos_api.models.order_item import OrderItem
from pos_api.models.payment_method_setting import PaymentMethodSetting
from pos_api.models.payment_proof import PaymentProof
from pos_api.services.catalog import CatalogStore
from pos_api.services.file_storage import PAYMENT_PROOF_FOLDER
from pos_api.services.payment_methods import PaymentMethodRegistry
from pos_api.utils.pagination import paginate

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "created_at": Order.created_at,
    "updated_at": Order.updated_at,
    "total_amount": Order.total_amount,
    "customer_name": Order.customer_name,
    "status": Order.status,
}


def _parse_payment_method(value) -> PaymentMethod:
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(value)
    except ValueError:
        raise ValidationError(f"Payment method {value} is not available")


class OrderService:
    """
    Order lifecycle: creation with stock validation, proof upload,
    verification, completion (stock decrement) and cancellation.

    Every transition claims the order with a conditional UPDATE on its
    current status, so two concurrent requests cannot both move the same
    order out of a status.
    """

    def __init__(
        self,
        session: Session,
        file_storage=None,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.file_storage = file_storage
        self.settings = settings or default_settings
        self.catalog = CatalogStore(session)
        self.payment_methods = PaymentMethodRegistry(session)

    # ------------------------------------------------------------------ #
    # helpers
    # ------------------------------------------------------------------ #

    def _require_order(self, order_id: int) -> Order:
        order = self.session.get(Order, order_id)
        if not order:
            raise NotFoundError("Order not found", order_id=order_id)
        return order

    def _require_method_setting(self, order: Order) -> PaymentMethodSetting:
        setting = self.payment_methods.get_method(order.payment_method.value)
        if not setting:
            raise NotFoundError(
                f"Payment method {order.payment_method.value} configuration not found"
            )
        return setting

    def _claim_transition(
        self,
        order_id: int,
        allowed_from: Iterable[OrderStatus],
        to_status: OrderStatus,
    ) -> bool:
        """Move the order to ``to_status`` only if it is still in ``allowed_from``."""
        result = self.session.execute(
            update(Order)
            .where(Order.id == order_id, Order.status.in_(list(allowed_from)))
            .values(status=to_status, updated_at=datetime.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _reject_transition(self, order_id: int, message: str):
        """Roll back and raise with the status the order has right now."""
        self.session.rollback()
        order = self._require_order(order_id)
        raise InvalidStateError(
            f"{message} (current status: {order.status.value})",
            current_status=order.status,
            order_id=order_id,
        )

    def _reload(self, order_id: int) -> Order:
        order = self._require_order(order_id)
        self.session.refresh(order)
        return order

    # ------------------------------------------------------------------ #
    # creation
    # ------------------------------------------------------------------ #

    def create_order(
        self,
        customer_name: str,
        items: Sequence,
        payment_method=None,
    ) -> Order:
        """
        Validate every line against the catalog and persist the order with its
        items in one transaction. Stock is checked but not decremented here.

        ``items`` holds ``(product_id, quantity)`` pairs or objects/dicts with
        ``product_id`` and ``quantity``.
        """
        if not customer_name or not customer_name.strip():
            raise ValidationError("Customer name is required")

        if not items:
            raise ValidationError("Order must contain at least one item")

        method = _parse_payment_method(payment_method or self.settings.default_payment_method)

        try:
            setting = self.payment_methods.get_method(method.value)
            if not setting or not setting.is_enabled:
                raise ValidationError(f"Payment method {method.value} is not available")

            lines = [_unpack_line(line) for line in items]

            # a product listed twice is checked against its combined quantity
            requested: Dict[int, int] = {}
            for product_id, quantity in lines:
                if quantity < 1:
                    raise ValidationError(
                        f"Quantity for product {product_id} must be at least 1"
                    )
                requested[product_id] = requested.get(product_id, 0) + quantity

            products = {}
            for product_id, quantity in requested.items():
                product = self.catalog.require_product(product_id)

                if product.stock < quantity:
                    raise InsufficientStockError(
                        f"Insufficient stock for product: {product.name}",
                        product_id=product.id,
                    )
                products[product_id] = product

            total_amount = 0.0
            order_items: List[OrderItem] = []

            for product_id, quantity in lines:
                product = products[product_id]
                subtotal = product.price * quantity
                total_amount += subtotal
                order_items.append(
                    OrderItem(product_id=product.id, quantity=quantity, subtotal=subtotal)
                )

            order = Order(
                customer_name=customer_name.strip(),
                total_amount=total_amount,
                status=initial_status(setting.requires_proof),
                payment_method=method,
                items=order_items,
            )
            self.session.add(order)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.session.refresh(order)
        logger.info(
            f"Order {order.id} created for {order.customer_name}: "
            f"{len(order_items)} items, total {order.total_amount}, status {order.status.value}"
        )
        return order

    # ------------------------------------------------------------------ #
    # payment proof
    # ------------------------------------------------------------------ #

    def upload_payment_proof(self, order_id: int, upload: UploadFile) -> Order:
        """
        Attach a proof image and move the order to PAYMENT_UPLOADED.

        An order that already has a proof gets it replaced and the previous
        file is removed once the new one is committed.
        """
        if self.file_storage is None:
            raise RuntimeError("OrderService needs a file storage to accept payment proofs")

        order = self._require_order(order_id)

        if order.status not in ALLOWED_TRANSITIONS["upload_proof"]:
            raise InvalidStateError(
                "Payment proof can only be uploaded for pending orders "
                f"(current status: {order.status.value})",
                current_status=order.status,
                order_id=order_id,
            )

        setting = self._require_method_setting(order)
        if not setting.requires_proof:
            raise InvalidStateError(
                f"Payment proof upload is not required for "
                f"{order.payment_method.value} payment method",
                current_status=order.status,
                order_id=order_id,
            )

        new_file_url = self.file_storage.save_image(
            upload,
            folder=PAYMENT_PROOF_FOLDER,
            prefix="payment-proof",
            max_size=self.settings.max_payment_proof_size,
        )

        old_file_url = None
        try:
            if not self._claim_transition(
                order_id, ALLOWED_TRANSITIONS["upload_proof"], OrderStatus.PAYMENT_UPLOADED
            ):
                self._reject_transition(
                    order_id, "Payment proof can only be uploaded for pending orders"
                )

            proof = self.session.exec(
                select(PaymentProof).where(PaymentProof.order_id == order_id)
            ).first()

            if proof:
                old_file_url = proof.file_url
                proof.file_url = new_file_url
                proof.updated_at = datetime.now()
            else:
                proof = PaymentProof(order_id=order_id, file_url=new_file_url)

            self.session.add(proof)
            self.session.commit()
        except Exception:
            self.session.rollback()
            self.file_storage.delete(new_file_url)
            raise

        if old_file_url and old_file_url != new_file_url:
            self.file_storage.delete(old_file_url)
            logger.info(f"Replaced payment proof for order {order_id}")

        logger.info(f"Payment proof uploaded for order {order_id}")
        return self._reload(order_id)

    # ------------------------------------------------------------------ #
    # transitions
    # ------------------------------------------------------------------ #

    def verify_payment(self, order_id: int) -> Order:
        order = self._require_order(order_id)
        setting = self._require_method_setting(order)

        if setting.requires_proof:
            allowed = ALLOWED_TRANSITIONS["verify_with_proof"]
            if order.status not in allowed:
                raise InvalidStateError(
                    "Only orders with uploaded payment can be verified "
                    f"(current status: {order.status.value})",
                    current_status=order.status,
                    order_id=order_id,
                )
            if not order.payment_proof:
                raise InvalidStateError(
                    f"No payment proof found for this {order.payment_method.value} order",
                    current_status=order.status,
                    order_id=order_id,
                )
        else:
            allowed = ALLOWED_TRANSITIONS["verify_without_proof"]
            if order.status not in allowed:
                raise InvalidStateError(
                    "Only pending or already verified orders can be processed "
                    f"(current status: {order.status.value})",
                    current_status=order.status,
                    order_id=order_id,
                )

        try:
            if not self._claim_transition(order_id, allowed, OrderStatus.PAYMENT_VERIFIED):
                self._reject_transition(order_id, "Order can no longer be verified")
            self.session.commit()
        except InvalidStateError:
            raise
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Payment verified for order {order_id}")
        return self._reload(order_id)

    def complete_order(self, order_id: int) -> Order:
        """
        Mark a verified order COMPLETED and decrement stock for each item.
        Both happen in one transaction.
        """
        order = self._require_order(order_id)

        if order.status not in ALLOWED_TRANSITIONS["complete"]:
            raise InvalidStateError(
                f"Only verified orders can be completed (current status: {order.status.value})",
                current_status=order.status,
                order_id=order_id,
            )

        lines = [(item.product_id, item.quantity) for item in order.items]
        guard = self.settings.enforce_stock_on_completion

        try:
            if not self._claim_transition(
                order_id, ALLOWED_TRANSITIONS["complete"], OrderStatus.COMPLETED
            ):
                self._reject_transition(order_id, "Only verified orders can be completed")

            for product_id, quantity in lines:
                self.catalog.decrement_stock(product_id, quantity, guard=guard)

            self.session.commit()
        except InvalidStateError:
            raise
        except Exception:
            logger.error(f"Completing order {order_id} failed, rolling back")
            self.session.rollback()
            raise

        logger.info(f"Order {order_id} completed, stock decremented for {len(lines)} items")
        return self._reload(order_id)

    def cancel_order(self, order_id: int) -> Order:
        order = self._require_order(order_id)
        allowed = ALLOWED_TRANSITIONS["cancel"]

        if order.status not in allowed:
            raise InvalidStateError(
                "Only pending, payment uploaded, or payment verified orders can be cancelled "
                f"(current status: {order.status.value})",
                current_status=order.status,
                order_id=order_id,
            )

        try:
            if not self._claim_transition(order_id, allowed, OrderStatus.CANCELLED):
                self._reject_transition(order_id, "Order can no longer be cancelled")
            self.session.commit()
        except InvalidStateError:
            raise
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Order {order_id} cancelled")
        return self._reload(order_id)

    # ------------------------------------------------------------------ #
    # queries
    # ------------------------------------------------------------------ #

    def get_order(self, order_id: int) -> Order:
        return self._require_order(order_id)

    def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        customer_name: Optional[str] = None,
        payment_method: Optional[PaymentMethod] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ):
        query = select(Order)

        if status:
            query = query.where(Order.status == status)

        if payment_method:
            query = query.where(Order.payment_method == payment_method)

        if customer_name:
            query = query.where(Order.customer_name.ilike(f"%{customer_name}%"))

        if start_date:
            query = query.where(Order.created_at >= datetime.combine(start_date, datetime.min.time()))

        if end_date:
            # include the whole end date
            end_exclusive = datetime.combine(end_date, datetime.min.time()) + timedelta(days=1)
            query = query.where(Order.created_at < end_exclusive)

        column = SORTABLE_FIELDS.get(sort_by)
        if column is None:
            raise ValidationError(f"Cannot sort orders by {sort_by}")
        query = query.order_by(column.asc() if sort_order == "asc" else column.desc())

        return paginate(session=self.session, query=query, page=page, limit=limit)

    def pending_counts(self) -> dict:
        proof_methods = [
            s.method
            for s in self.session.exec(
                select(PaymentMethodSetting).where(
                    PaymentMethodSetting.requires_proof == True,  # noqa: E712
                    PaymentMethodSetting.is_enabled == True,  # noqa: E712
                )
            ).all()
        ]
        no_proof_methods = [
            s.method
            for s in self.session.exec(
                select(PaymentMethodSetting).where(
                    PaymentMethodSetting.requires_proof == False  # noqa: E712
                )
            ).all()
        ]

        payment_uploaded_count = self._count(
            Order.status == OrderStatus.PAYMENT_UPLOADED,
            Order.payment_method.in_(_as_methods(proof_methods)),
        )
        verified_awaiting_completion_count = self._count(
            Order.status == OrderStatus.PAYMENT_VERIFIED,
            Order.payment_method.in_(_as_methods(no_proof_methods)),
        )
        pending_count = self._count(Order.status == OrderStatus.PENDING)

        return {
            "total": payment_uploaded_count + verified_awaiting_completion_count + pending_count,
            "payment_uploaded_count": payment_uploaded_count,
            "verified_awaiting_completion_count": verified_awaiting_completion_count,
            "pending_count": pending_count,
        }

    def _count(self, *conditions) -> int:
        return self.session.exec(
            select(func.count(Order.id)).where(*conditions)
        ).one()


def _as_methods(identifiers: List[str]) -> List[PaymentMethod]:
    return [PaymentMethod(m) for m in identifiers if m in PaymentMethod.__members__]


def _unpack_line(line):
    if isinstance(line, dict):
        product_id, quantity = line.get("product_id"), line.get("quantity")
    elif isinstance(line, (tuple, list)):
        product_id, quantity = line
    else:
        product_id, quantity = line.product_id, line.quantity

    if product_id is None or quantity is None:
        raise ValidationError("Each item needs a product_id and a quantity")

    return int(product_id), int(quantity)
