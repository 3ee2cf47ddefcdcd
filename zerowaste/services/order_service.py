# zerowaste/services/order_service.py
import math
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from zerowaste.models.order import Order, OrderItem
from zerowaste.models.user import utcnow
from zerowaste.repositories.order_repo import OrderRepository
from zerowaste.repositories.user_repo import UserRepository
from zerowaste.schemas.order import (
    ORDER_STATUSES,
    OrderLineRead,
    OrderQuery,
    OrderRead,
    OrderStats,
    Pagination,
    StatusStats,
)
from zerowaste.services.presenters import Presenter

DEFAULT_CANCEL_REASON = "Cancelled by user"


class OrderService:
    """
    Business logic for the buyer's order history.

    Responsibilities:
      - paginated listing and per-status statistics
      - buyer-scoped lookups (other users' orders read as 404)
      - cancellation of pending orders
      - rendering both order shapes (single product / cart) the same way
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        user_repo: UserRepository,
        presenter: Presenter,
    ):
        self.order_repo = order_repo
        self.user_repo = user_repo
        self.presenter = presenter

    # -------- Rendering --------

    def build_orders(self, session: Session, orders: list[Order]) -> list[OrderRead]:
        """
        Render orders with their lines, product summaries and seller.

        Single-product orders get one synthesized line so clients can
        always iterate `items`.
        """
        items_by_order = self.order_repo.list_items_for_orders(session, {o.id for o in orders})

        product_ids: set[uuid.UUID] = set()
        for order in orders:
            if order.product_id:
                product_ids.add(order.product_id)
            product_ids.update(it.product_id for it in items_by_order[order.id])

        products = self.presenter.product_summaries(session, product_ids)
        sellers = self.user_repo.get_by_ids(session, {o.seller_id for o in orders})

        def line(item: OrderItem) -> OrderLineRead:
            return OrderLineRead(
                product_id=item.product_id,
                product_name=item.product_name,
                product=products.get(item.product_id),
                quantity=item.quantity,
                price=item.price,
                line_total=item.price * item.quantity,
            )

        result = []
        for order in orders:
            if order.product_id:
                price = order.total_amount / order.quantity if order.quantity else 0.0
                lines = [
                    OrderLineRead(
                        product_id=order.product_id,
                        product_name=order.product_name,
                        product=products.get(order.product_id),
                        quantity=order.quantity,
                        price=price,
                        line_total=order.total_amount,
                    )
                ]
            else:
                lines = [line(it) for it in items_by_order[order.id]]

            result.append(
                OrderRead(
                    id=order.id,
                    buyer_id=order.buyer_id,
                    seller_id=order.seller_id,
                    seller=self.presenter.seller(sellers.get(order.seller_id)),
                    order_type="single" if order.product_id else "cart",
                    product_id=order.product_id,
                    product=products.get(order.product_id) if order.product_id else None,
                    quantity=order.quantity,
                    items=lines,
                    total_amount=order.total_amount,
                    status=order.status,
                    transaction_id=order.transaction_id,
                    payment_method=order.payment_method,
                    payment_type=order.payment_type,
                    notes=order.notes,
                    paid_at=order.paid_at,
                    completed_at=order.completed_at,
                    cancelled_at=order.cancelled_at,
                    cancel_reason=order.cancel_reason,
                    created_at=order.created_at,
                    updated_at=order.updated_at,
                )
            )
        return result

    # -------- Buyer operations --------

    def list_orders(
        self,
        session: Session,
        buyer_id: uuid.UUID,
        query: OrderQuery,
    ) -> tuple[list[OrderRead], Pagination]:
        orders = self.order_repo.list_for_buyer(session, buyer_id, query)
        total = self.order_repo.count_for_buyer(session, buyer_id, query)
        total_pages = math.ceil(total / query.limit)

        pagination = Pagination(
            current_page=query.page,
            total_pages=total_pages,
            total_orders=total,
            has_next_page=query.page < total_pages,
            has_prev_page=query.page > 1,
            limit=query.limit,
        )
        return self.build_orders(session, orders), pagination

    def get_stats(self, session: Session, buyer_id: uuid.UUID) -> OrderStats:
        """
        Count and amount per status (every status present, zero-filled)
        plus the total actually spent.
        """
        by_status = {s: StatusStats() for s in ORDER_STATUSES}
        total_orders = 0
        for order_status, count, amount in self.order_repo.stats_by_status(session, buyer_id):
            by_status[order_status] = StatusStats(count=count, total_amount=float(amount))
            total_orders += count

        return OrderStats(
            total_orders=total_orders,
            total_spent=self.order_repo.total_spent(session, buyer_id),
            by_status=by_status,
        )

    def get_order(self, session: Session, buyer_id: uuid.UUID, order_id: uuid.UUID) -> OrderRead:
        """
        Raises:
            HTTPException(404): unknown order or not the caller's.
        """
        order = self.order_repo.get_for_buyer(session, order_id, buyer_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return self.build_orders(session, [order])[0]

    def cancel_order(
        self,
        session: Session,
        buyer_id: uuid.UUID,
        order_id: uuid.UUID,
        reason: str | None,
    ) -> OrderRead:
        """
        Cancel one of the caller's orders while it is still pending.
        """
        order = self.order_repo.get_for_buyer(session, order_id, buyer_id)
        if not order or order.status != "pending":
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found or cannot be cancelled",
            )

        now = utcnow()
        order.status = "cancelled"
        order.cancel_reason = (reason or "").strip() or DEFAULT_CANCEL_REASON
        order.cancelled_at = now
        order.updated_at = now
        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)

        return self.build_orders(session, [order])[0]
