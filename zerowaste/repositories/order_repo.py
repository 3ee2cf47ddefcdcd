# zerowaste/repositories/order_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select, col

from zerowaste.models.order import Order, OrderItem
from zerowaste.schemas.order import OrderQuery

# sort key -> ORDER BY clause
ORDER_SORTS = {
    "newest": col(Order.created_at).desc(),
    "oldest": col(Order.created_at).asc(),
    "amount-high": col(Order.total_amount).desc(),
    "amount-low": col(Order.total_amount).asc(),
}

# Statuses that count as money actually spent
SPENT_STATUSES = ("paid", "completed")


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; checkout and webhook updates touch several rows.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def _buyer_filter(self, stmt, buyer_id: uuid.UUID, query: OrderQuery):
        stmt = stmt.where(Order.buyer_id == buyer_id)
        if query.status and query.status != "all":
            stmt = stmt.where(Order.status == query.status)
        return stmt

    def list_for_buyer(
        self,
        session: Session,
        buyer_id: uuid.UUID,
        query: OrderQuery,
    ) -> list[Order]:
        stmt = self._buyer_filter(select(Order), buyer_id, query)
        stmt = (
            stmt.order_by(ORDER_SORTS[query.sort])
            .offset(query.offset)
            .limit(query.limit)
        )
        return session.exec(stmt).all()

    def count_for_buyer(
        self,
        session: Session,
        buyer_id: uuid.UUID,
        query: OrderQuery,
    ) -> int:
        stmt = self._buyer_filter(
            select(func.count()).select_from(Order), buyer_id, query
        )
        return int(session.exec(stmt).one() or 0)

    def get_for_buyer(
        self,
        session: Session,
        order_id: uuid.UUID,
        buyer_id: uuid.UUID,
    ) -> Order | None:
        stmt = select(Order).where(Order.id == order_id, Order.buyer_id == buyer_id)
        return session.exec(stmt).first()

    def list_by_transaction(self, session: Session, transaction_id: str) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.transaction_id == transaction_id)
            .order_by(col(Order.created_at))
        )
        return session.exec(stmt).all()

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    # ---- Order items ----

    def list_items_for_orders(
        self,
        session: Session,
        order_ids: set[uuid.UUID],
    ) -> dict[uuid.UUID, list[OrderItem]]:
        grouped: dict[uuid.UUID, list[OrderItem]] = {oid: [] for oid in order_ids}
        if not order_ids:
            return grouped
        stmt = select(OrderItem).where(col(OrderItem.order_id).in_(order_ids))
        for item in session.exec(stmt).all():
            grouped[item.order_id].append(item)
        return grouped

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        return items

    # ---- Aggregates ----

    def stats_by_status(
        self,
        session: Session,
        buyer_id: uuid.UUID,
    ) -> list[tuple]:
        """
        (status, order_count, total_amount) per status for one buyer.
        """
        stmt = (
            select(
                Order.status,
                func.count(Order.id).label("order_count"),
                func.coalesce(func.sum(Order.total_amount), 0.0).label("total_amount"),
            )
            .where(Order.buyer_id == buyer_id)
            .group_by(Order.status)
        )
        return list(session.exec(stmt).all())

    def total_spent(self, session: Session, buyer_id: uuid.UUID) -> float:
        """
        Sum of total_amount over paid/completed orders.
        """
        stmt = select(func.coalesce(func.sum(Order.total_amount), 0.0)).where(
            Order.buyer_id == buyer_id,
            col(Order.status).in_(SPENT_STATUSES),
        )
        return float(session.exec(stmt).one() or 0.0)
