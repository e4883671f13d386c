"""
Dashboard statistics for the admin and owner back office.

Each reducer takes the current order/product lists and returns a fresh
result; nothing is cached between calls. Money is summed as Decimal.
Reducers return full precision; dashboard_snapshot rounds money to cents
(ROUND_HALF_UP) for display.
"""
import logging
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence

from schemas import (
    ORDER_STATUSES,
    AggregateSnapshot,
    CumulativePoint,
    DailyPoint,
    MonthlyPoint,
    Order,
    PricedProduct,
    Product,
    StockStatus,
    User,
    UserStats,
)

logger = logging.getLogger(__name__)

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
CENT = Decimal("0.01")
ZERO = Decimal("0")


def _utc(dt: datetime) -> datetime:
    # naive timestamps from Mongo are already UTC
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _today() -> date:
    return datetime.now(timezone.utc).date()


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


# Orders

def total_revenue(orders: Sequence[Order]) -> Decimal:
    """Sum of order totals. Every status counts, cancelled included."""
    return sum((o.total for o in orders), ZERO)


def average_order_value(orders: Sequence[Order]) -> Decimal:
    if not orders:
        return ZERO
    return total_revenue(orders) / len(orders)


def orders_by_status(orders: Sequence[Order]) -> Dict[str, int]:
    counts = Counter(o.status for o in orders)
    for status in counts:
        if status not in ORDER_STATUSES:
            logger.warning("%d order(s) with unrecognized status %r", counts[status], status)
    return dict(counts)


def revenue_by_status(orders: Sequence[Order]) -> Dict[str, Decimal]:
    revenue: Dict[str, Decimal] = {}
    for o in orders:
        revenue[o.status] = revenue.get(o.status, ZERO) + o.total
    return revenue


def unrecognized_statuses(orders: Sequence[Order]) -> List[str]:
    """Status values outside OrderStatus, sorted. Not remapped."""
    return sorted({o.status for o in orders if o.status not in ORDER_STATUSES})


def monthly_series(orders: Sequence[Order], year: int) -> List[MonthlyPoint]:
    revenue = [ZERO] * 12
    counts = [0] * 12
    for o in orders:
        created = _utc(o.created_at)
        if created.year != year:
            continue
        revenue[created.month - 1] += o.total
        counts[created.month - 1] += 1
    return [
        MonthlyPoint(month=name, revenue=revenue[i], order_count=counts[i])
        for i, name in enumerate(MONTHS)
    ]


def daily_series(
    orders: Sequence[Order], window_days: int = 30, today: Optional[date] = None
) -> List[DailyPoint]:
    """Order counts for the window_days days ending today, oldest first."""
    if window_days <= 0:
        return []
    today = today or _today()
    start = today - timedelta(days=window_days - 1)
    counts = Counter()
    for o in orders:
        day = _utc(o.created_at).date()
        if start <= day <= today:
            counts[day] += 1
    days = (start + timedelta(days=i) for i in range(window_days))
    return [DailyPoint(date=d, order_count=counts[d]) for d in days]


def cumulative_revenue(orders: Sequence[Order]) -> List[CumulativePoint]:
    """Running revenue total, oldest order first. index is 1-based."""
    running = ZERO
    points = []
    for i, o in enumerate(sorted(orders, key=lambda o: _utc(o.created_at)), start=1):
        running += o.total
        points.append(CumulativePoint(index=i, date=o.created_at, running_total=running))
    return points


# Products

def category_distribution(products: Sequence[Product]) -> Dict[str, int]:
    return dict(Counter(p.category.value for p in products))


def stock_status(products: Sequence[Product]) -> StockStatus:
    in_stock = sum(1 for p in products if p.in_stock)
    return StockStatus(in_stock=in_stock, out_of_stock=len(products) - in_stock)


def best_seller_count(products: Sequence[Product]) -> int:
    return sum(1 for p in products if p.is_best_seller)


def average_price(products: Sequence[Product]) -> Decimal:
    if not products:
        return ZERO
    return sum((p.price for p in products), ZERO) / len(products)


def top_products_by_price(products: Sequence[Product], limit: int = 5) -> List[PricedProduct]:
    ranked = sorted(products, key=lambda p: p.price, reverse=True)[:limit]
    return [PricedProduct(id=p.id, name=p.name, price=p.price) for p in ranked]


def dashboard_snapshot(
    orders: Sequence[Order],
    products: Sequence[Product],
    year: Optional[int] = None,
    window_days: int = 30,
    today: Optional[date] = None,
) -> AggregateSnapshot:
    today = today or _today()
    year = year or today.year
    return AggregateSnapshot(
        total_revenue=to_cents(total_revenue(orders)),
        order_count=len(orders),
        average_order_value=to_cents(average_order_value(orders)),
        orders_by_status=orders_by_status(orders),
        revenue_by_status={k: to_cents(v) for k, v in revenue_by_status(orders).items()},
        unrecognized_statuses=unrecognized_statuses(orders),
        monthly=[
            MonthlyPoint(month=m.month, revenue=to_cents(m.revenue), order_count=m.order_count)
            for m in monthly_series(orders, year)
        ],
        daily=daily_series(orders, window_days, today),
        cumulative=[
            CumulativePoint(index=c.index, date=c.date, running_total=to_cents(c.running_total))
            for c in cumulative_revenue(orders)
        ],
        product_count=len(products),
        category_distribution=category_distribution(products),
        stock=stock_status(products),
        best_seller_count=best_seller_count(products),
        average_price=to_cents(average_price(products)),
        top_products=top_products_by_price(products),
        generated_at=datetime.now(timezone.utc),
    )


# Users

def user_stats(users: Sequence[User], today: Optional[date] = None) -> UserStats:
    today = today or _today()
    week_ago = today - timedelta(days=7)
    by_provider = Counter(u.auth_provider or "unknown" for u in users)
    return UserStats(
        total=len(users),
        verified=sum(1 for u in users if u.email_verified),
        admins=sum(1 for u in users if u.role in ("admin", "owner")),
        by_provider=dict(by_provider),
        recent_signups=sum(
            1 for u in users if u.created_at and _utc(u.created_at).date() > week_ago
        ),
    )
