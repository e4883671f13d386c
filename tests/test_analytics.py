import logging
from datetime import date, datetime, timedelta
from decimal import Decimal

import analytics
from factories import make_order, make_product
from schemas import User


def test_empty_inputs_give_identity_results():
    assert analytics.total_revenue([]) == 0
    assert analytics.average_order_value([]) == 0
    assert analytics.orders_by_status([]) == {}
    assert analytics.cumulative_revenue([]) == []
    assert analytics.category_distribution([]) == {}
    assert analytics.stock_status([]).model_dump() == {"in_stock": 0, "out_of_stock": 0}
    assert analytics.average_price([]) == 0


def test_revenue_and_average_are_exact():
    orders = [make_order("100.00"), make_order("250.50"), make_order("75.25")]
    assert analytics.total_revenue(orders) == Decimal("425.75")
    avg = analytics.average_order_value(orders)
    assert avg == Decimal("425.75") / 3
    assert analytics.to_cents(avg) == Decimal("141.92")


def test_total_revenue_includes_cancelled_orders():
    orders = [make_order("10.00"), make_order("5.00", status="cancelled")]
    assert analytics.total_revenue(orders) == Decimal("15.00")


def test_decimal_summation_has_no_float_drift():
    orders = [make_order("0.10") for _ in range(1000)]
    assert analytics.total_revenue(orders) == Decimal("100.00")


def test_orders_by_status_omits_unseen_statuses():
    orders = [make_order("1"), make_order("1"), make_order("1", status="shipped")]
    assert analytics.orders_by_status(orders) == {"pending": 2, "shipped": 1}


def test_unknown_status_is_kept_and_logged(caplog):
    orders = [make_order("1", status="completed"), make_order("1", status="delivered")]
    with caplog.at_level(logging.WARNING):
        counts = analytics.orders_by_status(orders)
    assert counts == {"completed": 1, "delivered": 1}
    assert "completed" in caplog.text
    assert analytics.unrecognized_statuses(orders) == ["completed"]


def test_revenue_by_status():
    orders = [make_order("10"), make_order("2.5"), make_order("4", status="cancelled")]
    assert analytics.revenue_by_status(orders) == {"pending": Decimal("12.5"), "cancelled": Decimal("4")}


def test_monthly_series_always_has_twelve_entries():
    series = analytics.monthly_series([], 2024)
    assert len(series) == 12
    assert [m.month for m in series][:3] == ["Jan", "Feb", "Mar"]
    assert all(m.revenue == 0 and m.order_count == 0 for m in series)


def test_monthly_series_buckets_by_month_within_year():
    orders = [
        make_order("10", datetime(2024, 1, 3)),
        make_order("15", datetime(2024, 1, 30)),
        make_order("7", datetime(2024, 12, 31, 23, 59)),
        make_order("99", datetime(2023, 1, 5)),
    ]
    series = analytics.monthly_series(orders, 2024)
    assert len(series) == 12
    assert (series[0].revenue, series[0].order_count) == (Decimal("25"), 2)
    assert (series[11].revenue, series[11].order_count) == (Decimal("7"), 1)
    assert sum(m.order_count for m in series) == 3


def test_daily_series_zero_fills_trailing_window():
    today = date(2024, 6, 30)
    orders = [
        make_order("1", datetime(2024, 6, 30, 9)),
        make_order("1", datetime(2024, 6, 30, 18)),
        make_order("1", datetime(2024, 6, 1)),
        make_order("1", datetime(2024, 5, 31)),
    ]
    series = analytics.daily_series(orders, 30, today=today)
    assert len(series) == 30
    assert series[0].date == date(2024, 6, 1)
    assert series[-1].date == today
    assert series[0].order_count == 1
    assert series[-1].order_count == 2
    assert sum(p.order_count for p in series) == 3


def test_daily_series_without_orders():
    series = analytics.daily_series([], 7, today=date(2024, 3, 1))
    assert [p.order_count for p in series] == [0] * 7
    assert series[0].date == date(2024, 3, 1) - timedelta(days=6)


def test_cumulative_revenue_sorted_and_matches_total():
    orders = [
        make_order("30", datetime(2024, 3, 1)),
        make_order("10", datetime(2024, 1, 1)),
        make_order("20.55", datetime(2024, 2, 1)),
    ]
    points = analytics.cumulative_revenue(orders)
    assert [p.running_total for p in points] == [Decimal("10"), Decimal("30.55"), Decimal("60.55")]
    assert [p.index for p in points] == [1, 2, 3]
    assert points[-1].running_total == analytics.total_revenue(orders)


def test_product_reducers():
    products = [
        make_product("A", "10", category="serums", is_best_seller=True),
        make_product("B", "20", category="serums", in_stock=False),
        make_product("C", "45", category="masks"),
    ]
    assert analytics.category_distribution(products) == {"serums": 2, "masks": 1}
    assert analytics.stock_status(products).model_dump() == {"in_stock": 2, "out_of_stock": 1}
    assert analytics.best_seller_count(products) == 1
    assert analytics.average_price(products) == Decimal("25")
    assert [p.name for p in analytics.top_products_by_price(products, limit=2)] == ["C", "B"]


def test_dashboard_snapshot_rounds_money_to_cents():
    orders = [
        make_order("100.00", datetime(2024, 2, 1)),
        make_order("250.50", datetime(2024, 2, 2)),
        make_order("75.25", datetime(2024, 3, 3), status="cancelled"),
    ]
    products = [make_product("A", "10"), make_product("B", "20", in_stock=False)]
    snap = analytics.dashboard_snapshot(orders, products, year=2024, window_days=7, today=date(2024, 3, 3))
    assert snap.total_revenue == Decimal("425.75")
    assert snap.average_order_value == Decimal("141.92")
    assert snap.order_count == 3
    assert snap.orders_by_status == {"pending": 2, "cancelled": 1}
    assert len(snap.monthly) == 12
    assert snap.monthly[1].order_count == 2
    assert len(snap.daily) == 7
    assert snap.daily[-1].order_count == 1
    assert snap.cumulative[-1].running_total == snap.total_revenue
    assert snap.stock.out_of_stock == 1
    assert snap.average_price == Decimal("15.00")
    assert snap.unrecognized_statuses == []


def test_dashboard_snapshot_on_empty_store():
    snap = analytics.dashboard_snapshot([], [], today=date(2024, 1, 10))
    assert snap.total_revenue == 0
    assert snap.average_order_value == 0
    assert len(snap.monthly) == 12
    assert len(snap.daily) == 30
    assert snap.top_products == []


def test_user_stats():
    today = date(2024, 6, 30)
    users = [
        User(email="a@example.com", email_verified=True, created_at=datetime(2024, 6, 29)),
        User(email="b@example.com", role="admin", created_at=datetime(2024, 1, 1)),
        User(email="c@example.com", auth_provider="google", role="owner", email_verified=True),
    ]
    stats = analytics.user_stats(users, today=today)
    assert stats.total == 3
    assert stats.verified == 2
    assert stats.admins == 2
    assert stats.by_provider == {"local": 2, "google": 1}
    assert stats.recent_signups == 1
