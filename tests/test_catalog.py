from decimal import Decimal

import pytest

from catalog import browse, filter_products, rating_summary, sort_products
from factories import make_product
from schemas import FilterCriteria, SortStrategy


@pytest.fixture
def trio():
    return [
        make_product("Cheap Toner", "10", "3", category="toners", is_new=False),
        make_product("Night Cream", "50", "5", category="moisturizers", is_new=True),
        make_product("Clay Mask", "30", "4", category="masks", is_new=False),
    ]


def names(products):
    return [p.name for p in products]


def test_empty_criteria_is_identity(trio):
    assert filter_products(trio, FilterCriteria()) == trio


def test_empty_input():
    assert filter_products([], FilterCriteria(search_query="x")) == []
    assert sort_products([], SortStrategy.rating) == []


def test_price_range_inclusive(trio):
    result = filter_products(trio, FilterCriteria(price_range=(Decimal("20"), Decimal("40"))))
    assert names(result) == ["Clay Mask"]
    result = filter_products(trio, FilterCriteria(price_range=(Decimal("10"), Decimal("30"))))
    assert names(result) == ["Cheap Toner", "Clay Mask"]


def test_inverted_price_range_matches_nothing(trio):
    assert filter_products(trio, FilterCriteria(price_range=(Decimal("40"), Decimal("20")))) == []


def test_open_ended_price_range(trio):
    assert names(filter_products(trio, FilterCriteria(price_range=(Decimal("20"), None)))) == ["Night Cream", "Clay Mask"]
    assert names(filter_products(trio, FilterCriteria(price_range=(None, Decimal("30"))))) == ["Cheap Toner", "Clay Mask"]
    assert filter_products(trio, FilterCriteria(price_range=(None, None))) == trio


def test_search_matches_name_description_and_ingredients():
    products = [
        make_product("Glow Serum", ingredients=["Niacinamide", "Zinc"]),
        make_product("Day Cream", description="Rich HYALURONIC formula"),
        make_product("Clay Mask", ingredients=["Kaolin"]),
    ]
    assert names(filter_products(products, FilterCriteria(search_query="niacin"))) == ["Glow Serum"]
    assert names(filter_products(products, FilterCriteria(search_query="Hyaluronic"))) == ["Day Cream"]
    assert names(filter_products(products, FilterCriteria(search_query="MASK"))) == ["Clay Mask"]


def test_skin_type_all_products_match_any_selection():
    products = [
        make_product("A", skin_type="oily"),
        make_product("B", skin_type="all"),
        make_product("C", skin_type="dry"),
    ]
    assert names(filter_products(products, FilterCriteria(skin_type="oily"))) == ["A", "B"]
    assert names(filter_products(products, FilterCriteria(skin_type="all"))) == ["A", "B", "C"]


def test_category_stock_and_rating_filters(trio):
    trio[2] = trio[2].model_copy(update={"in_stock": False})
    assert names(filter_products(trio, FilterCriteria(category="toners"))) == ["Cheap Toner"]
    assert names(filter_products(trio, FilterCriteria(in_stock_only=True))) == ["Cheap Toner", "Night Cream"]
    assert names(filter_products(trio, FilterCriteria(min_rating=Decimal("4")))) == ["Night Cream", "Clay Mask"]


def test_criteria_combine_conjunctively(trio):
    criteria = FilterCriteria(min_rating=Decimal("4"), price_range=(Decimal("0"), Decimal("40")))
    assert names(filter_products(trio, criteria)) == ["Clay Mask"]


def test_sort_scenarios(trio):
    assert [p.price for p in sort_products(trio, SortStrategy.price_low)] == [10, 30, 50]
    assert [p.price for p in sort_products(trio, SortStrategy.price_high)] == [50, 30, 10]
    assert [p.rating for p in sort_products(trio, SortStrategy.rating)] == [5, 4, 3]
    assert names(sort_products(trio, SortStrategy.newest)) == ["Night Cream", "Cheap Toner", "Clay Mask"]


def test_sort_does_not_mutate_input(trio):
    before = list(trio)
    sort_products(trio, SortStrategy.price_high)
    assert trio == before


def test_featured_is_stable_for_equal_flags():
    products = [make_product(n, is_best_seller=False) for n in ("first", "second", "third")]
    assert names(sort_products(products, SortStrategy.featured)) == ["first", "second", "third"]


def test_featured_puts_best_sellers_first_keeping_order():
    products = [
        make_product("a"),
        make_product("b", is_best_seller=True),
        make_product("c"),
        make_product("d", is_best_seller=True),
    ]
    assert names(sort_products(products)) == ["b", "d", "a", "c"]


@pytest.mark.parametrize("strategy", list(SortStrategy))
def test_sort_is_idempotent(trio, strategy):
    once = sort_products(trio, strategy)
    assert sort_products(once, strategy) == once


def test_sort_accepts_strategy_string(trio):
    assert sort_products(trio, "price-low") == sort_products(trio, SortStrategy.price_low)


def test_browse_filters_then_sorts(trio):
    result = browse(trio, FilterCriteria(min_rating=Decimal("4")), SortStrategy.price_low)
    assert names(result) == ["Clay Mask", "Night Cream"]


def test_rating_summary_rounds_to_one_decimal():
    assert rating_summary([5, 4, 4]) == (Decimal("4.3"), 3)
    assert rating_summary([4, 5]) == (Decimal("4.5"), 2)
    assert rating_summary([]) == (Decimal("0"), 0)
