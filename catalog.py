"""
Catalog filtering and sorting for the shop pages.

Everything here is a pure function over an in-memory list of products.
Results are recomputed on every call.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence, Tuple

from schemas import FilterCriteria, Product, SortStrategy


def _matches_search(product: Product, query: str) -> bool:
    if query in product.name.lower():
        return True
    if query in product.description.lower():
        return True
    return any(query in i.lower() for i in product.ingredients)


def filter_products(products: Sequence[Product], criteria: FilterCriteria) -> List[Product]:
    """Keep the products matching every active criterion, in input order.

    A product with skin type "all" matches any requested skin type. An
    inverted price range is not an error, it just matches nothing.
    """
    query = criteria.search_query.strip().lower()
    result = []
    for p in products:
        if query and not _matches_search(p, query):
            continue
        if criteria.category != "all" and p.category != criteria.category:
            continue
        if criteria.skin_type != "all" and p.skin_type not in (criteria.skin_type, "all"):
            continue
        if criteria.price_range is not None:
            low, high = criteria.price_range
            if low is not None and p.price < low:
                continue
            if high is not None and p.price > high:
                continue
        if criteria.in_stock_only and not p.in_stock:
            continue
        if criteria.min_rating > 0 and p.rating < criteria.min_rating:
            continue
        result.append(p)
    return result


def sort_products(products: Sequence[Product], strategy: SortStrategy = SortStrategy.featured) -> List[Product]:
    """Return a new list ordered by strategy.

    sorted() is stable, so products tying on the key keep their input order.
    """
    strategy = SortStrategy(strategy)
    if strategy == SortStrategy.price_low:
        return sorted(products, key=lambda p: p.price)
    if strategy == SortStrategy.price_high:
        return sorted(products, key=lambda p: p.price, reverse=True)
    if strategy == SortStrategy.rating:
        return sorted(products, key=lambda p: p.rating, reverse=True)
    if strategy == SortStrategy.newest:
        return sorted(products, key=lambda p: not p.is_new)
    return sorted(products, key=lambda p: not p.is_best_seller)


def browse(
    products: Sequence[Product],
    criteria: Optional[FilterCriteria] = None,
    strategy: SortStrategy = SortStrategy.featured,
) -> List[Product]:
    return sort_products(filter_products(products, criteria or FilterCriteria()), strategy)


def rating_summary(ratings: Iterable[int]) -> Tuple[Decimal, int]:
    # (mean rounded half-up to one decimal, review count)
    ratings = list(ratings)
    if not ratings:
        return Decimal("0"), 0
    mean = Decimal(sum(ratings)) / len(ratings)
    return mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP), len(ratings)
