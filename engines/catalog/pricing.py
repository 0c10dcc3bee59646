"""Yardbook Catalog Engine - customer pricing."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from core.money import round2
from core.primitives.item import Product
from core.primitives.party import ALL_CATEGORIES, MarkupRule


def select_markup_rule(category: Optional[str], rules: Iterable[MarkupRule]) -> Optional[MarkupRule]:
    """A rule for the product's own category wins over the wildcard rule."""
    rules = tuple(rules)
    for rule in rules:
        if category and rule.category == category:
            return rule
    for rule in rules:
        if rule.category == ALL_CATEGORIES:
            return rule
    return None


def price_for_customer(product: Product, rules: Iterable[MarkupRule] = ()) -> Decimal:
    """
    Unit price of a catalog product for one customer.

    With a matching rule the price is cost marked up by the rule's
    percent; otherwise it is the product's list price.
    """
    rule = select_markup_rule(product.category, rules)
    if rule is None:
        return round2(product.price)
    return round2(product.cost * (1 + rule.markup_percent / Decimal(100)))
