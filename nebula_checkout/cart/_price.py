"""
Cart pricing — resolve entries against the catalog.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal

from nebula_checkout.catalog import Catalog, Product
from nebula_checkout.cart._types import CartEntry, PricedLineItem, PricedCart


def _option_labels(product: Product, selection: Mapping[str, str]) -> dict[str, str]:
    labels: dict[str, str] = {}
    for variant in product.variants:
        option_id = selection.get(variant.type)
        for option in variant.options:
            if option.id == option_id:
                labels[variant.type] = option.label
    return labels


def price_cart(
    entries: Iterable[CartEntry],
    catalog: Catalog,
    shipping_selections: Mapping[str, str] | None = None,
) -> PricedCart:
    """
    Price cart entries.

    Entries whose product left the catalog are dropped. Shipping resolves
    to the explicit selection while the product still offers it, else to
    the product's first option. No side effects, safe for previews.
    """
    selections = shipping_selections or {}
    items: list[PricedLineItem] = []
    subtotal = Decimal(0)
    shipping_total = Decimal(0)

    for entry in entries:
        product = catalog.get_product(entry.product_id)
        if product is None:
            continue

        option = product.shipping_option(selections.get(entry.product_id))
        adjustment = option.price_adjustment if option is not None else Decimal(0)
        line_total = product.price * entry.quantity

        subtotal += line_total + adjustment
        shipping_total += adjustment

        items.append(PricedLineItem(
            product_id=product.id,
            name=product.name,
            quantity=entry.quantity,
            unit_price=product.price,
            shipping_adjustment=adjustment,
            total=line_total + adjustment,
            shipping_option_id=option.id if option is not None else None,
            shipping_label=option.label if option is not None else None,
            selected_options=_option_labels(product, entry.selected_options),
        ))

    return PricedCart(tuple(items), subtotal, shipping_total)


__all__ = ("price_cart",)
