"""
Catalog — read-only products, rewards and payment methods.

    from nebula_checkout import catalog

    shop_catalog = catalog.MemoryCatalog(products=[...], rewards=[...])
    product = shop_catalog.get_product("hoodie")
"""

from nebula_checkout.catalog._types import (
    ShippingOption,
    VariantOption,
    Variant,
    Product,
    RewardTier,
    PaymentMethod,
    Anonymity,
    PaymentMethodConfig,
)
from nebula_checkout.catalog._snapshot import (
    Catalog,
    MemoryCatalog,
    PAYMENT_METHODS,
    payment_method_config,
)

__all__ = (
    # Types
    "ShippingOption",
    "VariantOption",
    "Variant",
    "Product",
    "RewardTier",
    "PaymentMethod",
    "Anonymity",
    "PaymentMethodConfig",
    # Snapshot
    "Catalog",
    "MemoryCatalog",
    "PAYMENT_METHODS",
    "payment_method_config",
)
