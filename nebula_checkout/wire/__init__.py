"""
Wire — HTTP exposure of payment sessions.

    from nebula_checkout.wire import create_app

    app = create_app(SessionManager())
    # uvicorn.run(app)
"""

from nebula_checkout.wire._models import (
    Money,
    SessionLineItemIn,
    PaymentSessionIn,
    PaymentSessionOut,
    PaymentMethodOut,
    ErrorOut,
)
from nebula_checkout.wire._app import create_app

__all__ = (
    # Models
    "Money",
    "SessionLineItemIn",
    "PaymentSessionIn",
    "PaymentSessionOut",
    "PaymentMethodOut",
    "ErrorOut",
    # App
    "create_app",
)
