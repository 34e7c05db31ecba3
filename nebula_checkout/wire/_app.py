"""
FastAPI surface of the session manager.

    GET  /payment-methods              → [PaymentMethodOut]
    POST /payment-sessions             → PaymentSessionOut (same key → same session)
    GET  /payment-sessions/{sessionId} → PaymentSessionOut | 404
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import fastapi
from kungfu import Ok, Error

from nebula_checkout.sessions import SessionManager
from nebula_checkout.wire._models import (
    ErrorOut,
    PaymentMethodOut,
    PaymentSessionIn,
    PaymentSessionOut,
)

logger = logging.getLogger(__name__)


def _routes(manager: SessionManager) -> list[tuple[str, str, Any, dict[str, Any]]]:
    """(method, path, handler, route options)."""

    async def list_payment_methods() -> list[PaymentMethodOut]:
        return [PaymentMethodOut.from_domain(config) for config in manager.payment_methods()]

    async def create_payment_session(req: PaymentSessionIn) -> PaymentSessionOut:
        match await manager.create_session(req.to_domain()):
            case Ok(session):
                return PaymentSessionOut.from_domain(session)
            case Error(err):
                logger.warning("session for %s not created: %s", req.idempotency_key, err)
                raise fastapi.HTTPException(status_code=503, detail=str(err))

    async def get_payment_session(session_id: str) -> PaymentSessionOut:
        session = await manager.get_session(session_id)
        if session is None:
            raise fastapi.HTTPException(
                status_code=404,
                detail=f"Unknown payment session {session_id}",
            )
        return PaymentSessionOut.from_domain(session)

    return [
        ("GET", "/payment-methods", list_payment_methods, {}),
        (
            "POST",
            "/payment-sessions",
            create_payment_session,
            {"responses": {503: {"model": ErrorOut}}},
        ),
        (
            "GET",
            "/payment-sessions/{session_id}",
            get_payment_session,
            {"responses": {404: {"model": ErrorOut}}},
        ),
    ]


def create_app(manager: SessionManager | None = None) -> fastapi.FastAPI:
    """Build the app. The manager's finalize tasks are cancelled on shutdown."""
    manager = manager or SessionManager()

    @asynccontextmanager
    async def lifespan(_: fastapi.FastAPI) -> AsyncIterator[None]:
        yield
        await manager.aclose()

    app = fastapi.FastAPI(title="nebula-checkout", lifespan=lifespan)
    app.state.manager = manager

    for method, path, handler, options in _routes(manager):
        route_method = getattr(app, method.lower(), None)
        if route_method is None:
            raise ValueError(f"Unsupported HTTP method: {method}")
        route_method(path, **options)(handler)

    return app


__all__ = ("create_app",)
