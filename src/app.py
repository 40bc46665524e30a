"""Storefront FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
runs inside the storefront domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.domain import storefront
from storefront.utils.logging import bind_request_context, clear_request_context, get_logger

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay in domain.toml.
storefront.init()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="E-commerce storefront: carts, coupons, checkout and orders",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Protean domain context and bind request details for logging."""
    clear_request_context()
    bind_request_context(
        request_id=request.headers.get("x-request-id") or str(uuid.uuid4()),
        method=request.method,
        path=request.url.path,
    )
    with storefront.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from storefront.api import (  # noqa: E402
    address_router,
    admin_router,
    cart_router,
    coupon_router,
    order_router,
    product_router,
    shipment_router,
)
from storefront.api.errors import register_exception_handlers  # noqa: E402

app.include_router(cart_router)
app.include_router(order_router)
app.include_router(admin_router)
app.include_router(coupon_router)
app.include_router(address_router)
app.include_router(product_router)
app.include_router(shipment_router)

register_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": storefront.name})
