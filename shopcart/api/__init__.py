# shopcart/api/__init__.py
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from shopcart.api.routers import admin, carts, health
from shopcart.domain.errors import (
    CartError,
    ConcurrentModification,
    InsufficientStock,
    InvalidArgument,
    LineNotFound,
    UpstreamTimeout,
    VariantUnavailable,
)

# kazdy rodzaj bledu ma swoj kod HTTP, klient rozroznia po polu "error"
ERROR_STATUS = {
    InvalidArgument: 422,
    VariantUnavailable: 409,
    InsufficientStock: 409,
    LineNotFound: 404,
    ConcurrentModification: 409,
    UpstreamTimeout: 504,
}


async def cart_error_handler(request: Request, exc: CartError):
    status = ERROR_STATUS.get(type(exc), 400)
    return JSONResponse(status_code=status, content=jsonable_encoder(exc.to_dict()))


def create_app(lifespan=None) -> FastAPI:
    app = FastAPI(
        title="Cart Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(admin.router)

    app.add_exception_handler(CartError, cart_error_handler)

    return app
