"""FastAPI application factory."""
from __future__ import annotations
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from ..config import Settings
from ..services import OrderIntakeService, build_interpreter, build_sequence_generator, build_transcriber
from ..storage.database import close_db, get_session_factory, init_db
from ..utils.logging import setup_logging
from .middleware import RequestLoggingMiddleware
from .routes import health, orders, sequences


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        init_db(settings.database_url.get_secret_value())
        session_factory = get_session_factory()
        app.state.order_intake = OrderIntakeService(
            build_interpreter(settings),
            session_factory,
            transcriber=build_transcriber(settings),
        )
        app.state.sequence_generator = build_sequence_generator(session_factory)
        yield
        await close_db()

    app = FastAPI(
        title="FruttaGest Core API",
        description="Order-text parsing and document numbering",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.state.settings = settings

    app.include_router(health.router, tags=["health"])
    app.include_router(orders.router, prefix="/orders", tags=["orders"])
    app.include_router(sequences.router, prefix="/sequences", tags=["sequences"])

    return app
