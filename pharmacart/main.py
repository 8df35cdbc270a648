import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import cart, catalog, rates
from .services.catalog import Catalog
from .services.rates.cache_service import RateCache
from .services.rates.resolver import RateResolver
from .services.session import SessionStore


def create_app(
    settings_override: Settings | None = None,
    resolver: RateResolver | None = None,
    catalog_override: Catalog | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    resolver / catalog_override: inject a stub rate resolver or an in-memory
    catalog instead of the network sources and the JSON file.
    """
    settings = settings_override or get_settings()
    if settings.catalog_path is None:
        settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)
    log = logging.getLogger("pharmacart")

    try:
        product_catalog = catalog_override or Catalog.load(settings.catalog_path)  # type: ignore[arg-type]
    except errors.CatalogLoadError:
        # Without a catalog the service is useless; fail startup loudly
        log.exception("failed to load catalog on startup")
        raise

    rate_cache = RateCache(
        resolver or RateResolver.from_settings(settings),
        interval_seconds=settings.rates_refresh_interval_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.rates_refresh_enabled:
            rate_cache.start()
        try:
            yield
        finally:
            await rate_cache.stop()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.catalog = product_catalog
    app.state.rate_cache = rate_cache
    app.state.sessions = SessionStore(
        idle_ttl_seconds=settings.session_idle_ttl_seconds,
        max_sessions=settings.max_sessions,
    )

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(errors.PharmaCartError, errors.domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, errors.not_found_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(catalog.router)
    app.include_router(cart.router)
    app.include_router(rates.router)

    @app.get("/")
    async def root():
        return {"message": "PharmaCart Pricing API", "version": settings.version}

    @app.get("/health")
    async def health():
        table = rate_cache.current()
        return {
            "status": "ok",
            "products": len(product_catalog),
            "rates_fallback": table.is_fallback,
            "rates_resolved_at": table.resolved_at.isoformat(),
            "rates_refreshing": rate_cache.running,
        }

    return app


app = create_app()
