"""Shared FastAPI dependencies.

Long-lived services are created by `create_app()` and parked on `app.state`;
these helpers hand them to route functions.
"""

from typing import Optional

from fastapi import Header, Request, Response

from pharmacart.core.config import Settings
from pharmacart.core.logging import session_id_ctx
from pharmacart.services.catalog import Catalog
from pharmacart.services.rates.cache_service import RateCache
from pharmacart.services.session import CartSession, SessionStore

SESSION_HEADER = "X-Session-Id"


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


def get_rate_cache(request: Request) -> RateCache:
    return request.app.state.rate_cache


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


# async so the context var is set on the request task, not a threadpool copy
async def get_session(
    request: Request,
    response: Response,
    x_session_id: Optional[str] = Header(None, alias=SESSION_HEADER),
) -> CartSession:
    """Session for cart writes; created when the header is absent or unknown."""
    store = get_session_store(request)
    session = store.get_or_create(x_session_id)
    session_id_ctx.set(session.id)
    response.headers[SESSION_HEADER] = session.id
    return session


async def find_session(
    request: Request,
    x_session_id: Optional[str] = Header(None, alias=SESSION_HEADER),
) -> Optional[CartSession]:
    """Existing session for read-only routes; never creates one."""
    session = get_session_store(request).get(x_session_id)
    if session is not None:
        session_id_ctx.set(session.id)
    return session


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
