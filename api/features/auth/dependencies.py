"""FastAPI dependencies for the Auth feature."""
from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.di.container import ApplicationContainer
from api.features.auth.dtos import AuthContext
from api.features.auth.service import SessionResolver
from api.shared.db import get_db_session
from api.shared.exceptions import AuthError


@inject
async def require_auth(
    request: Request,
    resolver: SessionResolver = Depends(
        Provide[ApplicationContainer.services.session_resolver]
    ),
    db_session: AsyncSession = Depends(get_db_session),
) -> AuthContext:
    """Resolve the caller once per request; both user and session must exist."""
    context = await resolver.resolve(request.headers, db_session=db_session)
    if context is None:
        raise AuthError()
    return context
