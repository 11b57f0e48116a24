import logging
from typing import Annotated, Callable
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse

from eventhub.application.login import login_social_user
from eventhub.domain.ports.oauth_provider import OAuthProviderPort, OAuthStatePort
from eventhub.domain.ports.token_issuer import TokenIssuerPort
from eventhub.domain.ports.unit_of_work import UnitOfWorkPort
from eventhub.presentation.dependencies import (
    get_frontend_url,
    get_hash_password,
    get_oauth_providers,
    get_oauth_states,
    get_sessions,
    get_uow,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["OAuth"])


def _provider_or_404(
    providers: dict[str, OAuthProviderPort], provider: str
) -> OAuthProviderPort:
    found = providers.get(provider)
    if found is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Unknown provider"
        )
    return found


def _frontend_callback(frontend_url: str, **params: str) -> RedirectResponse:
    return RedirectResponse(
        f"{frontend_url}/auth/callback?{urlencode(params)}",
        status_code=status.HTTP_302_FOUND,
    )


@router.get("/{provider}")
async def get_oauth_start(
    provider: str,
    providers: Annotated[dict[str, OAuthProviderPort], Depends(get_oauth_providers)],
    states: Annotated[OAuthStatePort, Depends(get_oauth_states)],
    remember: bool = Query(False),
):
    oauth = _provider_or_404(providers, provider)
    state = await states.create(remember)
    return RedirectResponse(
        oauth.authorization_url(state), status_code=status.HTTP_302_FOUND
    )


@router.get("/{provider}/callback")
async def get_oauth_callback(
    provider: str,
    providers: Annotated[dict[str, OAuthProviderPort], Depends(get_oauth_providers)],
    states: Annotated[OAuthStatePort, Depends(get_oauth_states)],
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    sessions: Annotated[TokenIssuerPort, Depends(get_sessions)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
    frontend_url: Annotated[str, Depends(get_frontend_url)],
    code: str | None = Query(None),
    state: str | None = Query(None),
):
    oauth = _provider_or_404(providers, provider)

    remember = await states.consume(state) if state else None
    if remember is None or not code:
        logger.warning("oauth callback rejected", extra={"provider": provider})
        return _frontend_callback(
            frontend_url,
            error="auth_failed",
            error_description="Invalid or expired login attempt",
            provider=provider,
        )

    try:
        profile = await oauth.fetch_profile(code)
        _, token = await login_social_user(
            uow, sessions, profile=profile, hash_password=hash_password
        )
    except Exception as e:  # noqa: BLE001
        logger.exception("oauth login failed", extra={"provider": provider})
        return _frontend_callback(
            frontend_url,
            error="auth_failed",
            error_description="Authentication failed",
            provider=provider,
        )

    return _frontend_callback(
        frontend_url,
        token=token,
        provider=provider,
        remember="true" if remember else "false",
    )
