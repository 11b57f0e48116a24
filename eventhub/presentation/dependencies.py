from datetime import datetime
from typing import Annotated, Callable

from fastapi import Depends, Request

import eventhub.domain.services as domain_services
from eventhub.domain.otp import OtpPolicy, OtpService
from eventhub.domain.ports.code_store import CodeStorePort
from eventhub.domain.ports.email_port import EmailPort
from eventhub.domain.ports.oauth_provider import OAuthProviderPort, OAuthStatePort
from eventhub.domain.ports.token_issuer import TokenIssuerPort
from eventhub.domain.ports.unit_of_work import UnitOfWorkPort
from eventhub.infrastructure.db.pool import get_pool
from eventhub.infrastructure.db.uow import PgUnitOfWork
from eventhub.infrastructure.email.dev_mailbox import DevMailbox
from eventhub.infrastructure.redis_cache.oauth_states import RedisOAuthStates
from eventhub.infrastructure.redis_cache.pool import get_redis
from eventhub.infrastructure.redis_cache.sessions import RedisSessions
from eventhub.infrastructure.security.password import hash_password, verify_password
from eventhub.settings import get_settings


def get_uow() -> UnitOfWorkPort:
    return PgUnitOfWork(get_pool())


def get_code_store(request: Request) -> CodeStorePort:
    # one store per app, set in eventhub.main.create_app
    return request.app.state.code_store


def get_clock() -> Callable[[], datetime]:
    return domain_services.utcnow


def get_dev_mode() -> bool:
    return get_settings().dev_mode


def get_otp_policy() -> OtpPolicy:
    settings = get_settings()
    return OtpPolicy.from_seconds(
        settings.otp_ttl_seconds,
        settings.otp_max_attempts,
        settings.otp_lockout_seconds,
    )


def get_otp_service(
    store: Annotated[CodeStorePort, Depends(get_code_store)],
    policy: Annotated[OtpPolicy, Depends(get_otp_policy)],
    clock: Annotated[Callable[[], datetime], Depends(get_clock)],
    dev_mode: Annotated[bool, Depends(get_dev_mode)],
) -> OtpService:
    return OtpService(store, policy=policy, clock=clock, dev_mode=dev_mode)


def get_hash_password() -> Callable[..., str]:
    return hash_password


def get_verify_password() -> Callable[[str, str], bool]:
    return verify_password


def get_email_port(request: Request) -> EmailPort:
    # This is set in eventhub.main lifespan()
    return request.app.state.email_adapter


def get_dev_mailbox(request: Request) -> DevMailbox:
    return request.app.state.dev_mailbox


def get_sessions() -> TokenIssuerPort:
    return RedisSessions(get_redis(), ttl_seconds=get_settings().session_ttl_seconds)


def get_oauth_states() -> OAuthStatePort:
    return RedisOAuthStates(
        get_redis(), ttl_seconds=get_settings().oauth_state_ttl_seconds
    )


def get_oauth_providers(request: Request) -> dict[str, OAuthProviderPort]:
    return getattr(request.app.state, "oauth_providers", {})


def get_frontend_url() -> str:
    return get_settings().frontend_url.rstrip("/")
