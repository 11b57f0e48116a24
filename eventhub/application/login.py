from __future__ import annotations

import logging
from typing import Callable

import eventhub.domain.services as domain_services
from eventhub.domain.entities import SocialProfile, User
from eventhub.domain.errors import EmailNotVerified, InvalidCredentials
from eventhub.domain.ports.token_issuer import TokenIssuerPort
from eventhub.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


async def login_user(
    uow: UnitOfWorkPort,
    tokens: TokenIssuerPort,
    *,
    email: str,
    password: str,
    verify_password: Callable[[str, str], bool],
) -> tuple[User, str]:
    normalized_email = domain_services.normalize_email(email)

    async with uow as transaction:
        record = await transaction.db_users.get_by_email_with_hash(normalized_email)
    if not record:
        raise InvalidCredentials()
    user, password_hash = record
    if not verify_password(password, password_hash):
        raise InvalidCredentials()
    # provider-backed accounts were verified by the provider
    if not user.is_verified and not user.is_social:
        raise EmailNotVerified()

    token = await tokens.create(user.id)
    return user, token


async def login_social_user(
    uow: UnitOfWorkPort,
    tokens: TokenIssuerPort,
    *,
    profile: SocialProfile,
    hash_password: Callable[..., str],
) -> tuple[User, str]:
    """
    Sign in with a provider identity: link it to the account with the same
    email, or create a verified account that has no usable password.
    """
    async with uow as transaction:
        existing = await transaction.db_users.get_by_email(profile.email)
        if existing is not None:
            user = await transaction.db_users.link_social(
                existing.id,
                provider=profile.provider,
                provider_id=profile.provider_id,
                avatar=profile.avatar,
            )
        else:
            user = await transaction.db_users.create(
                name=profile.name,
                email=profile.email,
                password_hash=hash_password(
                    domain_services.generate_unusable_password()
                ),
                is_verified=True,
                avatar=profile.avatar,
                **{f"{profile.provider}_id": profile.provider_id},
            )
        await transaction.commit()

    logger.info(
        "social login",
        extra={"provider": profile.provider, "user_id": user.id, "linked": bool(existing)},
    )
    token = await tokens.create(user.id)
    return user, token
