import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from eventhub.domain.ports.code_store import CodeStorePort
from eventhub.domain.ports.email_port import EmailPort
from eventhub.infrastructure.db.pool import close_pool, open_pool
from eventhub.infrastructure.email.dev_mailbox import DevMailbox, DevMailboxEmailAdapter
from eventhub.infrastructure.email.http_smtp_adapter import HttpSmtpEmailAdapter
from eventhub.infrastructure.memory.code_store import InMemoryCodeStore
from eventhub.infrastructure.redis_cache.code_store import RedisCodeStore
from eventhub.infrastructure.redis_cache.pool import close_redis, get_redis
from eventhub.logging import setup_logging
from eventhub.presentation.api import api
from eventhub.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def build_code_store(settings: Settings) -> CodeStorePort:
    if settings.code_store_backend == "redis":
        return RedisCodeStore(get_redis())
    return InMemoryCodeStore()


def build_email_adapter(settings: Settings, mailbox: DevMailbox) -> EmailPort:
    # development mail never leaves the process
    if settings.dev_mode:
        return DevMailboxEmailAdapter(mailbox)
    return HttpSmtpEmailAdapter(
        base_url=settings.smtp_base_url,
        sender=settings.smtp_sender,
        timeout=settings.smtp_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    # startup
    await open_pool()
    get_redis()
    email_adapter = build_email_adapter(settings, app.state.dev_mailbox)
    app.state.email_adapter = email_adapter
    logger.info(
        "startup complete",
        extra={
            "app_env": settings.app_env,
            "dev_mode": settings.dev_mode,
            "code_store": settings.code_store_backend,
        },
    )

    try:
        yield
    finally:
        # shutdown
        await email_adapter.aclose()
        await close_redis()
        await close_pool()


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(title="EventHub Auth API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.code_store = build_code_store(settings)
    app.state.dev_mailbox = DevMailbox()
    # provider adapters register here, keyed by the {provider} path segment
    app.state.oauth_providers = {}
    app.include_router(api)
    return app


app = create_app()
