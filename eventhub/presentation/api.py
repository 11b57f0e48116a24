from fastapi import APIRouter

from eventhub.presentation.routers.auth import router as auth_router
from eventhub.presentation.routers.dev import router as dev_router
from eventhub.presentation.routers.oauth import router as oauth_router
from eventhub.presentation.routes.health import router as health_router

api = APIRouter()

# fixed /auth paths first; oauth's /auth/{provider} would shadow them otherwise
routers = (health_router, auth_router, dev_router, oauth_router)
for router in routers:
    api.include_router(router)
