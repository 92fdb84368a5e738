from fastapi import APIRouter

from keyserver.presentation.routers.v1.keys import router as keys_router
from keyserver.presentation.routes.health import router as health_router

api = APIRouter()

# Add all v1 routers here
routers = (keys_router,)
for router in routers:
    api.include_router(router, prefix="/v1")

api.include_router(health_router)
