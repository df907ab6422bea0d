from fastapi import APIRouter

from agencydir_api.routers.v1 import agencies, monitoring

v1_router = APIRouter(prefix="/v1")

v1_router.include_router(agencies.router)
v1_router.include_router(monitoring.router)
