"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from app.api.files import router as files_router
from app.api.compare import router as compare_router
from app.api.inspections import router as inspections_router
from app.api.websocket import router as websocket_router

api_router = APIRouter()
api_router.include_router(files_router)
api_router.include_router(compare_router)
api_router.include_router(inspections_router)
api_router.include_router(websocket_router)
