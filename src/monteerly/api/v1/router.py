from fastapi import APIRouter

from monteerly.api.v1 import auth, briefs, dashboard, live, projects

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(projects.router)
api_router.include_router(briefs.router)
api_router.include_router(dashboard.router)
api_router.include_router(live.router)
