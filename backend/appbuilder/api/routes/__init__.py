from fastapi import APIRouter

from appbuilder.api.routes import generation, health, jobs

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(generation.router, tags=["generation"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
