from fastapi import APIRouter

from app.api.routers import billing, budget, narrative, projects, scenarios, snapshots

api_router = APIRouter()

api_router.include_router(projects.router)
api_router.include_router(billing.router)
api_router.include_router(budget.router)
api_router.include_router(scenarios.router)
api_router.include_router(snapshots.router)
api_router.include_router(narrative.router)
