"""API V1 Router"""

from fastapi import APIRouter

# Import endpoint routers
from app.api.v1.endpoints import auth, assignments, completions, groups, cohorts, users

# Create API v1 router
api_router = APIRouter()

# Include endpoint routers with prefixes and tags
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])
api_router.include_router(completions.router, prefix="/completions", tags=["Completions"])
api_router.include_router(groups.router, prefix="/groups", tags=["Groups"])
api_router.include_router(cohorts.router, prefix="/cohorts", tags=["Cohorts"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
