"""
API Router Aggregator.

Combines the job, company and user routers into a single router for the
main app.
"""

from fastapi import APIRouter

from jobportal.api.v1 import company, jobs, users

api_router = APIRouter()

# Include all routers with their prefixes and tags
api_router.include_router(
    jobs.router,
    prefix="/jobs",
    tags=["Jobs"],
)

api_router.include_router(
    company.router,
    prefix="/company",
    tags=["Company"],
)

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"],
)
