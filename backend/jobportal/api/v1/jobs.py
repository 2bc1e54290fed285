"""
Public job endpoints.

Listing only returns visible jobs; a single job is returned by id whether
visible or not.
"""

from fastapi import APIRouter, Depends

from jobportal.api.views import job_view, jobs_with_companies
from jobportal.core.auth import get_storage
from jobportal.core.errors import NotFound
from jobportal.storage import Storage

router = APIRouter()


@router.get("")
def get_jobs(storage: Storage = Depends(get_storage)):
    """List visible jobs with their company info."""
    jobs = jobs_with_companies(storage, storage.list_visible_jobs())
    return {
        "success": True,
        "count": len(jobs),
        "jobs": jobs,
        "storage": storage.label,
    }


@router.get("/{job_id}")
def get_job_by_id(job_id: int, storage: Storage = Depends(get_storage)):
    """Get a single job by id."""
    job = storage.get_job(job_id)
    if job is None:
        raise NotFound("Job not found")

    return {
        "success": True,
        "job": job_view(job, storage.get_company(job.company_id)),
        "storage": storage.label,
    }
