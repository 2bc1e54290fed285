"""
Applicant API endpoints.

Every route needs an identity-provider bearer token. ``/sync`` and
``/update-email`` only need the token's subject; the rest also need the
applicant profile that ``/sync`` creates.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from jobportal.api.views import applicant_application_view, applicant_view
from jobportal.core.auth import (
    Principal,
    get_storage,
    require_applicant,
    require_applicant_identity,
)
from jobportal.core.errors import ValidationError
from jobportal.db.base import utcnow
from jobportal.services.applicants import sync_applicant, update_applicant_email
from jobportal.services.applications import apply_as_applicant
from jobportal.services.file_intake import RESUME_UPLOAD, FileIntake, get_file_intake
from jobportal.storage import Storage

logger = logging.getLogger("jobportal.users")

router = APIRouter()


# ============== Pydantic Schemas ==============


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SyncRequest(CamelModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class EmailUpdateRequest(CamelModel):
    new_email: Optional[str] = None


# ============== Profile ==============


@router.post("/sync")
def sync_user(
    payload: SyncRequest,
    principal: Principal = Depends(require_applicant_identity),
    storage: Storage = Depends(get_storage),
):
    """
    Create or refresh the caller's profile from identity-provider data.

    Answers 409 with ``existingUserId`` when the email belongs to another
    account.
    """
    result = sync_applicant(
        storage,
        principal.subject_id,
        payload.email,
        payload.first_name,
        payload.last_name,
    )
    return {
        "success": True,
        "message": "User created" if result.action == "created" else "User updated",
        "user": applicant_view(result.applicant),
        "action": result.action,
    }


@router.post("/update-email")
def update_email(
    payload: EmailUpdateRequest,
    principal: Principal = Depends(require_applicant_identity),
    storage: Storage = Depends(get_storage),
):
    """Change the profile email to resolve a sync conflict."""
    applicant = update_applicant_email(storage, principal.subject_id, payload.new_email)
    logger.info("Applicant %s changed email", applicant.id)
    return {
        "success": True,
        "message": "Email updated successfully",
        "user": applicant_view(applicant),
    }


@router.get("/data")
def get_user_data(principal: Principal = Depends(require_applicant)):
    return {"success": True, "user": applicant_view(principal.applicant)}


@router.post("/update-resume")
async def update_user_resume(
    resume: Optional[UploadFile] = File(None),
    principal: Principal = Depends(require_applicant),
    storage: Storage = Depends(get_storage),
    intake: FileIntake = Depends(get_file_intake),
):
    """Replace the profile resume with an uploaded PDF."""
    if resume is None or not resume.filename:
        raise ValidationError("Resume file is required")

    stored = await intake.accept(resume, RESUME_UPLOAD, "resume")
    applicant = storage.update_applicant(principal.id, resume=stored.reference, last_updated=utcnow())

    return {
        "success": True,
        "message": "Resume updated successfully",
        "user": applicant_view(applicant),
        "storage": storage.label,
    }


# ============== Applications ==============


@router.post("/apply-job")
async def apply_for_job(
    jobId: Optional[int] = Form(None),
    coverLetter: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
    principal: Principal = Depends(require_applicant),
    storage: Storage = Depends(get_storage),
    intake: FileIntake = Depends(get_file_intake),
):
    """
    Apply to a job as the authenticated applicant.

    An uploaded resume also becomes the profile resume; without one the
    profile resume is reused.
    """
    applicant = principal.applicant
    resume_reference = None

    if resume is not None and resume.filename:
        stored = await intake.accept(resume, RESUME_UPLOAD, "resume")
        resume_reference = stored.reference
        applicant = storage.update_applicant(applicant.id, resume=resume_reference, last_updated=utcnow())

    application = apply_as_applicant(storage, applicant, jobId, resume_reference, coverLetter)

    return {
        "success": True,
        "message": "Application submitted successfully",
        "application": application.to_public(),
        "storage": storage.label,
    }


@router.get("/applications")
def get_user_job_applications(
    principal: Principal = Depends(require_applicant),
    storage: Storage = Depends(get_storage),
):
    """Applications made under the caller's profile or email, newest first."""
    applicant = principal.applicant
    applications = []
    for application in storage.list_applicant_applications(applicant.id, applicant.email):
        job = storage.get_job(application.job_id)
        company = storage.get_company(application.company_id)
        applications.append(applicant_application_view(application, job, company))

    return {
        "success": True,
        "applications": applications,
        "storage": storage.label,
    }
