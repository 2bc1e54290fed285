"""
Recruiter (company) API endpoints.

Registration, login and password reset are public; everything else requires
the recruiter token in the ``token`` header. Anonymous job applications are
also accepted here, without any authentication.
"""

import logging
import smtplib
from datetime import timedelta
from typing import Any, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel

from jobportal.api.views import (
    company_view,
    job_summary,
    job_view,
    jobs_with_companies,
    recruiter_application_view,
)
from jobportal.core.auth import Principal, ensure_company_allowed, get_storage, require_recruiter
from jobportal.core.config import settings
from jobportal.core.errors import NotFound, ValidationError
from jobportal.core.security import (
    create_recruiter_token,
    generate_reset_token,
    get_password_hash,
    reset_token_matches,
    verify_password,
)
from jobportal.db.base import utcnow
from jobportal.services.applicants import normalize_email
from jobportal.services.applications import (
    apply_anonymously,
    change_application_status,
    check_anonymous_application,
)
from jobportal.services.file_intake import LOGO_UPLOAD, RESUME_UPLOAD, FileIntake, get_file_intake
from jobportal.services.jobs import post_job, toggle_visibility
from jobportal.services.mailer import send_password_reset
from jobportal.storage import DuplicateRecord, Storage

logger = logging.getLogger("jobportal.company")

router = APIRouter()


# ============== Pydantic Schemas ==============


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    token: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class JobPostRequest(BaseModel):
    """Fields are checked by the job service so errors name the field."""

    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[Any] = None
    level: Optional[str] = None
    category: Optional[str] = None


class StatusChangeRequest(BaseModel):
    id: Optional[int] = None
    status: Optional[str] = None


class VisibilityChangeRequest(BaseModel):
    id: Optional[int] = None


# ============== Public Endpoints ==============


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_company(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    storage: Storage = Depends(get_storage),
    intake: FileIntake = Depends(get_file_intake),
):
    """
    Register a new recruiter account.

    Accepts multipart form data with an optional logo image. Returns the
    company and a signed recruiter token.
    """
    name = (name or "").strip()
    email = normalize_email(email)
    if not name or not email or not password:
        raise ValidationError("Name, email, and password are required")

    ensure_company_allowed(
        email,
        "Recruiter registration is restricted. Contact the site owner to get access.",
    )

    if storage.get_company_by_email(email) is not None:
        raise ValidationError("Company with this email already exists")

    image_reference = None
    if image is not None and image.filename:
        stored = await intake.accept(image, LOGO_UPLOAD, "image")
        image_reference = stored.reference

    try:
        company = storage.create_company(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            image=image_reference,
        )
    except DuplicateRecord:
        raise ValidationError("Company with this email already exists")

    logger.info("Company %s registered", company.id)
    return {
        "success": True,
        "message": "Company registered successfully",
        "company": company_view(company),
        "token": create_recruiter_token(company.id),
    }


@router.post("/login")
def login_company(payload: LoginRequest, storage: Storage = Depends(get_storage)):
    """Login with email and password and get a recruiter token."""
    if not payload.email or not payload.password:
        raise ValidationError("Email and password are required")

    email = normalize_email(payload.email)
    company = storage.get_company_by_email(email)
    if company is None:
        raise ValidationError("Invalid email or password")

    ensure_company_allowed(
        company.email, "Your company is not authorized to access recruiter features."
    )

    if not verify_password(payload.password, company.hashed_password):
        raise ValidationError("Invalid email or password")

    return {
        "success": True,
        "company": company_view(company),
        "token": create_recruiter_token(company.id),
    }


@router.post("/forgot-password")
def forgot_password(payload: ForgotPasswordRequest, storage: Storage = Depends(get_storage)):
    """
    Start a password reset.

    Always answers with the same message; a reset token (valid one hour) is
    only generated and mailed when the account exists.
    """
    if not payload.email:
        raise ValidationError("Email is required")

    email = normalize_email(payload.email)
    company = storage.get_company_by_email(email)
    if company is not None:
        token = generate_reset_token()
        storage.update_company(
            company.id,
            reset_password_token=token,
            reset_password_expires=utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
            updated_at=utcnow(),
        )

        reset_url = (
            f"{settings.FRONTEND_URL.rstrip('/')}/reset-company-password"
            f"?token={token}&email={quote(email)}"
        )
        try:
            send_password_reset(settings, email, reset_url)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error sending reset email: %s", e)

    return {
        "success": True,
        "message": "If an account exists, a reset link has been sent.",
    }


@router.post("/reset-password")
def reset_password(payload: ResetPasswordRequest, storage: Storage = Depends(get_storage)):
    """Set a new password using the emailed token."""
    if not payload.token or not payload.email or not payload.password:
        raise ValidationError("Token, email and new password are required")

    company = storage.get_company_by_email(normalize_email(payload.email))
    if (
        company is None
        or not reset_token_matches(company.reset_password_token, payload.token)
        or company.reset_password_expires is None
        or company.reset_password_expires <= utcnow()
    ):
        raise ValidationError("Invalid or expired token")

    storage.update_company(
        company.id,
        hashed_password=get_password_hash(payload.password),
        reset_password_token=None,
        reset_password_expires=None,
        updated_at=utcnow(),
    )
    return {"success": True, "message": "Password reset successfully"}


@router.post("/apply-job")
async def apply_for_job_anonymously(
    jobId: Optional[int] = Form(None),
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
    storage: Storage = Depends(get_storage),
    intake: FileIntake = Depends(get_file_intake),
):
    """Apply to a visible job with a name and email, no account needed."""
    # Validate before the resume is stored.
    check_anonymous_application(storage, jobId, name, email)

    resume_reference = None
    if resume is not None and resume.filename:
        stored = await intake.accept(resume, RESUME_UPLOAD, "resume")
        resume_reference = stored.reference

    application = apply_anonymously(storage, jobId, name, email, phone, resume_reference)
    job = storage.get_job(application.job_id)
    company = storage.get_company(application.company_id)

    return {
        "success": True,
        "message": "Application submitted successfully!",
        "application": {
            "id": application.id,
            "jobTitle": job.title if job else None,
            "companyName": company.name if company else "Unknown Company",
            "status": application.status,
            "submittedAt": application.applied_at,
        },
        "storage": storage.label,
    }


@router.get("/application-status")
def get_application_status(
    email: Optional[str] = None,
    jobId: Optional[int] = None,
    storage: Storage = Depends(get_storage),
):
    """Look up an anonymous application by email and job."""
    if not email or not jobId:
        raise ValidationError("Email and job ID are required")

    application = storage.find_application(jobId, normalize_email(email))
    if application is None:
        raise NotFound("Application not found")

    job = storage.get_job(application.job_id)
    company = storage.get_company(application.company_id)
    return {
        "success": True,
        "application": {
            "id": application.id,
            "jobTitle": job.title if job else None,
            "companyName": company.name if company else None,
            "status": application.status,
            "submittedAt": application.applied_at,
            "updatedAt": application.updated_at,
        },
    }


# ============== Recruiter Endpoints ==============


@router.get("/whoami")
def whoami(principal: Principal = Depends(require_recruiter)):
    company = principal.company
    return {
        "success": True,
        "company": {"id": company.id, "email": company.email, "name": company.name},
    }


@router.get("/profile")
def get_company_data(principal: Principal = Depends(require_recruiter)):
    """Get the authenticated recruiter's company profile."""
    return {"success": True, "company": company_view(principal.company)}


@router.post("/post-job")
def post_new_job(
    payload: JobPostRequest,
    principal: Principal = Depends(require_recruiter),
    storage: Storage = Depends(get_storage),
):
    """Create a visible job owned by the authenticated recruiter."""
    job = post_job(storage, principal.company, payload.model_dump())
    logger.info("Company %s posted job %s", principal.id, job.id)
    return {
        "success": True,
        "message": "Job posted successfully",
        "job": job_view(job, principal.company),
    }


@router.get("/list-jobs")
def get_company_jobs(
    principal: Principal = Depends(require_recruiter),
    storage: Storage = Depends(get_storage),
):
    """Jobs owned by the recruiter, newest first, with application counts."""
    jobs = jobs_with_companies(storage, storage.list_company_jobs(principal.id))
    for job in jobs:
        job["applicationCount"] = storage.count_job_applications(job["id"])

    return {"success": True, "count": len(jobs), "jobs": jobs}


@router.get("/applicants")
def get_company_job_applicants(
    principal: Principal = Depends(require_recruiter),
    storage: Storage = Depends(get_storage),
):
    """Applications to the recruiter's jobs, newest first."""
    applicants = []
    for application in storage.list_company_applications(principal.id):
        job = storage.get_job(application.job_id)
        applicant = (
            storage.get_applicant(application.applicant_id)
            if application.applicant_id is not None
            else None
        )
        applicants.append(recruiter_application_view(application, job, applicant))

    return {"success": True, "applicants": applicants}


@router.post("/change-status")
def change_status(
    payload: StatusChangeRequest,
    principal: Principal = Depends(require_recruiter),
    storage: Storage = Depends(get_storage),
):
    """Update the status of an application to one of the recruiter's jobs."""
    application = change_application_status(storage, principal.company, payload.id, payload.status)
    job = storage.get_job(application.job_id)
    return {
        "success": True,
        "message": "Application status updated successfully",
        "application": {**application.to_public(), "jobId": job_summary(job) or application.job_id},
    }


@router.post("/change-visibility")
def change_visibility(
    payload: VisibilityChangeRequest,
    principal: Principal = Depends(require_recruiter),
    storage: Storage = Depends(get_storage),
):
    """Publish or hide one of the recruiter's jobs."""
    job = toggle_visibility(storage, principal.company, payload.id)
    return {
        "success": True,
        "message": f"Job {'published' if job.visible else 'hidden'} successfully",
        "job": job_view(job, principal.company),
    }
