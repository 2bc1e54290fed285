"""
Job application workflow.

Duplicate prevention lives in the storage layer (unique constraints on
(job, applicant) and (job, email)). Lookups done before an insert only give an
early answer; DuplicateApplication from the store is what keeps concurrent
applies from both succeeding.
"""

import logging
from typing import Optional

from jobportal.core.errors import Forbidden, NotFound, ValidationError
from jobportal.db.base import utcnow
from jobportal.services.applicants import is_valid_email, normalize_email
from jobportal.storage import DuplicateApplication, Storage
from jobportal.storage.records import (
    APPLICATION_STATUSES,
    ApplicantRecord,
    ApplicationRecord,
    CompanyRecord,
    JobRecord,
)

logger = logging.getLogger("jobportal.applications")

ALREADY_APPLIED = "You have already applied for this job"


def apply_as_applicant(
    storage: Storage,
    applicant: ApplicantRecord,
    job_id: Optional[int],
    resume: Optional[str],
    cover_letter: Optional[str] = None,
) -> ApplicationRecord:
    """
    Submit an authenticated application.

    ``resume`` is the reference of a file uploaded with this request (it has
    already been stored on the profile by the caller); without one, the
    profile's resume is used.
    """
    if not job_id:
        raise ValidationError("Job ID is required")

    resume = resume or applicant.resume
    if not resume:
        raise ValidationError("You must upload a resume to apply for jobs")

    job = storage.get_job(job_id)
    if job is None:
        raise NotFound("Job not found")

    try:
        application = storage.create_application(
            applicant_id=applicant.id,
            job_id=job.id,
            company_id=job.company_id,
            resume=resume,
            cover_letter=cover_letter or "",
            status="pending",
        )
    except DuplicateApplication:
        raise ValidationError(ALREADY_APPLIED)

    logger.info("Applicant %s applied to job %s", applicant.id, job.id)
    return application


def check_anonymous_application(
    storage: Storage,
    job_id: Optional[int],
    name: Optional[str],
    email: Optional[str],
) -> JobRecord:
    """
    Validate an anonymous application before anything is stored.

    Returns the job being applied to. The duplicate check here is only an
    early answer; the store still enforces uniqueness on insert.
    """
    name = (name or "").strip()
    email = normalize_email(email)
    if not job_id or not name or not email:
        raise ValidationError("Job ID, name, and email are required")

    if not is_valid_email(email):
        raise ValidationError("Please enter a valid email address")

    job = storage.get_job(job_id)
    if job is None:
        raise NotFound("Job not found")
    if not job.visible:
        raise ValidationError("This job is not currently accepting applications")

    if storage.find_application(job.id, email) is not None:
        raise ValidationError(ALREADY_APPLIED)

    return job


def apply_anonymously(
    storage: Storage,
    job_id: Optional[int],
    name: Optional[str],
    email: Optional[str],
    phone: Optional[str] = None,
    resume: Optional[str] = None,
) -> ApplicationRecord:
    """Submit an application keyed by name and email, without an account."""
    job = check_anonymous_application(storage, job_id, name, email)

    try:
        application = storage.create_application(
            job_id=job.id,
            company_id=job.company_id,
            name=name.strip(),
            email=normalize_email(email),
            phone=(phone or "").strip() or None,
            resume=resume,
            status="pending",
        )
    except DuplicateApplication:
        raise ValidationError(ALREADY_APPLIED)

    logger.info("Anonymous application %s for job %s", application.id, job.id)
    return application


def change_application_status(
    storage: Storage,
    company: CompanyRecord,
    application_id: Optional[int],
    status: Optional[str],
) -> ApplicationRecord:
    """
    Set an application's status.

    Any of the four statuses may follow any other; only the value itself is
    checked.
    """
    if not application_id or not status:
        raise ValidationError("Application ID and status are required")

    if status not in APPLICATION_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(APPLICATION_STATUSES)}")

    application = storage.get_application(application_id)
    if application is None:
        raise NotFound("Application not found")

    if application.company_id != company.id:
        raise Forbidden("Not authorized to change this application")

    return storage.update_application(application.id, status=status, updated_at=utcnow())
