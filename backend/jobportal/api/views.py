"""
Response shaping shared by the routers.

Records are joined here with the company/applicant/job they reference, the
way the web client expects them (camelCase keys, no credentials).
"""

from typing import Any, Optional

from jobportal.core.config import settings
from jobportal.services.file_intake import public_url
from jobportal.storage import Storage
from jobportal.storage.records import (
    ApplicantRecord,
    ApplicationRecord,
    CompanyRecord,
    JobRecord,
)


def company_view(company: Optional[CompanyRecord]) -> Optional[dict[str, Any]]:
    if company is None:
        return None
    data = company.to_public()
    data["imageUrl"] = public_url(company.image, settings.BACKEND_URL)
    return data


def company_summary(company: Optional[CompanyRecord]) -> Optional[dict[str, Any]]:
    if company is None:
        return None
    return {
        "id": company.id,
        "name": company.name,
        "email": company.email,
        "image": company.image,
        "imageUrl": public_url(company.image, settings.BACKEND_URL),
    }


def job_summary(job: Optional[JobRecord]) -> Optional[dict[str, Any]]:
    if job is None:
        return None
    return {
        "id": job.id,
        "title": job.title,
        "location": job.location,
        "category": job.category,
        "level": job.level,
        "salary": job.salary,
    }


def job_view(job: JobRecord, company: Optional[CompanyRecord]) -> dict[str, Any]:
    data = job.to_public()
    data["companyId"] = company_summary(company) or job.company_id
    return data


def jobs_with_companies(storage: Storage, jobs: list[JobRecord]) -> list[dict[str, Any]]:
    companies: dict[int, Optional[CompanyRecord]] = {}
    views = []
    for job in jobs:
        if job.company_id not in companies:
            companies[job.company_id] = storage.get_company(job.company_id)
        views.append(job_view(job, companies[job.company_id]))
    return views


def applicant_view(applicant: ApplicantRecord) -> dict[str, Any]:
    data = applicant.to_public()
    data["resumeUrl"] = public_url(applicant.resume, settings.BACKEND_URL)
    return data


def recruiter_application_view(
    application: ApplicationRecord,
    job: Optional[JobRecord],
    applicant: Optional[ApplicantRecord],
) -> dict[str, Any]:
    """An application as seen by the recruiter who owns the job."""
    if applicant is not None:
        name = applicant.full_name or "Unknown User"
        email = applicant.email or "No email"
        resume = application.resume or applicant.resume or None
    else:
        name = application.name or "Unknown User"
        email = application.email or "No email"
        resume = application.resume or None

    resume_link = public_url(resume, settings.BACKEND_URL)
    return {
        "id": application.id,
        "jobId": job_summary(job) or application.job_id,
        "applicant": {
            "id": application.applicant_id,
            "name": name,
            "email": email,
            "phone": application.phone,
            "resume": resume,
        },
        "jobTitle": job.title if job else "N/A",
        "location": job.location if job else "N/A",
        "coverLetter": application.cover_letter,
        "status": application.status,
        "appliedAt": application.applied_at,
        "resumeLink": resume_link,
        "hasResume": bool(resume_link),
    }


def applicant_application_view(
    application: ApplicationRecord,
    job: Optional[JobRecord],
    company: Optional[CompanyRecord],
) -> dict[str, Any]:
    """An application as seen by the applicant who made it."""
    return {
        "id": application.id,
        "jobId": job_summary(job) or application.job_id,
        "companyId": (
            {"id": company.id, "name": company.name, "image": company.image}
            if company
            else application.company_id
        ),
        "status": application.status,
        "date": application.applied_at,
        "appliedAt": application.applied_at,
    }
