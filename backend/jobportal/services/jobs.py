"""Job posting validation and visibility."""

import math
from typing import Any, Optional

from jobportal.core.errors import Forbidden, NotFound, ValidationError
from jobportal.db.base import utcnow
from jobportal.storage import Storage
from jobportal.storage.records import JOB_CATEGORIES, JOB_LEVELS, CompanyRecord, JobRecord

REQUIRED_JOB_FIELDS = ["title", "description", "location", "salary", "level", "category"]


def parse_salary(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        salary = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(salary) or salary <= 0:
        return None
    return salary


def validate_job_fields(data: dict[str, Any]) -> dict[str, Any]:
    """
    Check a job payload and return the cleaned fields.

    Raises ValidationError naming the offending field(s).
    """
    missing = [
        name
        for name in REQUIRED_JOB_FIELDS
        if data.get(name) is None or (isinstance(data.get(name), str) and not data[name].strip())
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    salary = parse_salary(data["salary"])
    if salary is None:
        raise ValidationError("Salary must be a positive number")

    level = data["level"]
    if level not in JOB_LEVELS:
        raise ValidationError(f"Invalid level. Must be one of: {', '.join(JOB_LEVELS)}")

    category = data["category"]
    if category not in JOB_CATEGORIES:
        raise ValidationError(f"Invalid category. Must be one of: {', '.join(JOB_CATEGORIES)}")

    return {
        "title": str(data["title"]).strip(),
        "description": str(data["description"]).strip(),
        "location": str(data["location"]).strip(),
        "salary": salary,
        "level": level,
        "category": category,
    }


def post_job(storage: Storage, company: CompanyRecord, data: dict[str, Any]) -> JobRecord:
    fields = validate_job_fields(data)
    return storage.create_job(**fields, company_id=company.id, visible=True, date=utcnow())


def toggle_visibility(storage: Storage, company: CompanyRecord, job_id: Optional[int]) -> JobRecord:
    """Flip a job between published and hidden; only its owner may do so."""
    if not job_id:
        raise ValidationError("Job ID is required")

    job = storage.get_job(job_id)
    if job is None:
        raise NotFound("Job not found")

    if job.company_id != company.id:
        raise Forbidden("Not authorized to modify this job")

    return storage.update_job(job.id, visible=not job.visible, updated_at=utcnow())
