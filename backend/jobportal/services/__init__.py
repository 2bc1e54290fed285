from jobportal.services.applicants import sync_applicant, update_applicant_email
from jobportal.services.applications import (
    apply_anonymously,
    apply_as_applicant,
    change_application_status,
)
from jobportal.services.file_intake import FileIntake, LOGO_UPLOAD, RESUME_UPLOAD
from jobportal.services.jobs import post_job, toggle_visibility
from jobportal.services.mailer import send_password_reset

__all__ = [
    "sync_applicant",
    "update_applicant_email",
    "apply_anonymously",
    "apply_as_applicant",
    "change_application_status",
    "FileIntake",
    "LOGO_UPLOAD",
    "RESUME_UPLOAD",
    "post_job",
    "toggle_visibility",
    "send_password_reset",
]
