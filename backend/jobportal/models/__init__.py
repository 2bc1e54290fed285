from jobportal.models.company import Company
from jobportal.models.user import User
from jobportal.models.job import Job
from jobportal.models.application import JobApplication

__all__ = ["Company", "User", "Job", "JobApplication"]
