"""
Plain records exchanged with the storage layer.

Both storage implementations return these pydantic models, so handlers never
see ORM instances. They serialize with camelCase keys to match the JSON the
web client consumes.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

JOB_LEVELS = ["Entry", "Mid", "Senior", "Lead", "Manager"]
JOB_CATEGORIES = [
    "Programming",
    "Data Science",
    "Designing",
    "Networking",
    "Management",
    "Marketing",
    "Cybersecurity",
]
APPLICATION_STATUSES = ["pending", "reviewed", "accepted", "rejected"]
APPLICANT_ROLES = ["user", "admin"]


class Record(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class CompanyRecord(Record):
    id: int
    name: str
    email: str
    hashed_password: str
    image: Optional[str] = None
    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_public(self) -> dict[str, Any]:
        # Credentials never leave the server.
        return self.model_dump(
            by_alias=True,
            mode="json",
            exclude={"hashed_password", "reset_password_token", "reset_password_expires"},
        )


class ApplicantRecord(Record):
    id: int
    subject_id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str = "user"
    resume: str = ""
    created_at: Optional[datetime] = None
    last_updated: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class JobRecord(Record):
    id: int
    title: str
    description: str
    location: str
    category: str
    level: str
    salary: float
    visible: bool = True
    company_id: int
    date: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ApplicationRecord(Record):
    id: int
    applicant_id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    resume: Optional[str] = None
    cover_letter: str = ""
    job_id: int
    company_id: int
    status: str = "pending"
    applied_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
