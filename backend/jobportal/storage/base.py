"""
Storage interface shared by the database and in-memory implementations.

One implementation is selected at startup (see ``select_storage``) and
injected into the request handlers through ``app.state.storage``.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from jobportal.storage.records import (
    ApplicantRecord,
    ApplicationRecord,
    CompanyRecord,
    JobRecord,
)


class StorageError(Exception):
    """Base class for storage-level failures."""


class DuplicateRecord(StorageError):
    """A unique field (email, subject id) is already taken."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Duplicate value for {field}")
        self.field = field


class DuplicateApplication(StorageError):
    """The (job, applicant) or (job, email) pair already has an application."""


class Storage(ABC):
    """Persistence for companies, applicants, jobs and applications."""

    #: Reported to clients as the ``storage`` field of list responses.
    label: str = ""

    # ---- companies ----

    @abstractmethod
    def create_company(
        self, *, name: str, email: str, hashed_password: str, image: Optional[str] = None
    ) -> CompanyRecord:
        ...

    @abstractmethod
    def get_company(self, company_id: int) -> Optional[CompanyRecord]:
        ...

    @abstractmethod
    def get_company_by_email(self, email: str) -> Optional[CompanyRecord]:
        ...

    @abstractmethod
    def update_company(self, company_id: int, **fields: Any) -> Optional[CompanyRecord]:
        ...

    # ---- applicants ----

    @abstractmethod
    def create_applicant(
        self, *, subject_id: str, email: str, first_name: str = "", last_name: str = ""
    ) -> ApplicantRecord:
        ...

    @abstractmethod
    def get_applicant(self, applicant_id: int) -> Optional[ApplicantRecord]:
        ...

    @abstractmethod
    def get_applicant_by_subject(self, subject_id: str) -> Optional[ApplicantRecord]:
        ...

    @abstractmethod
    def get_applicant_by_email(self, email: str) -> Optional[ApplicantRecord]:
        ...

    @abstractmethod
    def update_applicant(self, applicant_id: int, **fields: Any) -> Optional[ApplicantRecord]:
        ...

    # ---- jobs ----

    @abstractmethod
    def create_job(self, **fields: Any) -> JobRecord:
        ...

    @abstractmethod
    def get_job(self, job_id: int) -> Optional[JobRecord]:
        ...

    @abstractmethod
    def list_visible_jobs(self) -> list[JobRecord]:
        ...

    @abstractmethod
    def list_company_jobs(self, company_id: int) -> list[JobRecord]:
        """Jobs owned by a company, newest first."""

    @abstractmethod
    def update_job(self, job_id: int, **fields: Any) -> Optional[JobRecord]:
        ...

    # ---- applications ----

    @abstractmethod
    def create_application(self, **fields: Any) -> ApplicationRecord:
        """
        Insert an application.

        Raises:
            DuplicateApplication: when the job already has an application
                from the same applicant, or from the same email.
        """

    @abstractmethod
    def get_application(self, application_id: int) -> Optional[ApplicationRecord]:
        ...

    @abstractmethod
    def find_application(self, job_id: int, email: str) -> Optional[ApplicationRecord]:
        ...

    @abstractmethod
    def update_application(self, application_id: int, **fields: Any) -> Optional[ApplicationRecord]:
        ...

    @abstractmethod
    def list_company_applications(self, company_id: int) -> list[ApplicationRecord]:
        """Applications to a company's jobs, newest first."""

    @abstractmethod
    def list_applicant_applications(
        self, applicant_id: int, email: Optional[str]
    ) -> list[ApplicationRecord]:
        """Applications made by the applicant id OR under the email, newest first."""

    @abstractmethod
    def count_job_applications(self, job_id: int) -> int:
        ...
