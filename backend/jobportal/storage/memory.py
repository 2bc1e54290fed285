"""
Process-local storage used when the database is unreachable at startup.

Data lives for the lifetime of the process and is never written back to the
database. Mutations are serialized with a lock so the uniqueness rules hold
under the threadpool FastAPI runs sync work on.
"""

import itertools
import threading
from typing import Any, Optional

from jobportal.db.base import utcnow
from jobportal.storage.base import DuplicateApplication, DuplicateRecord, Storage
from jobportal.storage.records import (
    ApplicantRecord,
    ApplicationRecord,
    CompanyRecord,
    JobRecord,
)


class InMemoryStorage(Storage):
    label = "In-Memory"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self.companies: dict[int, CompanyRecord] = {}
        self.applicants: dict[int, ApplicantRecord] = {}
        self.jobs: dict[int, JobRecord] = {}
        self.applications: dict[int, ApplicationRecord] = {}

    def _snapshot(self, table: dict) -> list:
        with self._lock:
            return list(table.values())

    @staticmethod
    def _newest_first(records, key):
        return sorted(records, key=lambda r: (getattr(r, key) or utcnow(), r.id), reverse=True)

    @staticmethod
    def _update(table: dict, record_id: int, fields: dict[str, Any]):
        current = table.get(record_id)
        if current is None:
            return None
        updated = current.model_copy(update=fields)
        table[record_id] = updated
        return updated

    # ---- companies ----

    def create_company(self, *, name, email, hashed_password, image=None) -> CompanyRecord:
        with self._lock:
            if any(c.email == email for c in self.companies.values()):
                raise DuplicateRecord("email")
            now = utcnow()
            company = CompanyRecord(
                id=next(self._ids),
                name=name,
                email=email,
                hashed_password=hashed_password,
                image=image,
                created_at=now,
                updated_at=now,
            )
            self.companies[company.id] = company
            return company

    def get_company(self, company_id: int) -> Optional[CompanyRecord]:
        return self.companies.get(company_id)

    def get_company_by_email(self, email: str) -> Optional[CompanyRecord]:
        return next((c for c in self._snapshot(self.companies) if c.email == email), None)

    def update_company(self, company_id: int, **fields: Any) -> Optional[CompanyRecord]:
        with self._lock:
            return self._update(self.companies, company_id, fields)

    # ---- applicants ----

    def create_applicant(self, *, subject_id, email, first_name="", last_name="") -> ApplicantRecord:
        with self._lock:
            for existing in self.applicants.values():
                if existing.subject_id == subject_id:
                    raise DuplicateRecord("subject_id")
                if existing.email == email:
                    raise DuplicateRecord("email")
            now = utcnow()
            applicant = ApplicantRecord(
                id=next(self._ids),
                subject_id=subject_id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                created_at=now,
                last_updated=now,
            )
            self.applicants[applicant.id] = applicant
            return applicant

    def get_applicant(self, applicant_id: int) -> Optional[ApplicantRecord]:
        return self.applicants.get(applicant_id)

    def get_applicant_by_subject(self, subject_id: str) -> Optional[ApplicantRecord]:
        return next((a for a in self._snapshot(self.applicants) if a.subject_id == subject_id), None)

    def get_applicant_by_email(self, email: str) -> Optional[ApplicantRecord]:
        return next((a for a in self._snapshot(self.applicants) if a.email == email), None)

    def update_applicant(self, applicant_id: int, **fields: Any) -> Optional[ApplicantRecord]:
        with self._lock:
            email = fields.get("email")
            if email and any(
                a.email == email and a.id != applicant_id for a in self.applicants.values()
            ):
                raise DuplicateRecord("email")
            return self._update(self.applicants, applicant_id, fields)

    # ---- jobs ----

    def create_job(self, **fields: Any) -> JobRecord:
        with self._lock:
            now = utcnow()
            fields.setdefault("date", now)
            fields.setdefault("updated_at", now)
            job = JobRecord(id=next(self._ids), **fields)
            self.jobs[job.id] = job
            return job

    def get_job(self, job_id: int) -> Optional[JobRecord]:
        return self.jobs.get(job_id)

    def list_visible_jobs(self) -> list[JobRecord]:
        return self._newest_first([j for j in self._snapshot(self.jobs) if j.visible], "date")

    def list_company_jobs(self, company_id: int) -> list[JobRecord]:
        return self._newest_first(
            [j for j in self._snapshot(self.jobs) if j.company_id == company_id], "date"
        )

    def update_job(self, job_id: int, **fields: Any) -> Optional[JobRecord]:
        with self._lock:
            return self._update(self.jobs, job_id, fields)

    # ---- applications ----

    def create_application(self, **fields: Any) -> ApplicationRecord:
        job_id = fields["job_id"]
        applicant_id = fields.get("applicant_id")
        email = fields.get("email")

        with self._lock:
            for existing in self.applications.values():
                if existing.job_id != job_id:
                    continue
                if applicant_id is not None and existing.applicant_id == applicant_id:
                    raise DuplicateApplication()
                if email is not None and existing.email == email:
                    raise DuplicateApplication()

            now = utcnow()
            fields.setdefault("applied_at", now)
            fields.setdefault("updated_at", now)
            application = ApplicationRecord(id=next(self._ids), **fields)
            self.applications[application.id] = application
            return application

    def get_application(self, application_id: int) -> Optional[ApplicationRecord]:
        return self.applications.get(application_id)

    def find_application(self, job_id: int, email: str) -> Optional[ApplicationRecord]:
        return next(
            (a for a in self._snapshot(self.applications) if a.job_id == job_id and a.email == email),
            None,
        )

    def update_application(self, application_id: int, **fields: Any) -> Optional[ApplicationRecord]:
        with self._lock:
            return self._update(self.applications, application_id, fields)

    def list_company_applications(self, company_id: int) -> list[ApplicationRecord]:
        return self._newest_first(
            [a for a in self._snapshot(self.applications) if a.company_id == company_id],
            "applied_at",
        )

    def list_applicant_applications(self, applicant_id: int, email: Optional[str]) -> list[ApplicationRecord]:
        matches = [
            a
            for a in self._snapshot(self.applications)
            if a.applicant_id == applicant_id or (email and a.email == email)
        ]
        return self._newest_first(matches, "applied_at")

    def count_job_applications(self, job_id: int) -> int:
        return sum(1 for a in self._snapshot(self.applications) if a.job_id == job_id)
