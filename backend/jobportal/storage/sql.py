"""Durable storage backed by SQLAlchemy."""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import func, or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobportal.db.base import Base
from jobportal.db.session import build_session_factory
from jobportal.models import Company, Job, JobApplication, User
from jobportal.storage.base import DuplicateApplication, DuplicateRecord, Storage
from jobportal.storage.records import (
    ApplicantRecord,
    ApplicationRecord,
    CompanyRecord,
    JobRecord,
)

logger = logging.getLogger("jobportal.storage")


class SQLStorage(Storage):
    label = "Database"

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = build_session_factory(engine)

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def _apply(row: Any, fields: dict[str, Any]) -> None:
        for key, value in fields.items():
            setattr(row, key, value)

    # ---- companies ----

    def create_company(self, *, name, email, hashed_password, image=None) -> CompanyRecord:
        try:
            with self._session() as db:
                company = Company(
                    name=name,
                    email=email,
                    hashed_password=hashed_password,
                    image=image,
                )
                db.add(company)
                db.flush()
                return CompanyRecord.model_validate(company)
        except IntegrityError as e:
            raise DuplicateRecord("email") from e

    def get_company(self, company_id: int) -> Optional[CompanyRecord]:
        with self._session() as db:
            company = db.get(Company, company_id)
            return CompanyRecord.model_validate(company) if company else None

    def get_company_by_email(self, email: str) -> Optional[CompanyRecord]:
        with self._session() as db:
            company = db.query(Company).filter(Company.email == email).first()
            return CompanyRecord.model_validate(company) if company else None

    def update_company(self, company_id: int, **fields: Any) -> Optional[CompanyRecord]:
        with self._session() as db:
            company = db.get(Company, company_id)
            if company is None:
                return None
            self._apply(company, fields)
            db.flush()
            return CompanyRecord.model_validate(company)

    # ---- applicants ----

    def create_applicant(self, *, subject_id, email, first_name="", last_name="") -> ApplicantRecord:
        try:
            with self._session() as db:
                user = User(
                    subject_id=subject_id,
                    email=email,
                    first_name=first_name,
                    last_name=last_name,
                    resume="",
                )
                db.add(user)
                db.flush()
                return ApplicantRecord.model_validate(user)
        except IntegrityError as e:
            raise DuplicateRecord("subject_id/email") from e

    def get_applicant(self, applicant_id: int) -> Optional[ApplicantRecord]:
        with self._session() as db:
            user = db.get(User, applicant_id)
            return ApplicantRecord.model_validate(user) if user else None

    def get_applicant_by_subject(self, subject_id: str) -> Optional[ApplicantRecord]:
        with self._session() as db:
            user = db.query(User).filter(User.subject_id == subject_id).first()
            return ApplicantRecord.model_validate(user) if user else None

    def get_applicant_by_email(self, email: str) -> Optional[ApplicantRecord]:
        with self._session() as db:
            user = db.query(User).filter(User.email == email).first()
            return ApplicantRecord.model_validate(user) if user else None

    def update_applicant(self, applicant_id: int, **fields: Any) -> Optional[ApplicantRecord]:
        try:
            with self._session() as db:
                user = db.get(User, applicant_id)
                if user is None:
                    return None
                self._apply(user, fields)
                db.flush()
                return ApplicantRecord.model_validate(user)
        except IntegrityError as e:
            raise DuplicateRecord("email") from e

    # ---- jobs ----

    def create_job(self, **fields: Any) -> JobRecord:
        with self._session() as db:
            job = Job(**fields)
            db.add(job)
            db.flush()
            return JobRecord.model_validate(job)

    def get_job(self, job_id: int) -> Optional[JobRecord]:
        with self._session() as db:
            job = db.get(Job, job_id)
            return JobRecord.model_validate(job) if job else None

    def list_visible_jobs(self) -> list[JobRecord]:
        with self._session() as db:
            jobs = db.query(Job).filter(Job.visible.is_(True)).order_by(Job.date.desc(), Job.id.desc()).all()
            return [JobRecord.model_validate(job) for job in jobs]

    def list_company_jobs(self, company_id: int) -> list[JobRecord]:
        with self._session() as db:
            jobs = (
                db.query(Job)
                .filter(Job.company_id == company_id)
                .order_by(Job.date.desc(), Job.id.desc())
                .all()
            )
            return [JobRecord.model_validate(job) for job in jobs]

    def update_job(self, job_id: int, **fields: Any) -> Optional[JobRecord]:
        with self._session() as db:
            job = db.get(Job, job_id)
            if job is None:
                return None
            self._apply(job, fields)
            db.flush()
            return JobRecord.model_validate(job)

    # ---- applications ----

    def create_application(self, **fields: Any) -> ApplicationRecord:
        try:
            with self._session() as db:
                application = JobApplication(**fields)
                db.add(application)
                db.flush()
                return ApplicationRecord.model_validate(application)
        except IntegrityError as e:
            logger.info("Duplicate application rejected for job %s", fields.get("job_id"))
            raise DuplicateApplication() from e

    def get_application(self, application_id: int) -> Optional[ApplicationRecord]:
        with self._session() as db:
            application = db.get(JobApplication, application_id)
            return ApplicationRecord.model_validate(application) if application else None

    def find_application(self, job_id: int, email: str) -> Optional[ApplicationRecord]:
        with self._session() as db:
            application = (
                db.query(JobApplication)
                .filter(JobApplication.job_id == job_id, JobApplication.email == email)
                .first()
            )
            return ApplicationRecord.model_validate(application) if application else None

    def update_application(self, application_id: int, **fields: Any) -> Optional[ApplicationRecord]:
        with self._session() as db:
            application = db.get(JobApplication, application_id)
            if application is None:
                return None
            self._apply(application, fields)
            db.flush()
            return ApplicationRecord.model_validate(application)

    def list_company_applications(self, company_id: int) -> list[ApplicationRecord]:
        with self._session() as db:
            applications = (
                db.query(JobApplication)
                .filter(JobApplication.company_id == company_id)
                .order_by(JobApplication.applied_at.desc(), JobApplication.id.desc())
                .all()
            )
            return [ApplicationRecord.model_validate(a) for a in applications]

    def list_applicant_applications(self, applicant_id: int, email: Optional[str]) -> list[ApplicationRecord]:
        criteria = [JobApplication.applicant_id == applicant_id]
        if email:
            criteria.append(JobApplication.email == email)

        with self._session() as db:
            applications = (
                db.query(JobApplication)
                .filter(or_(*criteria))
                .order_by(JobApplication.applied_at.desc(), JobApplication.id.desc())
                .all()
            )
            return [ApplicationRecord.model_validate(a) for a in applications]

    def count_job_applications(self, job_id: int) -> int:
        with self._session() as db:
            return (
                db.query(func.count(JobApplication.id))
                .filter(JobApplication.job_id == job_id)
                .scalar()
            ) or 0
