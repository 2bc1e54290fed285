import threading
from datetime import timedelta

import pytest

from jobportal.db.base import utcnow
from jobportal.storage import (
    DuplicateApplication,
    DuplicateRecord,
    InMemoryStorage,
    SQLStorage,
    select_storage,
)


@pytest.fixture
def company(storage):
    return storage.create_company(name="Acme", email="hr@acme.com", hashed_password="hashed")


@pytest.fixture
def job(storage, company):
    return storage.create_job(
        title="Engineer",
        description="Build things",
        location="Remote",
        category="Programming",
        level="Mid",
        salary=1000.0,
        company_id=company.id,
        visible=True,
    )


@pytest.fixture
def applicant(storage):
    return storage.create_applicant(subject_id="sub_1", email="ann@example.com", first_name="Ann")


class TestCompanies:
    def test_email_is_unique(self, storage, company):
        with pytest.raises(DuplicateRecord):
            storage.create_company(name="Other", email="hr@acme.com", hashed_password="x")

    def test_public_view_hides_credentials(self, storage, company):
        storage.update_company(company.id, reset_password_token="abc", reset_password_expires=utcnow())
        public = storage.get_company(company.id).to_public()

        assert public["email"] == "hr@acme.com"
        assert "hashedPassword" not in public
        assert "resetPasswordToken" not in public
        assert "resetPasswordExpires" not in public


class TestApplicants:
    def test_lookup_by_subject_and_email(self, storage, applicant):
        assert storage.get_applicant_by_subject("sub_1").id == applicant.id
        assert storage.get_applicant_by_email("ann@example.com").id == applicant.id
        assert applicant.role == "user"
        assert applicant.resume == ""

    def test_subject_and_email_are_unique(self, storage, applicant):
        with pytest.raises(DuplicateRecord):
            storage.create_applicant(subject_id="sub_1", email="other@example.com")
        with pytest.raises(DuplicateRecord):
            storage.create_applicant(subject_id="sub_2", email="ann@example.com")

    def test_update_to_taken_email_is_rejected(self, storage, applicant):
        other = storage.create_applicant(subject_id="sub_2", email="bob@example.com")

        with pytest.raises(DuplicateRecord):
            storage.update_applicant(other.id, email="ann@example.com")

        assert storage.get_applicant(other.id).email == "bob@example.com"


class TestJobs:
    def test_hidden_jobs_are_not_listed_but_stay_addressable(self, storage, job):
        storage.update_job(job.id, visible=False)

        assert storage.list_visible_jobs() == []
        assert storage.get_job(job.id).visible is False

    def test_company_jobs_newest_first(self, storage, company, job):
        newer = storage.create_job(
            title="Designer",
            description="Design things",
            location="Pune",
            category="Designing",
            level="Entry",
            salary=500.0,
            company_id=company.id,
            visible=True,
            date=utcnow() + timedelta(minutes=1),
        )

        assert [j.id for j in storage.list_company_jobs(company.id)] == [newer.id, job.id]


class TestApplications:
    def test_applicant_cannot_apply_twice(self, storage, job, applicant):
        storage.create_application(applicant_id=applicant.id, job_id=job.id, company_id=job.company_id)

        with pytest.raises(DuplicateApplication):
            storage.create_application(applicant_id=applicant.id, job_id=job.id, company_id=job.company_id)

    def test_email_cannot_apply_twice(self, storage, job):
        storage.create_application(job_id=job.id, company_id=job.company_id, name="Bo", email="bo@example.com")

        with pytest.raises(DuplicateApplication):
            storage.create_application(job_id=job.id, company_id=job.company_id, name="Bo", email="bo@example.com")

    def test_authenticated_applications_do_not_collide_on_empty_email(self, storage, job, applicant):
        other = storage.create_applicant(subject_id="sub_2", email="bob@example.com")

        storage.create_application(applicant_id=applicant.id, job_id=job.id, company_id=job.company_id)
        storage.create_application(applicant_id=other.id, job_id=job.id, company_id=job.company_id)

        assert storage.count_job_applications(job.id) == 2

    def test_defaults(self, storage, job, applicant):
        application = storage.create_application(
            applicant_id=applicant.id, job_id=job.id, company_id=job.company_id
        )

        assert application.status == "pending"
        assert application.cover_letter == ""
        assert application.applied_at is not None

    def test_applicant_listing_matches_id_or_email(self, storage, company, job, applicant):
        second_job = storage.create_job(
            title="Analyst",
            description="Analyse",
            location="Remote",
            category="Data Science",
            level="Senior",
            salary=900.0,
            company_id=company.id,
            visible=True,
        )
        by_id = storage.create_application(applicant_id=applicant.id, job_id=job.id, company_id=company.id)
        by_email = storage.create_application(
            job_id=second_job.id,
            company_id=company.id,
            name="Ann",
            email="ann@example.com",
            applied_at=utcnow() + timedelta(minutes=1),
        )
        storage.create_application(job_id=job.id, company_id=company.id, name="Zed", email="zed@example.com")

        listed = storage.list_applicant_applications(applicant.id, "ann@example.com")

        assert [a.id for a in listed] == [by_email.id, by_id.id]

    def test_find_by_job_and_email(self, storage, job):
        created = storage.create_application(job_id=job.id, company_id=job.company_id, name="Bo", email="bo@example.com")

        assert storage.find_application(job.id, "bo@example.com").id == created.id
        assert storage.find_application(job.id, "nobody@example.com") is None

    def test_concurrent_applies_insert_exactly_one(self, storage, job, applicant):
        barrier = threading.Barrier(8)
        outcomes = []

        def apply():
            barrier.wait()
            try:
                storage.create_application(
                    applicant_id=applicant.id, job_id=job.id, company_id=job.company_id
                )
                outcomes.append("created")
            except DuplicateApplication:
                outcomes.append("duplicate")

        threads = [threading.Thread(target=apply) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count("created") == 1
        assert outcomes.count("duplicate") == 7
        assert storage.count_job_applications(job.id) == 1


class TestSelectStorage:
    def test_reachable_database_is_used(self, tmp_path):
        selected = select_storage(f"sqlite:///{tmp_path / 'portal.db'}")

        assert isinstance(selected, SQLStorage)
        assert selected.label == "Database"

    def test_unreachable_database_falls_back_to_memory(self):
        selected = select_storage("sqlite:////nonexistent/dir/portal.db")

        assert isinstance(selected, InMemoryStorage)
        assert selected.label == "In-Memory"
