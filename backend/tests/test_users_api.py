import pytest
from fastapi.testclient import TestClient

from conftest import bearer, pdf_file
from jobportal.main import create_app


@pytest.fixture
def job(register_company, post_job):
    _, token = register_company()
    return post_job(token)


class TestApplicantAuth:
    def test_missing_bearer_token(self, client):
        response = client.get("/api/users/data")

        assert response.status_code == 401
        assert response.json()["message"] == "No token provided"

    def test_rejected_token(self, client):
        response = client.get("/api/users/data", headers={"Authorization": "Bearer forged"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_recruiter_token_is_not_an_applicant_token(self, client, register_company):
        _, recruiter_token = register_company()

        response = client.get("/api/users/data", headers={"Authorization": f"Bearer {recruiter_token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_profile_required(self, client):
        response = client.get("/api/users/data", headers=bearer("user_1"))

        assert response.status_code == 404
        assert response.json()["message"] == "User profile not found. Please complete your profile setup."

    def test_unconfigured_identity_provider(self, memory_storage, file_intake):
        app = create_app(storage=memory_storage, file_intake=file_intake)

        with TestClient(app) as client:
            response = client.post(
                "/api/users/sync", json={"email": "ann@example.com"}, headers=bearer("user_1")
            )

        assert response.status_code == 503
        assert response.json()["message"] == "Authentication service not configured"


class TestSync:
    def test_create_then_update(self, client):
        created = client.post(
            "/api/users/sync",
            json={"email": "Ann@Example.com", "firstName": "Ann", "lastName": "Lee"},
            headers=bearer("user_1"),
        ).json()

        assert created["action"] == "created"
        assert created["message"] == "User created"
        assert created["user"]["email"] == "ann@example.com"
        assert created["user"]["role"] == "user"

        updated = client.post(
            "/api/users/sync",
            json={"email": "ann@example.com", "lastName": "Park"},
            headers=bearer("user_1"),
        ).json()

        assert updated["action"] == "updated"
        assert updated["user"]["id"] == created["user"]["id"]
        assert updated["user"]["firstName"] == "Ann"
        assert updated["user"]["lastName"] == "Park"

    def test_email_is_required(self, client):
        response = client.post("/api/users/sync", json={"firstName": "Ann"}, headers=bearer("user_1"))

        assert response.status_code == 400
        assert response.json()["message"] == "Email is required"

    def test_email_owned_by_another_subject(self, client, sync_user, memory_storage):
        owner = sync_user(subject="user_1", email="ann@example.com")

        response = client.post(
            "/api/users/sync", json={"email": "ann@example.com"}, headers=bearer("user_2")
        )

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Email already registered with a different account"
        assert body["existingUserId"] == owner["id"]
        assert memory_storage.get_applicant_by_subject("user_2") is None

    def test_existing_subject_moving_to_taken_email(self, client, sync_user):
        sync_user(subject="user_1", email="ann@example.com")
        sync_user(subject="user_2", email="bob@example.com")

        response = client.post(
            "/api/users/sync", json={"email": "ann@example.com"}, headers=bearer("user_2")
        )

        assert response.status_code == 409


class TestUpdateEmail:
    def test_update(self, client, sync_user):
        sync_user(subject="user_1", email="ann@example.com")

        response = client.post(
            "/api/users/update-email", json={"newEmail": "ann.lee@example.com"}, headers=bearer("user_1")
        )

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "ann.lee@example.com"

    @pytest.mark.parametrize(
        "payload,message",
        [
            ({}, "New email is required"),
            ({"newEmail": "not-an-email"}, "Please enter a valid email address"),
        ],
    )
    def test_invalid_input(self, client, sync_user, payload, message):
        sync_user()

        response = client.post("/api/users/update-email", json=payload, headers=bearer("user_1"))

        assert response.status_code == 400
        assert response.json()["message"] == message

    def test_email_in_use(self, client, sync_user):
        sync_user(subject="user_1", email="ann@example.com")
        sync_user(subject="user_2", email="bob@example.com")

        response = client.post(
            "/api/users/update-email", json={"newEmail": "ann@example.com"}, headers=bearer("user_2")
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Email already in use by another account"

    def test_no_profile_yet(self, client):
        response = client.post(
            "/api/users/update-email", json={"newEmail": "new@example.com"}, headers=bearer("user_9")
        )

        assert response.status_code == 404


class TestResume:
    def test_file_required(self, client, sync_user):
        sync_user()

        response = client.post("/api/users/update-resume", headers=bearer("user_1"))

        assert response.status_code == 400
        assert response.json()["message"] == "Resume file is required"

    def test_upload(self, client, sync_user):
        sync_user()

        response = client.post("/api/users/update-resume", files=pdf_file(), headers=bearer("user_1"))

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["resume"].startswith("/uploads/resume-")
        assert user["resumeUrl"].endswith(user["resume"])

    def test_rejects_non_pdf(self, client, sync_user):
        sync_user()
        client.post("/api/users/update-resume", files=pdf_file(), headers=bearer("user_1"))
        before = client.get("/api/users/data", headers=bearer("user_1")).json()["user"]["resume"]

        response = client.post(
            "/api/users/update-resume",
            files={"resume": ("cv.txt", b"plain", "text/plain")},
            headers=bearer("user_1"),
        )

        assert response.status_code == 400
        after = client.get("/api/users/data", headers=bearer("user_1")).json()["user"]["resume"]
        assert before.startswith("/uploads/resume-")
        assert after == before


class TestApply:
    def test_resume_required(self, client, sync_user, job):
        sync_user()

        response = client.post("/api/users/apply-job", data={"jobId": job["id"]}, headers=bearer("user_1"))

        assert response.status_code == 400
        assert response.json()["message"] == "You must upload a resume to apply for jobs"

    def test_apply_with_upload_updates_profile(self, client, sync_user, job):
        sync_user()

        response = client.post(
            "/api/users/apply-job",
            data={"jobId": job["id"], "coverLetter": "Hire me"},
            files=pdf_file(),
            headers=bearer("user_1"),
        )

        assert response.status_code == 200
        application = response.json()["application"]
        assert application["status"] == "pending"
        assert application["coverLetter"] == "Hire me"
        assert application["email"] is None

        profile = client.get("/api/users/data", headers=bearer("user_1")).json()["user"]
        assert profile["resume"] == application["resume"]

    def test_profile_resume_is_reused(self, client, sync_user, job):
        sync_user()
        client.post("/api/users/update-resume", files=pdf_file(), headers=bearer("user_1"))

        response = client.post("/api/users/apply-job", data={"jobId": job["id"]}, headers=bearer("user_1"))

        assert response.status_code == 200

    def test_apply_twice(self, client, sync_user, job):
        sync_user()
        client.post("/api/users/apply-job", data={"jobId": job["id"]}, files=pdf_file(), headers=bearer("user_1"))

        response = client.post(
            "/api/users/apply-job", data={"jobId": job["id"]}, files=pdf_file(), headers=bearer("user_1")
        )

        assert response.status_code == 400
        assert response.json()["message"] == "You have already applied for this job"

    def test_missing_job_id(self, client, sync_user):
        sync_user()

        response = client.post("/api/users/apply-job", files=pdf_file(), headers=bearer("user_1"))

        assert response.status_code == 400
        assert response.json()["message"] == "Job ID is required"

    def test_unknown_job(self, client, sync_user):
        sync_user()

        response = client.post(
            "/api/users/apply-job", data={"jobId": 9999}, files=pdf_file(), headers=bearer("user_1")
        )

        assert response.status_code == 404


class TestApplications:
    def test_lists_authenticated_and_anonymous_applications(self, client, register_company, post_job, sync_user):
        _, token = register_company()
        first = post_job(token, title="First")
        second = post_job(token, title="Second")
        sync_user(email="ann@example.com")

        client.post("/api/users/apply-job", data={"jobId": first["id"]}, files=pdf_file(), headers=bearer("user_1"))
        client.post(
            "/api/company/apply-job",
            data={"jobId": second["id"], "name": "Ann", "email": "ann@example.com"},
        )

        body = client.get("/api/users/applications", headers=bearer("user_1")).json()

        assert body["storage"] == "In-Memory"
        titles = [a["jobId"]["title"] for a in body["applications"]]
        assert titles == ["Second", "First"]
        assert body["applications"][0]["companyId"]["name"] == "Acme"

    def test_recruiter_sees_profile_details(self, client, register_company, post_job, sync_user):
        _, token = register_company()
        job = post_job(token)
        sync_user(first_name="Ann", last_name="Lee")
        client.post("/api/users/apply-job", data={"jobId": job["id"]}, files=pdf_file(), headers=bearer("user_1"))

        applicants = client.get("/api/company/applicants", headers={"token": token}).json()["applicants"]

        assert applicants[0]["applicant"]["name"] == "Ann Lee"
        assert applicants[0]["applicant"]["email"] == "ann@example.com"
        assert applicants[0]["hasResume"] is True
