import asyncio
import io
import re
from unittest import mock

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from conftest import PDF_BYTES
from jobportal.core.config import Settings
from jobportal.core.errors import ValidationError
from jobportal.services import file_intake as intake_module
from jobportal.services.file_intake import (
    LOGO_UPLOAD,
    RESUME_UPLOAD,
    CloudinaryStorage,
    FileIntake,
    UploadConstraints,
    build_filename,
    build_remote_storage,
    public_url,
)


def make_upload(content=PDF_BYTES, filename="cv.pdf", content_type="application/pdf"):
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def accept(intake, upload, constraints=RESUME_UPLOAD, field="resume"):
    return asyncio.run(intake.accept(upload, constraints, field))


class FakeRemote:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def upload(self, path, folder, resource_type):
        self.calls.append((path.name, folder, resource_type))
        if self.fail:
            raise ConnectionError("cloud unreachable")
        return f"https://cdn.example.com/{folder}/{path.name}"


class TestLocalIntake:
    def test_stores_pdf_locally(self, tmp_path):
        intake = FileIntake(tmp_path)

        stored = accept(intake, make_upload())

        assert stored.remote is False
        assert stored.reference == f"/uploads/{stored.filename}"
        assert (tmp_path / stored.filename).read_bytes() == PDF_BYTES

    def test_rejects_wrong_type_before_writing(self, tmp_path):
        intake = FileIntake(tmp_path)

        with pytest.raises(ValidationError) as excinfo:
            accept(intake, make_upload(content=b"text", filename="cv.txt", content_type="text/plain"))

        assert excinfo.value.status_code == 400
        assert excinfo.value.detail == "Only PDF files allowed!"
        assert list(tmp_path.iterdir()) == []

    def test_rejects_oversized_file(self, tmp_path):
        intake = FileIntake(tmp_path)
        tiny = UploadConstraints(max_bytes=8, content_types=None, folder="x", resource_type="raw")

        with pytest.raises(ValidationError):
            accept(intake, make_upload(content=b"0123456789"), constraints=tiny)

        assert list(tmp_path.iterdir()) == []

    def test_resume_limit_is_ten_megabytes(self):
        assert RESUME_UPLOAD.max_bytes == 10 * 1024 * 1024
        assert LOGO_UPLOAD.max_bytes == 5 * 1024 * 1024
        assert LOGO_UPLOAD.content_types is None


class TestRemoteIntake:
    def test_remote_url_replaces_local_file(self, tmp_path):
        remote = FakeRemote()
        intake = FileIntake(tmp_path, remote)

        stored = accept(intake, make_upload())

        assert stored.remote is True
        assert stored.reference == f"https://cdn.example.com/user-resumes/{stored.filename}"
        assert remote.calls == [(stored.filename, "user-resumes", "raw")]
        assert list(tmp_path.iterdir()) == []

    def test_remote_failure_keeps_local_copy(self, tmp_path, monkeypatch):
        events = []
        monkeypatch.setattr(
            intake_module, "report_event", lambda name, **context: events.append((name, context))
        )
        intake = FileIntake(tmp_path, FakeRemote(fail=True))

        stored = accept(intake, make_upload())

        assert stored.remote is False
        assert stored.reference == f"/uploads/{stored.filename}"
        assert (tmp_path / stored.filename).exists()
        assert events[0][0] == "upload.remote_fallback"
        assert events[0][1]["filename"] == stored.filename


class TestCloudinary:
    def test_not_configured(self):
        assert build_remote_storage(Settings(CLOUDINARY_CLOUD_NAME="")) is None

    def test_upload_returns_secure_url(self, tmp_path):
        settings = Settings(
            CLOUDINARY_CLOUD_NAME="demo",
            CLOUDINARY_API_KEY="key",
            CLOUDINARY_API_SECRET="secret",
        )
        remote = build_remote_storage(settings)
        assert isinstance(remote, CloudinaryStorage)

        path = tmp_path / "resume.pdf"
        path.write_bytes(PDF_BYTES)
        with mock.patch.object(
            intake_module.cloudinary.uploader,
            "upload",
            return_value={"secure_url": "https://res.cloudinary.com/demo/raw/upload/resume.pdf"},
        ) as upload:
            url = remote.upload(path, "user-resumes", "raw")

        assert url == "https://res.cloudinary.com/demo/raw/upload/resume.pdf"
        upload.assert_called_once_with(str(path), folder="user-resumes", resource_type="raw")


def test_filename_format():
    name = build_filename("resume", "My CV.PDF")

    assert re.fullmatch(r"resume-\d{13}-\d+\.pdf", name)


@pytest.mark.parametrize(
    "reference,expected",
    [
        (None, None),
        ("", None),
        ("https://cdn.example.com/a.pdf", "https://cdn.example.com/a.pdf"),
        ("/uploads/a.pdf", "http://api.test/uploads/a.pdf"),
        ("a.pdf", "http://api.test/uploads/a.pdf"),
    ],
)
def test_public_url(reference, expected):
    assert public_url(reference, "http://api.test/") == expected
