"""
Python client for the Job Portal API.

Holds the same session state a browser front-end keeps: the job cache and
search filter, the recruiter token and company, the applicant token, profile
and applications, plus the email-conflict flags set by profile sync.
"""

import logging
import time
from typing import Any, Callable, Optional

import requests

from jobportal.services.applicants import is_valid_email

logger = logging.getLogger("jobportal.client")

DEFAULT_TIMEOUT = 10
RETRYABLE_ERRORS = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)


class PortalError(Exception):
    """An API call that answered with ``success: false`` or an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def retry_request(
    fn: Callable[[], requests.Response],
    max_retries: int = 3,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> requests.Response:
    """
    Call ``fn`` up to ``max_retries`` times.

    Only connection errors and timeouts are retried, waiting ``delay *
    attempt`` seconds between attempts. HTTP error responses are returned
    as-is.
    """
    for attempt in range(1, max_retries + 1):
        try:
            return fn()
        except RETRYABLE_ERRORS as e:
            if attempt == max_retries:
                raise
            logger.warning("Request failed (attempt %d/%d): %s", attempt, max_retries, e)
            sleep(delay * attempt)


def _payload(response: requests.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        data = {}
    return data if isinstance(data, dict) else {}


def _raise_for_failure(response: requests.Response) -> dict[str, Any]:
    data = _payload(response)
    if not response.ok or data.get("success") is False:
        raise PortalError(data.get("message") or response.reason or "Request failed", response.status_code)
    return data


class PortalClient:
    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        retry_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.retry_delay = retry_delay
        self._sleep = sleep

        self.search_filter = {"title": "", "location": ""}
        self.jobs: list[dict[str, Any]] = []

        self.company_token: Optional[str] = None
        self.company: Optional[dict[str, Any]] = None

        self.user_token: Optional[str] = None
        self.user: Optional[dict[str, Any]] = None
        self.applications: list[dict[str, Any]] = []

        self.show_email_resolver = False
        self.is_syncing = False
        self.has_synced = False

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _bearer(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.user_token}"} if self.user_token else {}

    def _with_retry(self, fn: Callable[[], requests.Response]) -> requests.Response:
        return retry_request(fn, delay=self.retry_delay, sleep=self._sleep)

    # ---- jobs ----

    def fetch_jobs(self) -> list[dict[str, Any]]:
        """Refresh the job cache; network failures leave it empty."""
        try:
            response = self.session.get(self._url("/api/jobs"), timeout=DEFAULT_TIMEOUT)
            data = _raise_for_failure(response)
        except (requests.exceptions.RequestException, PortalError) as e:
            logger.error("Error fetching jobs: %s", e)
            self.jobs = []
            return self.jobs

        self.jobs = data.get("jobs", [])
        return self.jobs

    def filtered_jobs(self) -> list[dict[str, Any]]:
        """Cached jobs matching the search filter (case-insensitive substrings)."""
        title = (self.search_filter.get("title") or "").lower()
        location = (self.search_filter.get("location") or "").lower()
        return [
            job
            for job in self.jobs
            if title in (job.get("title") or "").lower()
            and location in (job.get("location") or "").lower()
        ]

    # ---- recruiter ----

    def login_company(self, email: str, password: str) -> dict[str, Any]:
        response = self.session.post(
            self._url("/api/company/login"),
            json={"email": email, "password": password},
            timeout=DEFAULT_TIMEOUT,
        )
        data = _raise_for_failure(response)
        self.company_token = data["token"]
        self.company = data["company"]
        return self.company

    def fetch_company_data(self) -> Optional[dict[str, Any]]:
        if not self.company_token:
            return None
        response = self.session.get(
            self._url("/api/company/profile"),
            headers={"token": self.company_token},
            timeout=DEFAULT_TIMEOUT,
        )
        self.company = _raise_for_failure(response)["company"]
        return self.company

    def logout(self) -> None:
        self.company_token = None
        self.company = None
        self.user_token = None
        self.user = None
        self.applications = []
        self.show_email_resolver = False
        self.has_synced = False

    # ---- applicant ----

    def fetch_user_data(self) -> Optional[dict[str, Any]]:
        if not self.user_token:
            return None
        response = self.session.get(
            self._url("/api/users/data"), headers=self._bearer(), timeout=DEFAULT_TIMEOUT
        )
        self.user = _raise_for_failure(response)["user"]
        return self.user

    def fetch_user_applications(self) -> list[dict[str, Any]]:
        if not self.user_token:
            return []
        response = self._with_retry(
            lambda: self.session.get(
                self._url("/api/users/applications"),
                headers=self._bearer(),
                timeout=DEFAULT_TIMEOUT,
            )
        )
        self.applications = _raise_for_failure(response).get("applications", [])
        return self.applications

    def sync_user(
        self,
        email: str,
        first_name: str = "",
        last_name: str = "",
    ) -> Optional[dict[str, Any]]:
        """
        Create or refresh the applicant profile.

        A 409 means the email belongs to another account: the resolver flag
        is raised and None is returned instead of an error.
        """
        if not self.user_token or self.is_syncing:
            return None

        self.is_syncing = True
        try:
            response = self._with_retry(
                lambda: self.session.post(
                    self._url("/api/users/sync"),
                    json={"email": email, "firstName": first_name, "lastName": last_name},
                    headers=self._bearer(),
                    timeout=DEFAULT_TIMEOUT,
                )
            )
            if response.status_code == 409:
                logger.warning("Email conflict during sync: %s", _payload(response).get("message"))
                self.show_email_resolver = True
                return None

            self.user = _raise_for_failure(response)["user"]
            self.show_email_resolver = False
            self.has_synced = True
            return self.user
        finally:
            self.is_syncing = False

    def resolve_email_conflict(self, new_email: str) -> Optional[dict[str, Any]]:
        """
        Switch to a different email after a sync conflict, then sync again.

        The server answers 404 when no profile exists yet for the caller;
        in that case the new email is simply used for the next sync.
        """
        if not is_valid_email(new_email):
            raise PortalError("Please enter a valid email address", 400)

        response = self.session.post(
            self._url("/api/users/update-email"),
            json={"newEmail": new_email},
            headers=self._bearer(),
            timeout=DEFAULT_TIMEOUT,
        )
        if response.status_code != 404:
            _raise_for_failure(response)

        first_name = (self.user or {}).get("firstName", "")
        last_name = (self.user or {}).get("lastName", "")
        return self.sync_user(new_email, first_name, last_name)
