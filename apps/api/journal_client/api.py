"""
Thin requests wrapper over the /v1 REST surface.

Every method returns the decoded JSON body (or the relevant member of it) and
raises JournalAPIError for transport failures and non-2xx responses.
"""
from typing import Any, Dict, List, Optional

import requests

DEFAULT_TIMEOUT_S = 10


class JournalAPIError(Exception):
    """Request failed before or after reaching the API."""

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class JournalClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            r = self.session.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.exceptions.RequestException as e:
            raise JournalAPIError(f"{method} {path} failed: {e}") from e

        if not r.ok:
            detail, error_code = r.text, None
            try:
                body = r.json()
                detail = body.get("detail", detail)
                error_code = body.get("error_code")
            except ValueError:
                pass
            raise JournalAPIError(
                f"{method} {path} returned {r.status_code}: {detail}",
                status_code=r.status_code,
                error_code=error_code,
            )

        # A proxy or captive portal can answer 200 with an HTML page.
        try:
            body = r.json()
        except ValueError as e:
            raise JournalAPIError(
                f"{method} {path} returned a non-JSON body", status_code=r.status_code
            ) from e
        if not isinstance(body, dict):
            raise JournalAPIError(
                f"{method} {path} returned unexpected JSON", status_code=r.status_code
            )
        return body

    def _member(self, method: str, path: str, key: str, **kwargs) -> Any:
        """The `key` member of the response body; JournalAPIError when it is absent."""
        body = self._request(method, path, **kwargs)
        if key not in body:
            raise JournalAPIError(f"{method} {path} response has no '{key}'")
        return body[key]

    # Auth

    def register(self, email: str, password: str, full_name: str) -> Dict[str, Any]:
        body = self._request(
            "POST",
            "/v1/auth/register",
            json={"email": email, "password": password, "fullName": full_name},
        )
        if "token" not in body or "user" not in body:
            raise JournalAPIError("POST /v1/auth/register response has no token")
        self.token = body["token"]
        return body["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        body = self._request("POST", "/v1/auth/login", json={"email": email, "password": password})
        if "token" not in body or "user" not in body:
            raise JournalAPIError("POST /v1/auth/login response has no token")
        self.token = body["token"]
        return body["user"]

    # Profile

    def save_profile(self, profile: Dict[str, str]) -> Dict[str, Any]:
        return self._member("POST", "/v1/profile", "profile", json=profile)

    def get_profile(self) -> Optional[Dict[str, Any]]:
        return self._member("GET", "/v1/profile", "profile")

    # Reflections

    def submit_reflection(self, answers: Dict[str, str]) -> Dict[str, Any]:
        """POST today's answers (camelCase keys); returns the stored reflection."""
        return self._member("POST", "/v1/reflections", "reflection", json=answers)

    def today(self) -> Dict[str, Any]:
        return self._request("GET", "/v1/reflections/today")

    def list_reflections(self, limit: int = 30, offset: int = 0) -> List[Dict[str, Any]]:
        return self._member(
            "GET", "/v1/reflections", "reflections", params={"limit": limit, "offset": offset}
        )

    def get_reflection(self, reflection_id: str) -> Dict[str, Any]:
        return self._member("GET", f"/v1/reflections/{reflection_id}", "reflection")

    # Analysis

    def latest_analysis(self) -> Optional[Dict[str, Any]]:
        return self._member("GET", "/v1/analysis/latest", "analysis")

    def list_analyses(self, limit: int = 30, offset: int = 0) -> List[Dict[str, Any]]:
        return self._member(
            "GET", "/v1/analysis/all", "analyses", params={"limit": limit, "offset": offset}
        )

    def analysis_for_reflection(self, reflection_id: str) -> Optional[Dict[str, Any]]:
        """The reflection's analysis, or None while it is still pending (404)."""
        try:
            return self._member("GET", f"/v1/analysis/{reflection_id}", "analysis")
        except JournalAPIError as e:
            if e.status_code == 404 and e.error_code == "ANALYSIS_NOT_FOUND":
                return None
            raise
