"""
HTTP client for the classboard API.

Wraps every endpoint the student and teacher views use. Non-2xx responses
raise ApiError carrying the server's user-displayable message. The
underlying httpx.Client can be injected (tests pass FastAPI's TestClient,
which is an httpx.Client).
"""

from typing import Optional

import httpx

from classboard.config import API_URL

TOKEN_HEADER = "X-Teacher-Token"


class ApiError(Exception):
    """An API call failed with an HTTP error status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class ClassroomApiClient:
    """Thin synchronous client; one method per API operation."""

    def __init__(self, base_url: Optional[str] = None, timeout: float = 10.0,
                 http: Optional[httpx.Client] = None):
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url or API_URL, timeout=timeout)

    def close(self):
        if self._owns_http:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, method: str, path: str, json: Optional[dict] = None, token: Optional[str] = None):
        headers = {TOKEN_HEADER: token} if token else None
        response = self.http.request(method, path, json=json, headers=headers)
        return _handle_response(response)

    # ── Public / student ──────────────────────────────────────

    def get_classroom(self, classroom_id: str) -> dict:
        return self._request("GET", f"/api/classrooms/{classroom_id}")

    def join_classroom(self, classroom_id: str, access_code: str) -> dict:
        return self._request("POST", f"/api/classrooms/{classroom_id}/join",
                             json={"access_code": access_code})

    def set_student_name(self, classroom_id: str, access_code: str, name: str) -> dict:
        return self._request("POST", f"/api/classrooms/{classroom_id}/students/name",
                             json={"access_code": access_code, "name": name})

    # ── Teacher authentication ────────────────────────────────

    def create_classroom(self, password: str, name: str, secret_question: str,
                         secret_answer: str) -> dict:
        return self._request("POST", "/api/classrooms", json={
            "password": password,
            "name": name,
            "secret_question": secret_question,
            "secret_answer": secret_answer,
        })

    def login_teacher(self, classroom_id: str, password: str) -> dict:
        return self._request("POST", f"/api/classrooms/{classroom_id}/login",
                             json={"password": password})

    def get_secret_question(self, classroom_id: str) -> str:
        data = self._request("GET", f"/api/classrooms/{classroom_id}/secret-question")
        return data["secret_question"]

    def reset_password(self, classroom_id: str, secret_answer: str, new_password: str) -> dict:
        return self._request("POST", f"/api/classrooms/{classroom_id}/reset-password",
                             json={"secret_answer": secret_answer, "new_password": new_password})

    # ── Protected teacher actions ─────────────────────────────

    def add_student(self, classroom_id: str, token: str) -> dict:
        return self._request("POST", f"/api/classrooms/{classroom_id}/students", token=token)

    def update_score(self, classroom_id: str, student_id: str, score: int, token: str) -> dict:
        return self._request("PUT", f"/api/classrooms/{classroom_id}/students/{student_id}/score",
                             json={"score": score}, token=token)

    def remove_student(self, classroom_id: str, student_id: str, token: str) -> dict:
        return self._request("DELETE", f"/api/classrooms/{classroom_id}/students/{student_id}",
                             token=token)

    def reset_scores(self, classroom_id: str, token: str) -> dict:
        return self._request("POST", f"/api/classrooms/{classroom_id}/reset-scores", token=token)

    def update_announcement(self, classroom_id: str, announcement: Optional[str], token: str) -> dict:
        return self._request("PUT", f"/api/classrooms/{classroom_id}/announcement",
                             json={"announcement": announcement}, token=token)

    def delete_classroom(self, classroom_id: str, token: str) -> dict:
        return self._request("DELETE", f"/api/classrooms/{classroom_id}", token=token)

    def get_stats(self, classroom_id: str) -> dict:
        return self._request("GET", f"/api/classrooms/{classroom_id}/stats")


def _handle_response(response: httpx.Response):
    """
    Return the JSON object body, or raise ApiError.

    Error statuses carry the server's message. A success status whose body
    is not a JSON object (a proxy's HTML page, say) is an error too.
    """
    try:
        data = response.json()
    except ValueError:
        data = None
    if response.is_error:
        message = None
        if isinstance(data, dict) and isinstance(data.get("detail"), str):
            message = data["detail"]
        raise ApiError(response.status_code, message or f"HTTP error! status: {response.status_code}")
    if not isinstance(data, dict):
        raise ApiError(response.status_code, "Unexpected response from server.")
    return data
