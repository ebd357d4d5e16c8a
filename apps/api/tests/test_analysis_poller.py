"""
Analysis Poller Tests

No network and no real sleeping: the client is a MagicMock and sleep is a
recorder.
"""
from unittest.mock import MagicMock

import pytest
import requests

from journal_client import (
    INITIAL_DELAY_S,
    MAX_ATTEMPTS,
    POLL_INTERVAL_S,
    JournalAPIError,
    JournalClient,
    poll_for_analysis,
)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append


def _analysis(reflection_id="r-1"):
    return {"id": "a-1", "reflectionId": reflection_id, "analysisText": "..."}


class TestPollForAnalysis:
    def test_defaults(self):
        assert (INITIAL_DELAY_S, POLL_INTERVAL_S, MAX_ATTEMPTS) == (2.0, 3.0, 10)

    def test_ready_on_first_attempt(self, sleeps, fake_sleep):
        client = MagicMock()
        client.latest_analysis.return_value = _analysis()

        result = poll_for_analysis(client, sleep=fake_sleep)

        assert result.status == "ready"
        assert result.ready
        assert result.attempts == 1
        assert result.analysis["id"] == "a-1"
        assert sleeps == [INITIAL_DELAY_S]

    def test_ready_after_some_pending_polls(self, sleeps, fake_sleep):
        client = MagicMock()
        client.latest_analysis.side_effect = [None, None, _analysis()]

        result = poll_for_analysis(client, sleep=fake_sleep)

        assert result.status == "ready"
        assert result.attempts == 3
        assert sleeps == [INITIAL_DELAY_S, POLL_INTERVAL_S, POLL_INTERVAL_S]

    def test_never_ready_stops_after_budget(self, sleeps, fake_sleep):
        client = MagicMock()
        client.latest_analysis.return_value = None

        result = poll_for_analysis(client, sleep=fake_sleep)

        assert result.status == "pending"
        assert result.analysis is None
        assert result.attempts == MAX_ATTEMPTS
        assert client.latest_analysis.call_count == MAX_ATTEMPTS
        assert sleeps == [INITIAL_DELAY_S] + [POLL_INTERVAL_S] * (MAX_ATTEMPTS - 1)

    def test_errors_count_as_attempts(self, fake_sleep):
        client = MagicMock()
        client.latest_analysis.side_effect = [
            JournalAPIError("boom", status_code=502),
            JournalAPIError("boom"),
            _analysis(),
        ]

        result = poll_for_analysis(client, sleep=fake_sleep)

        assert result.status == "ready"
        assert result.attempts == 3

    def test_errors_only_end_pending_without_raising(self, fake_sleep):
        client = MagicMock()
        client.latest_analysis.side_effect = JournalAPIError("down")

        result = poll_for_analysis(client, max_attempts=4, sleep=fake_sleep)

        assert result.status == "pending"
        assert client.latest_analysis.call_count == 4

    def test_stale_analysis_ignored_when_reflection_given(self, fake_sleep):
        client = MagicMock()
        client.latest_analysis.side_effect = [
            _analysis("yesterday"),
            _analysis("yesterday"),
            _analysis("today"),
        ]

        result = poll_for_analysis(client, reflection_id="today", sleep=fake_sleep)

        assert result.status == "ready"
        assert result.analysis["reflectionId"] == "today"
        assert result.attempts == 3


class TestJournalClient:
    def _client(self, status_code=200, body=None, exc=None):
        session = MagicMock()
        if exc is not None:
            session.request.side_effect = exc
        else:
            response = MagicMock()
            response.status_code = status_code
            response.ok = 200 <= status_code < 300
            response.json.return_value = body or {}
            response.text = "text body"
            session.request.return_value = response
        return JournalClient("http://api.test/", token="tok", session=session), session

    def test_latest_analysis_sends_bearer_token(self):
        client, session = self._client(body={"analysis": None})

        assert client.latest_analysis() is None

        args, kwargs = session.request.call_args
        assert args == ("GET", "http://api.test/v1/analysis/latest")
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_login_stores_token(self):
        client, _ = self._client(body={"token": "new-token", "user": {"id": "u-1"}})
        user = client.login("a@example.com", "pw")
        assert user == {"id": "u-1"}
        assert client.token == "new-token"

    def test_http_error_raises_with_detail(self):
        client, _ = self._client(
            status_code=409,
            body={"detail": "You have already submitted a reflection for today", "error_code": "CONFLICT"},
        )
        with pytest.raises(JournalAPIError) as exc_info:
            client.submit_reflection({"daySummary": "x"})
        assert exc_info.value.status_code == 409
        assert exc_info.value.error_code == "CONFLICT"

    def test_transport_error_raises(self):
        client, _ = self._client(exc=requests.exceptions.ConnectionError("refused"))
        with pytest.raises(JournalAPIError) as exc_info:
            client.today()
        assert exc_info.value.status_code is None

    def test_non_json_success_body_raises(self):
        client, session = self._client()
        session.request.return_value.json.side_effect = requests.exceptions.JSONDecodeError(
            "Expecting value", "<html>", 0
        )
        with pytest.raises(JournalAPIError) as exc_info:
            client.latest_analysis()
        assert exc_info.value.status_code == 200

    def test_non_object_success_body_raises(self):
        client, session = self._client()
        session.request.return_value.json.return_value = ["not", "an", "object"]
        with pytest.raises(JournalAPIError):
            client.latest_analysis()

    def test_missing_member_raises(self):
        client, _ = self._client(body={"status": "ok"})
        with pytest.raises(JournalAPIError, match="analysis"):
            client.latest_analysis()

    def test_get_reflection(self):
        client, session = self._client(body={"reflection": {"id": "r-1"}})
        assert client.get_reflection("r-1") == {"id": "r-1"}
        assert session.request.call_args[0] == ("GET", "http://api.test/v1/reflections/r-1")

    def test_analysis_for_reflection(self):
        client, session = self._client(body={"analysis": _analysis("r-1")})
        assert client.analysis_for_reflection("r-1")["reflectionId"] == "r-1"
        assert session.request.call_args[0] == ("GET", "http://api.test/v1/analysis/r-1")

    def test_analysis_for_reflection_pending_is_none(self):
        client, _ = self._client(
            status_code=404,
            body={"detail": "Analysis not found", "error_code": "ANALYSIS_NOT_FOUND"},
        )
        assert client.analysis_for_reflection("r-1") is None

    def test_analysis_for_unknown_reflection_raises(self):
        client, _ = self._client(
            status_code=404,
            body={"detail": "Reflection not found", "error_code": "REFLECTION_NOT_FOUND"},
        )
        with pytest.raises(JournalAPIError) as exc_info:
            client.analysis_for_reflection("missing")
        assert exc_info.value.error_code == "REFLECTION_NOT_FOUND"


class TestPollOverMalformedResponses:
    def _response(self, body=None, json_error=None):
        response = MagicMock()
        response.status_code = 200
        response.ok = True
        response.text = "<html>portal</html>"
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = body
        return response

    def test_bad_bodies_end_pending(self, fake_sleep):
        session = MagicMock()
        session.request.side_effect = [
            self._response(json_error=requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)),
            self._response(body={"status": "ok"}),
            self._response(json_error=ValueError("no json")),
        ]
        client = JournalClient("http://api.test", token="tok", session=session)

        result = poll_for_analysis(client, max_attempts=3, sleep=fake_sleep)

        assert result.status == "pending"
        assert result.attempts == 3

    def test_recovers_after_bad_body(self, fake_sleep):
        session = MagicMock()
        session.request.side_effect = [
            self._response(body={"status": "ok"}),
            self._response(body={"analysis": _analysis()}),
        ]
        client = JournalClient("http://api.test", token="tok", session=session)

        result = poll_for_analysis(client, max_attempts=3, sleep=fake_sleep)

        assert result.status == "ready"
        assert result.attempts == 2
