"""
HTTP client for the journal API.

    client = JournalClient("http://localhost:8000")
    client.login("me@example.com", "secret")
    reflection = client.submit_reflection(answers)
    result = poll_for_analysis(client, reflection_id=reflection["id"])
"""
from journal_client.api import JournalAPIError, JournalClient
from journal_client.poller import (
    INITIAL_DELAY_S,
    MAX_ATTEMPTS,
    POLL_INTERVAL_S,
    PollResult,
    poll_for_analysis,
)

__all__ = [
    "JournalAPIError",
    "JournalClient",
    "INITIAL_DELAY_S",
    "MAX_ATTEMPTS",
    "POLL_INTERVAL_S",
    "PollResult",
    "poll_for_analysis",
]
