"""
Wait for a background analysis to appear.

The analysis for a fresh reflection is written some seconds after the
submission response, by a worker the client cannot see. The poller checks
/v1/analysis/latest on a fixed budget:

    wait INITIAL_DELAY_S, then up to MAX_ATTEMPTS checks POLL_INTERVAL_S apart

and reports "ready" with the analysis, or "pending" when the budget runs out.
Running out is not an error: generation may have failed, in which case the
analysis never arrives. A failed check counts as an attempt.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from journal_client.api import JournalAPIError, JournalClient

logger = logging.getLogger(__name__)

INITIAL_DELAY_S = 2.0
POLL_INTERVAL_S = 3.0
MAX_ATTEMPTS = 10


@dataclass
class PollResult:
    status: str  # "ready" | "pending"
    analysis: Optional[Dict[str, Any]] = None
    attempts: int = 0

    @property
    def ready(self) -> bool:
        return self.status == "ready"


def poll_for_analysis(
    client: JournalClient,
    reflection_id: Optional[str] = None,
    initial_delay: float = INITIAL_DELAY_S,
    interval: float = POLL_INTERVAL_S,
    max_attempts: int = MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
) -> PollResult:
    """
    Poll for the latest analysis.

    With reflection_id set, an older analysis (e.g. yesterday's) is not
    accepted as the answer.
    """
    sleep(initial_delay)

    for attempt in range(1, max_attempts + 1):
        try:
            analysis = client.latest_analysis()
        except JournalAPIError as e:
            logger.warning(f"Analysis poll {attempt}/{max_attempts} failed: {e}")
            analysis = None

        if analysis is not None and (
            reflection_id is None or analysis.get("reflectionId") == str(reflection_id)
        ):
            return PollResult(status="ready", analysis=analysis, attempts=attempt)

        if attempt < max_attempts:
            sleep(interval)

    logger.info(f"Analysis still pending after {max_attempts} attempts")
    return PollResult(status="pending", attempts=max_attempts)
