#!/usr/bin/env python3
"""
Submit today's reflection from a JSON file and wait for the analysis.

The file holds the seven answers with the API's camelCase keys:

    {"daySummary": "...", "socialMediaTime": "...", "truthfulnessKindness": "...",
     "consciousActions": "...", "overthinkingStress": "...",
     "gratitudeExpression": "...", "proudMoment": "..."}

Usage:
    python scripts/submit_reflection.py answers.json --email me@example.com
    python scripts/submit_reflection.py --wait-only --email me@example.com
"""
import json
import logging
import os
import sys

# Allow running from apps/api
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from journal_client import JournalAPIError, JournalClient, poll_for_analysis  # noqa: E402

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def _print_analysis(analysis: dict) -> None:
    print(f"\nAnalysis for {analysis.get('reflectionDate', analysis['reflectionId'])}\n")
    print(analysis["analysisText"])
    print("\nRecommendations:\n")
    print(analysis["recommendations"])
    print(f"\n{analysis['motivationalMessage']}")


def main() -> int:
    import argparse

    parser = argparse.ArgumentParser()
    parser.add_argument("answers", nargs="?", help="JSON file with the seven answers")
    parser.add_argument("--api", default=os.getenv("JOURNAL_API_BASE", "http://localhost:8000"), help="API base URL (default: JOURNAL_API_BASE)")
    parser.add_argument("--email", default=os.getenv("JOURNAL_EMAIL"), help="account email (default: JOURNAL_EMAIL)")
    parser.add_argument("--password", default=os.getenv("JOURNAL_PASSWORD"), help="account password (default: JOURNAL_PASSWORD)")
    parser.add_argument("--wait-only", action="store_true", help="Skip submission, only wait for today's analysis")
    args = parser.parse_args()

    if not args.email or not args.password:
        parser.error("--email and --password are required (or JOURNAL_EMAIL / JOURNAL_PASSWORD)")
    if not args.wait_only and not args.answers:
        parser.error("answers file is required unless --wait-only is set")

    client = JournalClient(args.api)
    try:
        client.login(args.email, args.password)

        if args.wait_only:
            reflection_id = client.today().get("reflectionId")
            if reflection_id is None:
                logger.error("No reflection submitted today")
                return 1
        else:
            with open(args.answers, encoding="utf-8") as f:
                answers = json.load(f)
            reflection = client.submit_reflection(answers)
            reflection_id = reflection["id"]
            logger.info(f"Reflection {reflection_id} submitted for {reflection['reflectionDate']}")
    except JournalAPIError as e:
        logger.error(str(e))
        return 1

    logger.info("Waiting for analysis...")
    result = poll_for_analysis(client, reflection_id=reflection_id)
    if not result.ready:
        logger.warning("Analysis is still being generated; check back later")
        return 2

    _print_analysis(result.analysis)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
