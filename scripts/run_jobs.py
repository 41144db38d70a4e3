#!/usr/bin/env python3
"""
Manual Trigger Script for the follow-up jobs

Runs one reminder sweep or one ingestion run in the foreground and prints
the summary. Useful for debugging selectors or checking Telegram delivery.

Usage:
    # Send every reminder that is due right now
    python scripts/run_jobs.py reminders

    # Sync Monday.com boards only
    python scripts/run_jobs.py sync --source monday_com

    # Sync every source
    python scripts/run_jobs.py sync

    # Show what the next sweep would send without sending
    python scripts/run_jobs.py due
"""

import sys
import os
import argparse
import json

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from config import settings
from connectors.registry import SOURCES
from jobs.runner import run_reminder_sweep, run_ingestion, build_repository
from models.follow_up import utc_now
import logging

# Set up logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def print_result(result: dict):
    print(f"\n{'='*60}")
    print("Result")
    print(f"{'='*60}")
    print(json.dumps(result, indent=2, default=str))


def run_reminders():
    print(f"\n{'='*60}")
    print("Running reminder sweep")
    print(f"{'='*60}\n")

    result = run_reminder_sweep()
    print_result(result.model_dump(mode="json"))
    return result


def run_sync(sources: list = None):
    label = ", ".join(sources) if sources else "all sources"
    print(f"\n{'='*60}")
    print(f"Running ingestion ({label})")
    print(f"{'='*60}\n")

    result = run_ingestion(sources)
    summary = result.model_dump(mode="json", exclude={"follow_ups"})
    print_result(summary)
    return result


def show_due():
    repository = build_repository()
    due = repository.due_for_reminder(utc_now())

    print(f"\n{len(due)} follow-ups due:\n")
    for follow_up in due:
        print(f"  [{follow_up.priority.value:<6}] {follow_up.title} (due {follow_up.due_date:%Y-%m-%d %H:%M}, "
              f"reminded {follow_up.reminders_sent}x)")
    return due


def main():
    parser = argparse.ArgumentParser(description="Run follow-up jobs manually")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("reminders", help="Run one reminder sweep")

    sync_parser = subparsers.add_parser("sync", help="Run one ingestion")
    sync_parser.add_argument(
        "--source",
        action="append",
        choices=list(SOURCES),
        help="Source to sync (repeatable, default: all)",
    )

    subparsers.add_parser("due", help="List follow-ups due for reminder")

    args = parser.parse_args()

    try:
        if args.command == "reminders":
            run_reminders()
        elif args.command == "sync":
            run_sync(args.source)
        elif args.command == "due":
            show_due()
    except Exception as e:
        logger.error(f"Job failed: {e}", exc_info=True)
        print(f"\n❌ Job failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
