"""Cron entry point for draining the media deletion queue."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass

from src.media_gc.config import load_config
from src.media_gc.logging import configure_logging
from src.media_gc.services.container import build_services


@dataclass(slots=True)
class DrainSummary:
    status: str
    deleted: int
    kept: int
    failed: int
    dropped: int
    remaining: int


def perform_drain(*, run_now: bool, actor: str | None = None) -> DrainSummary:
    """Drain the queue once (or repeatedly with ``run_now``) and summarise."""
    services = build_services(load_config())
    processor = services.queue_processor
    # this run replaces the pending event; a drain that leaves work re-arms it
    services.scheduler.cancel()

    try:
        if run_now:
            stats = processor.run_now(actor=actor)
            status = "run-now"
        else:
            result = processor.process_queue()
            stats = result.stats
            status = result.status.value
    finally:
        processor.ensure_scheduled()

    return DrainSummary(
        status=status,
        deleted=stats.deleted,
        kept=stats.kept,
        failed=stats.failed,
        dropped=stats.dropped,
        remaining=services.queue.count(),
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Process queued media deletions.")
    parser.add_argument(
        "--run-now",
        action="store_true",
        help="Drain repeatedly within the configured run-now budget.",
    )
    parser.add_argument("--actor", default=None, help="Operator to store a summary notice for.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    configure_logging()
    try:
        summary = perform_drain(run_now=args.run_now, actor=args.actor)
    except Exception as exc:
        print(f"queue drain failed: {exc}", file=sys.stderr)
        return 2

    print(
        f"queue {summary.status}, deleted={summary.deleted}, kept={summary.kept}, "
        f"failed={summary.failed}, dropped={summary.dropped}, remaining={summary.remaining}",
        file=sys.stdout,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
