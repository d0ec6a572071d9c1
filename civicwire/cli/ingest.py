# civicwire/cli/ingest.py
"""
CLI commands for ingestion.

Usage:
    python -m civicwire.cli.ingest run
    python -m civicwire.cli.ingest run --provider deepseek --actor alice
    python -m civicwire.cli.ingest runs --limit 10
    python -m civicwire.cli.ingest sources
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()


def get_db_session():
    """Get a database session."""
    from civicwire.database import SessionLocal

    return SessionLocal()


def cmd_run(args):
    """Run one ingestion as a manual trigger."""
    from civicwire.config import get_settings
    from civicwire.llm import get_story_analyzer
    from civicwire.logging_config import configure_logging
    from civicwire.models import IngestTrigger
    from civicwire.services.ingest_orchestrator import IngestOrchestrator
    from civicwire.services.run_ledger import IngestRunInProgressError

    settings = get_settings()
    configure_logging(json_format=settings.LOG_JSON, level=settings.LOG_LEVEL)

    analyzer = get_story_analyzer(args.provider, settings) if args.provider else None

    db = get_db_session()
    try:
        orchestrator = IngestOrchestrator(db, settings=settings, analyzer=analyzer)
        try:
            result = orchestrator.run(IngestTrigger.MANUAL, actor_id=args.actor)
        except IngestRunInProgressError as e:
            print(f"Error: {e}")
            sys.exit(2)

        print(f"\n=== Ingest Run {result.run_id} ===\n")
        print(f"Status: {result.status.value}")
        print(f"Provider: {result.provider}")
        print(f"Processed: {result.processed}")
        print(f"Created: {result.created}")
        print(f"Skipped: {result.skipped}")
        print(f"Pruned: {result.pruned}")

        if result.source_errors:
            print("\nSource errors:")
            for failure in result.source_errors:
                print(f"  - {failure.source}: {failure.error}")

        if result.error:
            print(f"\nError: {result.error}")

        if not result.ok:
            sys.exit(1)
    finally:
        db.close()


def cmd_runs(args):
    """Show recent ingest runs."""
    from civicwire.services.run_ledger import RunLedger

    db = get_db_session()
    try:
        runs = RunLedger(db).list_runs(args.limit)

        print("\n=== Ingest Runs ===\n")
        if not runs:
            print("No runs recorded.")
        for run in runs:
            finished = run.finished_at.isoformat() if run.finished_at else "-"
            print(f"{run.id} [{run.status}] {run.triggered_by} via {run.provider}")
            print(f"  Started: {run.started_at.isoformat()}  Finished: {finished}")
            print(
                f"  Processed: {run.processed}  Created: {run.created}  "
                f"Skipped: {run.skipped}  Pruned: {run.pruned}"
            )
            if run.error_message:
                print(f"  Error: {run.error_message}")
        print()
    finally:
        db.close()


def cmd_sources(args):
    """List configured RSS sources."""
    from civicwire.news_sources import RSS_SOURCES

    print("\n=== RSS Sources ===\n")
    for source in RSS_SOURCES:
        print(f"{source.id} [{source.bias_label.value}] {source.topic}")
        print(f"  {source.feed_url}")
    print()


def main():
    parser = argparse.ArgumentParser(
        description="CivicWire Ingestion CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the daily ingest now
  python -m civicwire.cli.ingest run

  # Run with a different analysis provider
  python -m civicwire.cli.ingest run --provider deepseek

  # Show the last 5 runs
  python -m civicwire.cli.ingest runs --limit 5
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # run command
    run_parser = subparsers.add_parser("run", help="Run one ingestion")
    run_parser.add_argument("--provider", choices=["gemini", "deepseek"], help="Override LLM_PROVIDER")
    run_parser.add_argument("--actor", default="cli", help="Actor recorded on the run")
    run_parser.set_defaults(func=cmd_run)

    # runs command
    runs_parser = subparsers.add_parser("runs", help="Show recent ingest runs")
    runs_parser.add_argument("--limit", type=int, default=20, help="Runs to show")
    runs_parser.set_defaults(func=cmd_runs)

    # sources command
    sources_parser = subparsers.add_parser("sources", help="List RSS sources")
    sources_parser.set_defaults(func=cmd_sources)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
