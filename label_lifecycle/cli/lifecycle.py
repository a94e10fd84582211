# label_lifecycle/cli/lifecycle.py
"""
CLI commands for the label lifecycle jobs.

Usage:
    python -m label_lifecycle.cli.lifecycle cleanup --dry-run
    python -m label_lifecycle.cli.lifecycle cleanup --confirm
    python -m label_lifecycle.cli.lifecycle classify-all --limit 50
    python -m label_lifecycle.cli.lifecycle seed-labels <organization-id>
"""

import argparse
import sys
import uuid

from dotenv import load_dotenv

load_dotenv()


def get_db_session():
    """Get a database session."""
    from label_lifecycle.database import SessionLocal

    return SessionLocal()


def _configure_logging(args):
    from label_lifecycle.config import get_settings
    from label_lifecycle.logging_config import configure_logging

    settings = get_settings()
    configure_logging(json_format=settings.LOG_JSON and not args.plain, level=settings.LOG_LEVEL)


def cmd_cleanup(args):
    """Delete videos whose expiration has passed."""
    from label_lifecycle.logging_config import log_job
    from label_lifecycle.services.retention import run_cleanup

    if not args.dry_run and not args.confirm:
        print("Error: Cleanup requires --confirm flag for non-dry-run operations")
        print("Use --dry-run to preview what would be deleted")
        sys.exit(1)

    db = get_db_session()
    try:
        print(f"\n{'DRY RUN - ' if args.dry_run else ''}Deleting expired videos...\n")

        with log_job("cleanup_expired_videos"):
            report = run_cleanup(db, budget_seconds=args.budget, dry_run=args.dry_run)

        for detail in report.details:
            line = f"  [{detail.status}] {detail.video_id} {detail.name!r} (expired {detail.expires_at})"
            if detail.error:
                line += f" - {detail.error}"
            print(line)

        print(f"\nDeleted: {report.deleted}")
        print(f"Errors: {report.errors}")
        if report.skipped_for_budget:
            print(f"Deferred (budget): {report.skipped_for_budget}")

        if report.related_records_deleted:
            print("\nRelated records deleted:")
            for table, count in report.related_records_deleted.items():
                print(f"  {table}: {count}")

        if report.errors:
            sys.exit(1)
    finally:
        db.close()


def cmd_classify_all(args):
    """Classify every video that has a transcript but no classification."""
    from label_lifecycle.logging_config import log_job
    from label_lifecycle.services.batch_classify import classify_all_videos

    db = get_db_session()
    try:
        print(f"\n{'DRY RUN - ' if args.dry_run else ''}Classifying unclassified videos...\n")

        with log_job("classify_all_videos"):
            report = classify_all_videos(
                db,
                dry_run=args.dry_run,
                limit=args.limit,
                budget_seconds=args.budget,
            )

        for detail in report.details:
            line = f"  [{detail.status}] {detail.video_id} {detail.name!r}"
            if detail.labels:
                line += f" -> {', '.join(detail.labels)}"
            if detail.reason:
                line += f" ({detail.reason})"
            print(line)

        print(f"\nProcessed: {report.processed}")
        print(f"Classified: {report.classified}")
        print(f"Skipped: {report.skipped}")
        print(f"Errors: {report.errors}")
        if report.skipped_for_budget:
            print(f"Deferred (budget): {report.skipped_for_budget}")
    finally:
        db.close()


def cmd_seed_labels(args):
    """Seed the system vocabulary for an organization."""
    from label_lifecycle.services.label_catalog import seed_system_labels

    try:
        organization_id = uuid.UUID(args.organization_id)
    except ValueError:
        print(f"Error: '{args.organization_id}' is not a valid organization id")
        sys.exit(1)

    db = get_db_session()
    try:
        inserted = seed_system_labels(db, organization_id)
        if inserted:
            print(f"Seeded {inserted} system labels for {organization_id}")
        else:
            print(f"System labels already present for {organization_id}")
    finally:
        db.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Video Label Lifecycle CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview which videos would be deleted
  python -m label_lifecycle.cli.lifecycle cleanup --dry-run

  # Delete expired videos
  python -m label_lifecycle.cli.lifecycle cleanup --confirm

  # Classify up to 50 unclassified videos
  python -m label_lifecycle.cli.lifecycle classify-all --limit 50

  # Seed system labels for an organization
  python -m label_lifecycle.cli.lifecycle seed-labels 6f1c...
        """,
    )
    parser.add_argument("--plain", action="store_true", help="Human-readable logs instead of JSON")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # cleanup command
    cleanup_parser = subparsers.add_parser("cleanup", help="Delete expired videos")
    cleanup_parser.add_argument("--dry-run", action="store_true", help="Preview only, don't delete")
    cleanup_parser.add_argument("--confirm", action="store_true", help="Confirm deletion")
    cleanup_parser.add_argument("--budget", type=float, default=None, help="Wall-clock budget in seconds")
    cleanup_parser.set_defaults(func=cmd_cleanup)

    # classify-all command
    classify_parser = subparsers.add_parser("classify-all", help="Classify unclassified videos")
    classify_parser.add_argument("--dry-run", action="store_true", help="List candidates, no writes")
    classify_parser.add_argument("--limit", type=int, default=None, help="Max videos to process")
    classify_parser.add_argument("--budget", type=float, default=None, help="Wall-clock budget in seconds")
    classify_parser.set_defaults(func=cmd_classify_all)

    # seed-labels command
    seed_parser = subparsers.add_parser("seed-labels", help="Seed system labels for an organization")
    seed_parser.add_argument("organization_id", help="Organization UUID")
    seed_parser.set_defaults(func=cmd_seed_labels)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    _configure_logging(args)
    args.func(args)


if __name__ == "__main__":
    main()
