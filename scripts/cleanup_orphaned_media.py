"""
Remove media files that no gallery row references.

Usage (from project root):
    python -m scripts.cleanup_orphaned_media [--dry-run]

Rows whose file is missing on disk are listed but left alone; remove them
from the admin page if the file is permanently lost.
"""
import argparse
from pathlib import Path

from app.core.settings import settings
from app.jobs.cleanup_orphaned_media_job import sweep_orphaned_media
from app.services.media_storage import MediaDirectory
from app.services.store import BandStore
from db import Database


def main() -> int:
    parser = argparse.ArgumentParser(description="Delete orphaned gallery media files")
    parser.add_argument("--dry-run", action="store_true", help="Only report, delete nothing")
    args = parser.parse_args()

    with Database(settings.database_path()) as database:
        report = sweep_orphaned_media(
            BandStore(database), MediaDirectory(Path(settings.MEDIA_DIR)), dry_run=args.dry_run
        )

    if not report.orphaned:
        print("No orphaned files found")
    for name in report.orphaned:
        state = "deleted" if name in report.deleted else "kept"
        print(f"  orphan {name} ({state})")
    if report.missing:
        print(f"{len(report.missing)} gallery rows reference missing files:")
        for name in report.missing:
            print(f"  missing {name}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
