"""
Back up the band database, plus JSON exports of tours and countdown.

Usage (from project root):
    python -m scripts.backup_db [--dir BACKUP_DIR]
"""
import argparse
import json
from datetime import datetime, timezone
from pathlib import Path

from app.core.settings import settings
from app.services.store import BandStore
from db import Database


def export_json(store: BandStore, backup_dir: Path) -> list[Path]:
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
    exports = {
        backup_dir / f"tours-backup-{stamp}.json": {"tours": store.list_tours()},
        backup_dir / f"countdown-backup-{stamp}.json": {"release": store.get_countdown()},
    }
    for path, payload in exports.items():
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return list(exports)


def main() -> int:
    parser = argparse.ArgumentParser(description="Back up the band database")
    parser.add_argument("--dir", default=settings.BACKUP_DIR, help="Backup directory")
    args = parser.parse_args()
    backup_dir = Path(args.dir)

    with Database(settings.database_path()) as database:
        store = BandStore(database)
        db_copy = store.backup(backup_dir)
        json_files = export_json(store, backup_dir)

    print(f"Backup created: {db_copy}")
    for path in json_files:
        print(f"JSON export: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
