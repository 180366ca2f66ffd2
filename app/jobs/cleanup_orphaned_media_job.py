import logging
from dataclasses import dataclass, field
from typing import List

from app.services.media_storage import MediaDirectory
from app.services.store import BandStore

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    orphaned: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    # Registered in the database but absent on disk
    missing: List[str] = field(default_factory=list)


def sweep_orphaned_media(
    store: BandStore, media: MediaDirectory, dry_run: bool = False
) -> SweepReport:
    """Reconcile the media directory with the gallery table.

    Files no row references are deleted (unless ``dry_run``); rows whose file
    is gone are only reported.
    """
    registered = store.registered_media_filenames()
    on_disk = set(media.list_files())
    report = SweepReport(
        orphaned=sorted(on_disk - registered),
        missing=sorted(registered - on_disk),
    )
    if not dry_run:
        report.deleted = [name for name in report.orphaned if media.remove(name)]
    logger.info(
        "media.sweep",
        extra={
            "orphaned": len(report.orphaned),
            "deleted": len(report.deleted),
            "missing": len(report.missing),
            "dry_run": dry_run,
        },
    )
    return report
