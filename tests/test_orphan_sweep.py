from app.jobs.cleanup_orphaned_media_job import sweep_orphaned_media


def _register(store, item_id, filename, thumbnail=None):
    store.add_gallery_item(
        {"id": item_id, "filename": filename, "title": item_id, "order": 1, "thumbnail": thumbnail}
    )


def test_sweep_deletes_unreferenced_files(db_store, media):
    (media.root / "photo-1-1.jpg").write_bytes(b"kept")
    (media.root / "thumbnail-1-2.jpg").write_bytes(b"kept thumb")
    (media.root / "photo-2-3.jpg").write_bytes(b"orphan")
    _register(db_store, "a", "photo-1-1.jpg", thumbnail="thumbnail-1-2.jpg")

    report = sweep_orphaned_media(db_store, media)

    assert report.orphaned == ["photo-2-3.jpg"]
    assert report.deleted == ["photo-2-3.jpg"]
    assert report.missing == []
    assert media.list_files() == ["photo-1-1.jpg", "thumbnail-1-2.jpg"]


def test_sweep_dry_run_keeps_files(db_store, media):
    (media.root / "stray.png").write_bytes(b"x")
    report = sweep_orphaned_media(db_store, media, dry_run=True)
    assert report.orphaned == ["stray.png"]
    assert report.deleted == []
    assert media.exists("stray.png")


def test_sweep_reports_rows_without_files(db_store, media):
    _register(db_store, "gone", "photo-9-9.jpg")
    report = sweep_orphaned_media(db_store, media)
    assert report.missing == ["photo-9-9.jpg"]
    # The row itself is left for the admin to remove
    assert db_store.get_gallery_item("gone") is not None
