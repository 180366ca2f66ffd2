import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from app.core.dependencies import get_settings, get_store
from app.core.errors import storage_errors
from app.core.settings import Settings
from app.core.templates import templates
from app.services.auth import require_admin, secrets_match
from app.services.store import BandStore

router = APIRouter()

audit = logging.getLogger("audit")


@router.get("/admin", response_class=HTMLResponse)
async def admin_page(
    request: Request,
    password: Optional[str] = None,
    settings: Settings = Depends(get_settings),
):
    # Query-string password: this page is an internal band tool, not a security boundary
    if not secrets_match(settings.ADMIN_PASSWORD, password):
        audit.warning(
            "admin.page.denied",
            extra={"client": request.client.host if request.client else None},
        )
        return templates.TemplateResponse(request, "access_denied.html", status_code=401)
    return templates.TemplateResponse(
        request,
        "admin.html",
        context={"max_upload_mb": settings.MAX_UPLOAD_BYTES // 1_000_000},
    )


@router.post("/api/backup", dependencies=[Depends(require_admin)])
def create_backup(
    store: BandStore = Depends(get_store), settings: Settings = Depends(get_settings)
):
    with storage_errors("Failed to create backup"):
        backup_path = store.backup(Path(settings.BACKUP_DIR))
    audit.info("store.backup.created", extra={"backup_path": str(backup_path)})
    return {"success": True, "backupPath": str(backup_path)}
