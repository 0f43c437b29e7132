from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from ...errors import as_http_exception
from ....core.config import settings, resolve_project_path
from ....core.database import get_session
from ....core.errors import LauncherError
from ....core.security import require_admin
from ....repositories.catalog_repository import CatalogRepository, dumps_catalog, loads_catalog
from ....repositories.gpt_repository import GptRepository
from ....schemas.gpts import (
    CatalogImportRequest,
    CatalogImportResponse,
    CatalogSnapshotResponse,
    GptResponse,
)
from ....services.gpt_service import GptService


router = APIRouter(prefix="/catalog")


@router.get("/export", response_class=PlainTextResponse)
def export_catalog(  # type: ignore[valid-type]
    _admin: str = Depends(require_admin),
    session: Session = Depends(get_session),
) -> PlainTextResponse:
    service = GptService(GptRepository(session))
    try:
        gpts = service.export_catalog()
    except LauncherError as exc:
        raise as_http_exception(exc) from exc
    return PlainTextResponse(dumps_catalog(gpts), media_type="application/yaml")


@router.post("/import", response_model=CatalogImportResponse)
def import_catalog(  # type: ignore[valid-type]
    payload: CatalogImportRequest,
    _admin: str = Depends(require_admin),
    session: Session = Depends(get_session),
) -> CatalogImportResponse:
    repo = GptRepository(session)
    service = GptService(repo)
    try:
        document = loads_catalog(payload.content)
        created = service.import_catalog(document, replace=payload.replace)
        repo.commit()
    except LauncherError as exc:
        raise as_http_exception(exc) from exc
    except ValueError as exc:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return CatalogImportResponse(
        imported=len(created),
        replaced=payload.replace,
        items=[GptResponse.from_model(item) for item in created],
    )


@router.post("/snapshot", response_model=CatalogSnapshotResponse)
def snapshot_catalog(  # type: ignore[valid-type]
    _admin: str = Depends(require_admin),
    session: Session = Depends(get_session),
) -> CatalogSnapshotResponse:
    """Write the current catalog to ``GPT_SEED_PATH``."""
    if not settings.gpt_seed_path:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="GPT_SEED_PATH is not configured.")
    catalog = CatalogRepository(Path(resolve_project_path(settings.gpt_seed_path)))
    service = GptService(GptRepository(session))
    try:
        count = catalog.save(service.export_catalog())
    except LauncherError as exc:
        raise as_http_exception(exc) from exc
    except OSError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return CatalogSnapshotResponse(path=str(catalog.path), count=count)
