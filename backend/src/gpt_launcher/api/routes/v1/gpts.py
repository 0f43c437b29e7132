from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...errors import as_http_exception
from ....core.config import settings
from ....core.database import get_session
from ....core.errors import LauncherError
from ....core.security import require_admin
from ....repositories.gpt_repository import GptRepository
from ....schemas.gpts import (
    DeleteResponse,
    GptListResponse,
    GptPayload,
    GptResponse,
    LaunchResponse,
    PromptResponse,
    SubmissionRequest,
)
from ....services.gpt_service import GptService
from ....services.launcher import HandoffClipboard, HandoffNavigator


router = APIRouter(prefix="/gpts")


def _service(session: Session) -> tuple[GptService, GptRepository]:
    repo = GptRepository(session)
    return GptService(repo), repo


@router.get("", response_model=GptListResponse)
def list_gpts(  # type: ignore[valid-type]
    order: Literal["asc", "desc"] | None = None,
    category: str | None = None,
    _admin: str = Depends(require_admin),
    session: Session = Depends(get_session),
) -> GptListResponse:
    service, _ = _service(session)
    try:
        items = service.list_gpts(order=order, category=category)
    except LauncherError as exc:
        raise as_http_exception(exc) from exc
    return GptListResponse(
        order=order or settings.admin_list_order,
        items=[GptResponse.from_model(item) for item in items],
    )


@router.get("/{gpt_id}", response_model=GptResponse)
def get_gpt(  # type: ignore[valid-type]
    gpt_id: int,
    _admin: str = Depends(require_admin),
    session: Session = Depends(get_session),
) -> GptResponse:
    service, _ = _service(session)
    try:
        gpt = service.get_gpt(gpt_id)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"GPT not found: {gpt_id}") from exc
    except LauncherError as exc:
        raise as_http_exception(exc) from exc
    return GptResponse.from_model(gpt)


@router.post("", response_model=GptResponse, status_code=status.HTTP_201_CREATED)
def create_gpt(  # type: ignore[valid-type]
    payload: GptPayload,
    _admin: str = Depends(require_admin),
    session: Session = Depends(get_session),
) -> GptResponse:
    service, repo = _service(session)
    try:
        gpt = service.save_gpt(payload.model_dump())
        repo.commit()
    except LauncherError as exc:
        raise as_http_exception(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return GptResponse.from_model(gpt)


@router.put("/{gpt_id}", response_model=GptResponse)
def update_gpt(  # type: ignore[valid-type]
    gpt_id: int,
    payload: GptPayload,
    _admin: str = Depends(require_admin),
    session: Session = Depends(get_session),
) -> GptResponse:
    service, repo = _service(session)
    try:
        gpt = service.save_gpt(payload.model_dump(), gpt_id=gpt_id)
        repo.commit()
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"GPT not found: {gpt_id}") from exc
    except LauncherError as exc:
        raise as_http_exception(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return GptResponse.from_model(gpt)


@router.delete("/{gpt_id}", response_model=DeleteResponse)
def delete_gpt(  # type: ignore[valid-type]
    gpt_id: int,
    _admin: str = Depends(require_admin),
    session: Session = Depends(get_session),
) -> DeleteResponse:
    service, repo = _service(session)
    try:
        deleted = service.delete_gpt(gpt_id)
        repo.commit()
    except LauncherError as exc:
        raise as_http_exception(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"GPT not found: {gpt_id}")
    return DeleteResponse(id=gpt_id, deleted=True, message="GPT deleted successfully.")


@router.post("/{gpt_id}/prompt", response_model=PromptResponse)
def build_prompt(  # type: ignore[valid-type]
    gpt_id: int,
    payload: SubmissionRequest,
    session: Session = Depends(get_session),
) -> PromptResponse:
    service, _ = _service(session)
    try:
        result = service.build_prompt(gpt_id, payload.values)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"GPT not found: {gpt_id}") from exc
    except LauncherError as exc:
        raise as_http_exception(exc) from exc
    return PromptResponse(gpt_id=result.gpt.id, url=result.gpt.url, prompt=result.prompt, values=result.values)


@router.post("/{gpt_id}/launch", response_model=LaunchResponse)
def launch_gpt(  # type: ignore[valid-type]
    gpt_id: int,
    payload: SubmissionRequest,
    session: Session = Depends(get_session),
) -> LaunchResponse:
    service, _ = _service(session)
    clipboard = HandoffClipboard(available=payload.clipboard_available)
    navigator = HandoffNavigator()
    try:
        outcome = service.launch(gpt_id, payload.values, clipboard=clipboard, navigator=navigator)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"GPT not found: {gpt_id}") from exc
    except LauncherError as exc:
        raise as_http_exception(exc) from exc
    return LaunchResponse.from_outcome(
        gpt_id,
        outcome,
        clipboard_text=clipboard.text,
        navigate_to=navigator.url,
    )
