from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...errors import as_http_exception
from ....core.database import get_session
from ....core.errors import LauncherError
from ....repositories.gpt_repository import GptRepository
from ....schemas.gpts import ShowcaseCardResponse, ShowcaseResponse
from ....services.gpt_service import GptService


router = APIRouter(prefix="/showcase")


@router.get("", response_model=ShowcaseResponse)
def get_showcase(  # type: ignore[valid-type]
    category: str | None = None,
    session: Session = Depends(get_session),
) -> ShowcaseResponse:
    service = GptService(GptRepository(session))
    try:
        cards = service.showcase(category=category)
    except LauncherError as exc:
        raise as_http_exception(exc) from exc
    return ShowcaseResponse(items=[ShowcaseCardResponse.from_card(card) for card in cards])
