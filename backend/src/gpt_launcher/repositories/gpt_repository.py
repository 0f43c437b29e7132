from __future__ import annotations

import logging
from typing import Any, Literal

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import PersistenceFailure
from ..core.prompts import FieldDef, GptDefinition, GptDraft, normalize_fields
from ..models.gpt import CustomGpt


log = logging.getLogger("launcher.repositories.gpt")


ListOrder = Literal["asc", "desc"]


class GptRepository:
    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _fields_payload(fields: tuple[FieldDef, ...]) -> list[dict[str, Any]]:
        return [item.to_dict() for item in fields]

    @staticmethod
    def _to_definition(row: CustomGpt) -> GptDefinition:
        raw_fields = row.prompt_fields if isinstance(row.prompt_fields, list) else []
        return GptDefinition(
            id=row.id,
            name=row.name,
            url=row.gpt_url,
            description=row.description or "",
            prompt_template=row.prompt_template or "",
            fields=tuple(normalize_fields(raw_fields)),
            icon_url=row.icon_url or "",
            category=row.category,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _apply(self, row: CustomGpt, draft: GptDraft) -> None:
        row.name = draft.name
        row.gpt_url = draft.url
        row.description = draft.description
        row.prompt_template = draft.prompt_template
        row.prompt_fields = self._fields_payload(draft.fields)
        row.icon_url = draft.icon_url
        row.category = draft.category

    # --- Reads ---------------------------------------------------------
    def list_gpts(self, *, order: ListOrder = "desc", category: str | None = None) -> list[GptDefinition]:
        id_order = CustomGpt.id.asc() if order == "asc" else CustomGpt.id.desc()
        stmt = select(CustomGpt)
        if category:
            stmt = stmt.where(func.lower(CustomGpt.category) == category.strip().lower())
        try:
            rows = self.session.scalars(stmt.order_by(id_order)).all()
        except SQLAlchemyError as exc:
            log.exception("Failed to list GPTs")
            raise PersistenceFailure(f"Could not load GPTs: {exc}") from exc
        log.debug("Loaded %d GPTs (order=%s, category=%s)", len(rows), order, category)
        return [self._to_definition(row) for row in rows]

    def get(self, gpt_id: int) -> GptDefinition | None:
        try:
            row = self.session.get(CustomGpt, gpt_id)
        except SQLAlchemyError as exc:
            log.exception("Failed to load GPT %s", gpt_id)
            raise PersistenceFailure(f"Could not load GPT {gpt_id}: {exc}") from exc
        return self._to_definition(row) if row is not None else None

    # --- Writes --------------------------------------------------------
    def create(self, draft: GptDraft) -> GptDefinition:
        row = CustomGpt()
        self._apply(row, draft)
        try:
            self.session.add(row)
            self.session.flush()
            self.session.refresh(row)
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.exception("Failed to create GPT %r", draft.name)
            raise PersistenceFailure(f"Database error. Could not save GPT: {exc}") from exc
        log.info("GPT created (id=%s, name=%s, fields=%d)", row.id, row.name, len(draft.fields))
        return self._to_definition(row)

    def update(self, gpt_id: int, draft: GptDraft) -> GptDefinition:
        """Replace every attribute of ``gpt_id``, fields included."""
        try:
            row = self.session.get(CustomGpt, gpt_id)
            if row is None:
                raise KeyError(f"GPT not found: {gpt_id}")
            self._apply(row, draft)
            self.session.flush()
            self.session.refresh(row)
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.exception("Failed to update GPT %s", gpt_id)
            raise PersistenceFailure(f"Database error. Could not save GPT: {exc}") from exc
        log.info("GPT updated (id=%s, name=%s, fields=%d)", row.id, row.name, len(draft.fields))
        return self._to_definition(row)

    def delete(self, gpt_id: int) -> bool:
        try:
            row = self.session.get(CustomGpt, gpt_id)
            if row is None:
                return False
            self.session.delete(row)
            self.session.flush()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.exception("Failed to delete GPT %s", gpt_id)
            raise PersistenceFailure(f"Database error. Could not delete GPT: {exc}") from exc
        log.info("GPT deleted (id=%s)", gpt_id)
        return True

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.exception("Commit failed")
            raise PersistenceFailure(f"Database error. Could not commit changes: {exc}") from exc
