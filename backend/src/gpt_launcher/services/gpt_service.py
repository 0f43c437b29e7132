from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Mapping, Protocol

from ..core.config import settings
from ..core.prompts import (
    FieldDef,
    GptDefinition,
    GptDraft,
    UnmatchedTokenPolicy,
    decode_submission,
    normalize_fields,
    parse_flag,
    render,
    validate_submission,
)
from ..core.sanitize import sanitize_text, sanitize_textarea, sanitize_url, sanitize_value
from ..repositories.catalog_repository import CatalogDocument, CatalogRepository
from ..repositories.gpt_repository import ListOrder
from .launcher import Clipboard, LaunchOutcome, Navigator, launch
from .showcase import ShowcaseCard, build_showcase


log = logging.getLogger("launcher.services.gpt")


class GptStore(Protocol):
    def list_gpts(self, *, order: ListOrder = "desc", category: str | None = None) -> list[GptDefinition]: ...

    def get(self, gpt_id: int) -> GptDefinition | None: ...

    def create(self, draft: GptDraft) -> GptDefinition: ...

    def update(self, gpt_id: int, draft: GptDraft) -> GptDefinition: ...

    def delete(self, gpt_id: int) -> bool: ...


@dataclass(frozen=True)
class PromptResult:
    gpt: GptDefinition
    prompt: str
    values: dict[str, str]


def _clean_field(item: FieldDef | Mapping[str, Any]) -> dict[str, Any] | None:
    raw = item.to_dict() if isinstance(item, FieldDef) else item
    if not isinstance(raw, Mapping):
        return None
    cleaned: dict[str, Any] = {
        "label": sanitize_text(raw.get("label")),
        "type": sanitize_text(raw.get("type")),
        "options": sanitize_text(raw.get("options")),
        "required": parse_flag(raw.get("required", False)),
    }
    if raw.get("key") is not None:
        cleaned["key"] = sanitize_text(raw.get("key"))
    return cleaned


def clean_draft(data: Mapping[str, Any], *, max_fields: int | None = None) -> GptDraft:
    """Sanitize an administrator payload into a storable ``GptDraft``.

    Raises ``ValueError`` when the name or the URL is missing or invalid,
    when the fields are not a list, or when they exceed ``max_fields``.
    """
    name = sanitize_text(data.get("name"))
    url = sanitize_url(data.get("url") or data.get("gpt_url"))
    if not name or not url:
        raise ValueError("Name and GPT URL are required.")
    raw_fields = data.get("fields")
    if raw_fields is None:
        raw_fields = data.get("prompt_fields")
    if raw_fields is None:
        raw_fields = []
    if not isinstance(raw_fields, (list, tuple)):
        raise ValueError("Fields must be a list.")
    cleaned_fields = [entry for entry in (_clean_field(item) for item in raw_fields) if entry is not None]
    fields = normalize_fields(cleaned_fields)
    limit = max_fields if max_fields is not None else settings.max_fields_per_gpt
    if len(fields) > limit:
        raise ValueError(f"A GPT may define at most {limit} fields (got {len(fields)}).")
    category = sanitize_text(data.get("category"))
    return GptDraft(
        name=name,
        url=url,
        description=sanitize_textarea(data.get("description")),
        prompt_template=sanitize_value(data.get("prompt_template")),
        fields=tuple(fields),
        icon_url=sanitize_url(data.get("icon_url")),
        category=category or None,
    )


class GptService:
    def __init__(
        self,
        store: GptStore,
        *,
        first_field_required: bool | None = None,
        token_policy: UnmatchedTokenPolicy | str | None = None,
        max_fields: int | None = None,
    ):
        self.store = store
        self.first_field_required = (
            settings.first_field_required if first_field_required is None else first_field_required
        )
        self.token_policy = UnmatchedTokenPolicy(token_policy or settings.unmatched_token_policy)
        self.max_fields = max_fields if max_fields is not None else settings.max_fields_per_gpt

    # --- Administration ------------------------------------------------
    def list_gpts(self, *, order: ListOrder | None = None, category: str | None = None) -> list[GptDefinition]:
        return self.store.list_gpts(order=order or settings.admin_list_order, category=category)  # type: ignore[arg-type]

    def get_gpt(self, gpt_id: int) -> GptDefinition:
        gpt = self.store.get(gpt_id)
        if gpt is None:
            raise KeyError(f"GPT not found: {gpt_id}")
        return gpt

    def save_gpt(self, data: Mapping[str, Any], *, gpt_id: int | None = None) -> GptDefinition:
        draft = clean_draft(data, max_fields=self.max_fields)
        if gpt_id is not None:
            return self.store.update(gpt_id, draft)
        return self.store.create(draft)

    def delete_gpt(self, gpt_id: int) -> bool:
        if gpt_id <= 0:
            raise ValueError("Invalid GPT ID.")
        return self.store.delete(gpt_id)

    # --- Prompt building -----------------------------------------------
    def build_prompt(self, gpt_id: int, raw_values: Any) -> PromptResult:
        gpt = self.get_gpt(gpt_id)
        submitted = {key: sanitize_value(value) for key, value in decode_submission(raw_values).items()}
        values = validate_submission(
            gpt.fields,
            submitted,
            first_field_required=self.first_field_required,
        )
        prompt = render(gpt.prompt_template, values, policy=self.token_policy)
        log.debug("Prompt built for GPT %s (%d values, %d chars)", gpt.id, len(values), len(prompt))
        return PromptResult(gpt=gpt, prompt=prompt, values=values)

    def launch(
        self,
        gpt_id: int,
        raw_values: Any,
        *,
        clipboard: Clipboard,
        navigator: Navigator,
    ) -> LaunchOutcome:
        result = self.build_prompt(gpt_id, raw_values)
        outcome = launch(result.prompt, result.gpt.url, clipboard=clipboard, navigator=navigator)
        log.info("GPT %s launched (copied=%s, navigated=%s)", result.gpt.id, outcome.copied, outcome.navigated)
        return outcome

    # --- Showcase ------------------------------------------------------
    def showcase(self, *, category: str | None = None) -> list[ShowcaseCard]:
        gpts = self.store.list_gpts(order=settings.showcase_order, category=category)  # type: ignore[arg-type]
        return build_showcase(gpts, first_field_required=self.first_field_required)

    # --- Catalog -------------------------------------------------------
    def import_catalog(self, document: CatalogDocument, *, replace: bool = False) -> list[GptDefinition]:
        drafts = [clean_draft(entry, max_fields=self.max_fields) for entry in document.entries]
        if replace:
            for existing in self.store.list_gpts(order="asc"):
                self.store.delete(existing.id)
        created = [self.store.create(draft) for draft in drafts]
        log.info("Catalog imported (count=%d, replace=%s)", len(created), replace)
        return created

    def export_catalog(self) -> list[GptDefinition]:
        return self.store.list_gpts(order="asc")

    def seed_if_empty(self, catalog: CatalogRepository) -> int:
        if self.store.list_gpts(order="asc"):
            log.debug("Store already populated; seed skipped")
            return 0
        if not catalog.exists():
            log.warning("Seed catalog not found: %s", catalog.path)
            return 0
        created = self.import_catalog(catalog.load())
        return len(created)
