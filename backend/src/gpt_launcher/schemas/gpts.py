from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..core.prompts import template_diagnostics

if TYPE_CHECKING:
    from ..core.prompts import FieldDef, GptDefinition
    from ..services.launcher import LaunchOutcome
    from ..services.showcase import FormFieldView, ShowcaseCard


class FieldDefPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")
    label: str = ""
    type: str = "text"
    options: str = ""
    required: bool = False
    key: str | None = None


class GptPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=2083, validation_alias=AliasChoices("url", "gpt_url"))
    description: str = ""
    prompt_template: str = ""
    fields: list[FieldDefPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("fields", "prompt_fields"),
    )
    icon_url: str = Field("", max_length=2083)
    category: str | None = Field(None, max_length=128)


class FieldDefResponse(BaseModel):
    label: str
    type: str
    options: str
    required: bool
    key: str

    @classmethod
    def from_model(cls, item: "FieldDef") -> "FieldDefResponse":
        return cls(
            label=item.label,
            type=item.type,
            options=item.options,
            required=item.required,
            key=item.lookup_key,
        )


class GptResponse(BaseModel):
    id: int
    name: str
    url: str
    description: str
    prompt_template: str
    fields: list[FieldDefResponse]
    icon_url: str
    category: str | None = None
    placeholders: list[str] = Field(default_factory=list)
    unknown_placeholders: list[str] = Field(default_factory=list)
    unused_fields: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, gpt: "GptDefinition") -> "GptResponse":
        diagnostics = template_diagnostics(gpt.prompt_template, gpt.fields)
        return cls(
            id=gpt.id,
            name=gpt.name,
            url=gpt.url,
            description=gpt.description,
            prompt_template=gpt.prompt_template,
            fields=[FieldDefResponse.from_model(item) for item in gpt.fields],
            icon_url=gpt.icon_url,
            category=gpt.category,
            placeholders=diagnostics.placeholders,
            unknown_placeholders=diagnostics.unknown_placeholders,
            unused_fields=diagnostics.unused_fields,
            created_at=gpt.created_at,
            updated_at=gpt.updated_at,
        )


class GptListResponse(BaseModel):
    order: str
    items: list[GptResponse]


class DeleteResponse(BaseModel):
    id: int
    deleted: bool
    message: str


class SubmissionRequest(BaseModel):
    # Decoded by the template engine so that nested values surface as malformed submissions.
    values: Any = Field(default_factory=dict)
    clipboard_available: bool = True


class PromptResponse(BaseModel):
    gpt_id: int
    url: str
    prompt: str
    values: dict[str, str]


class LaunchResponse(BaseModel):
    gpt_id: int
    prompt: str
    url: str
    copied: bool
    navigated: bool
    clipboard_text: str | None = None
    navigate_to: str | None = None
    message: str | None = None
    warning: str | None = None
    manual_copy_text: str | None = None

    @classmethod
    def from_outcome(
        cls,
        gpt_id: int,
        outcome: "LaunchOutcome",
        *,
        clipboard_text: str | None,
        navigate_to: str | None,
    ) -> "LaunchResponse":
        return cls(
            gpt_id=gpt_id,
            prompt=outcome.prompt,
            url=outcome.url,
            copied=outcome.copied,
            navigated=outcome.navigated,
            clipboard_text=clipboard_text,
            navigate_to=navigate_to,
            message=outcome.message,
            warning=outcome.warning,
            manual_copy_text=outcome.manual_copy_text,
        )


class ShowcaseFieldResponse(BaseModel):
    input_id: str
    key: str
    label: str
    type: str
    options: list[str] = Field(default_factory=list)
    required: bool = False

    @classmethod
    def from_view(cls, view: "FormFieldView") -> "ShowcaseFieldResponse":
        return cls(
            input_id=view.input_id,
            key=view.key,
            label=view.label,
            type=view.type,
            options=list(view.options),
            required=view.required,
        )


class ShowcaseCardResponse(BaseModel):
    id: int
    name: str
    description: str
    url: str
    icon_url: str
    category: str | None = None
    has_form: bool
    fields: list[ShowcaseFieldResponse] = Field(default_factory=list)

    @classmethod
    def from_card(cls, card: "ShowcaseCard") -> "ShowcaseCardResponse":
        return cls(
            id=card.id,
            name=card.name,
            description=card.description,
            url=card.url,
            icon_url=card.icon_url,
            category=card.category,
            has_form=card.has_form,
            fields=[ShowcaseFieldResponse.from_view(view) for view in card.fields],
        )


class ShowcaseResponse(BaseModel):
    items: list[ShowcaseCardResponse]


class CatalogImportRequest(BaseModel):
    content: str = Field(..., min_length=1)
    replace: bool = False


class CatalogImportResponse(BaseModel):
    imported: int
    replaced: bool
    items: list[GptResponse]


class CatalogSnapshotResponse(BaseModel):
    path: str
    count: int
