from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Iterable

from ..core.prompts import GptDefinition, is_required


_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class FormFieldView:
    input_id: str
    key: str
    label: str
    type: str
    options: list[str] = field(default_factory=list)
    required: bool = False


@dataclass(frozen=True)
class ShowcaseCard:
    id: int
    name: str
    description: str
    url: str
    icon_url: str
    category: str | None
    fields: list[FormFieldView]

    @property
    def has_form(self) -> bool:
        return bool(self.fields)


def field_input_id(gpt_name: str, index: int) -> str:
    return f"gpt-field-{_WS_RE.sub('-', gpt_name.strip())}-{index}"


def build_card(gpt: GptDefinition, *, first_field_required: bool = True) -> ShowcaseCard:
    views: list[FormFieldView] = []
    for index, item in enumerate(gpt.fields):
        views.append(
            FormFieldView(
                input_id=field_input_id(gpt.name, index),
                key=item.lookup_key,
                label=item.label,
                # A select without options is shown as a plain text input.
                type="select" if item.choices else "text",
                options=item.choices,
                required=is_required(item, index, first_field_required=first_field_required),
            )
        )
    return ShowcaseCard(
        id=gpt.id,
        name=gpt.name,
        description=gpt.description,
        url=gpt.url,
        icon_url=gpt.icon_url,
        category=gpt.category,
        fields=views,
    )


def build_showcase(gpts: Iterable[GptDefinition], *, first_field_required: bool = True) -> list[ShowcaseCard]:
    return [build_card(gpt, first_field_required=first_field_required) for gpt in gpts]
