from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import logging
import re
from typing import Any, Iterable, Mapping

from .errors import MalformedSubmission, MissingRequiredField


log = logging.getLogger("launcher.core.prompts")

FIELD_TYPES = ("text", "select")
DEFAULT_FIELD_TYPE = "text"

# Any brace-delimited run without nested braces or line breaks counts as a token.
_PLACEHOLDER_RE = re.compile(r"\{([^{}\r\n]+)\}")


class UnmatchedTokenPolicy(str, Enum):
    """What ``render`` does with tokens that no submitted value matched."""

    KEEP = "keep"
    BLANK = "blank"


@dataclass(frozen=True)
class FieldDef:
    label: str
    type: str = DEFAULT_FIELD_TYPE
    options: str = ""
    required: bool = False
    key: str | None = None

    @property
    def lookup_key(self) -> str:
        """Substitution key: the explicit ``key`` when set, the label otherwise."""
        return (self.key or self.label).strip()

    @property
    def choices(self) -> list[str]:
        if self.type != "select":
            return []
        return parse_options(self.options)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "label": self.label,
            "type": self.type,
            "options": self.options,
            "required": self.required,
        }
        if self.key:
            data["key"] = self.key
        return data


@dataclass(frozen=True)
class GptDraft:
    """A GPT definition as submitted by an administrator, before storage."""

    name: str
    url: str
    description: str = ""
    prompt_template: str = ""
    fields: tuple[FieldDef, ...] = ()
    icon_url: str = ""
    category: str | None = None


@dataclass(frozen=True)
class GptDefinition:
    id: int
    name: str
    url: str
    description: str = ""
    prompt_template: str = ""
    fields: tuple[FieldDef, ...] = ()
    icon_url: str = ""
    category: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class TemplateDiagnostics:
    placeholders: list[str] = field(default_factory=list)
    unknown_placeholders: list[str] = field(default_factory=list)
    unused_fields: list[str] = field(default_factory=list)


def parse_options(options: str | None) -> list[str]:
    if not options:
        return []
    return [item.strip() for item in options.split(",") if item.strip()]


_TRUE_STRINGS = {"1", "true", "yes", "on", "y"}


def parse_flag(value: Any) -> bool:
    """Read a boolean flag from JSON/YAML input; strings like ``"no"`` are false."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def normalize_field(raw: FieldDef | Mapping[str, Any] | None) -> FieldDef | None:
    """Coerce a raw field entry into a ``FieldDef``.

    Entries with an empty label or an empty type are dropped (``None``).
    Unrecognized types are tolerated and fall back to ``text``.
    """
    if raw is None:
        return None
    if isinstance(raw, FieldDef):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        return None
    label = str(raw.get("label") or "").strip()
    type_raw = str(raw.get("type") or "").strip()
    if not label or not type_raw:
        return None
    field_type = type_raw.lower()
    if field_type not in FIELD_TYPES:
        log.debug("Unknown field type %r for %r; using %s", type_raw, label, DEFAULT_FIELD_TYPE)
        field_type = DEFAULT_FIELD_TYPE
    key_raw = raw.get("key")
    key = str(key_raw).strip() if key_raw is not None else ""
    return FieldDef(
        label=label,
        type=field_type,
        options=str(raw.get("options") or "").strip(),
        required=parse_flag(raw.get("required", False)),
        key=key or None,
    )


def normalize_fields(raw: Iterable[FieldDef | Mapping[str, Any]] | None) -> list[FieldDef]:
    fields: list[FieldDef] = []
    for item in raw or []:
        normalized = normalize_field(item)
        if normalized is not None:
            fields.append(normalized)
    return fields


def escape_key(key: str) -> str:
    return re.escape(key)


def _token_pattern(key: str) -> re.Pattern[str]:
    return re.compile(r"\{" + escape_key(key) + r"\}")


def extract_placeholders(template: str | None) -> list[str]:
    """Return token names in order of first appearance, without duplicates."""
    seen: dict[str, None] = {}
    for match in _PLACEHOLDER_RE.finditer(template or ""):
        seen.setdefault(match.group(1), None)
    return list(seen)


def template_diagnostics(template: str | None, fields: Iterable[FieldDef]) -> TemplateDiagnostics:
    placeholders = extract_placeholders(template)
    keys = [f.lookup_key for f in fields if f.lookup_key]
    key_set = set(keys)
    placeholder_set = set(placeholders)
    return TemplateDiagnostics(
        placeholders=placeholders,
        unknown_placeholders=[name for name in placeholders if name not in key_set],
        unused_fields=[key for key in dict.fromkeys(keys) if key not in placeholder_set],
    )


def decode_submission(raw: Any) -> dict[str, str]:
    """Decode a transport payload into a flat ``key -> text`` mapping."""
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise MalformedSubmission("Submission must be a flat mapping of field keys to values.")
    decoded: dict[str, str] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            raise MalformedSubmission(f"Submission keys must be strings (got {type(key).__name__}).")
        if value is None:
            decoded[key] = ""
        elif isinstance(value, str):
            decoded[key] = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            decoded[key] = str(value)
        else:
            raise MalformedSubmission(f"Value for '{key}' must be a string (got {type(value).__name__}).")
    return decoded


def is_required(field_def: FieldDef, index: int, *, first_field_required: bool = True) -> bool:
    return field_def.required or (first_field_required and index == 0)


def validate_submission(
    fields: Iterable[FieldDef],
    values: Mapping[str, Any],
    *,
    first_field_required: bool = True,
) -> dict[str, str]:
    """Check submitted values against the field schema and return them trimmed.

    The result holds one entry per distinct key, in field order. When two
    fields share a key, the later field wins (value and position). Select
    fields accept values outside their declared options.
    """
    cleaned: dict[str, str] = {}
    for index, field_def in enumerate(fields):
        key = field_def.lookup_key
        if not key:
            continue
        raw = values.get(key)
        value = "" if raw is None else str(raw).strip()
        if not value and is_required(field_def, index, first_field_required=first_field_required):
            raise MissingRequiredField(field_def.label)
        choices = field_def.choices
        if value and choices and value not in choices:
            log.debug("Accepting value outside declared options for %r", field_def.label)
        cleaned.pop(key, None)
        cleaned[key] = value
    return cleaned


def render(
    template: str | None,
    values: Mapping[str, Any],
    *,
    policy: UnmatchedTokenPolicy | str = UnmatchedTokenPolicy.KEEP,
) -> str:
    """Substitute every ``{key}`` token of ``template`` with its value.

    Keys are applied in mapping order, one after the other, so a value that
    itself contains a later ``{key}`` token is expanded by that later key.
    Values are inserted literally. Template tokens without a value are kept
    or removed according to ``policy``; text coming from values is never
    touched by the policy.
    """
    if not template:
        return ""
    result = template
    if UnmatchedTokenPolicy(policy) is UnmatchedTokenPolicy.BLANK:
        known = {key for key in values if key}
        for name in extract_placeholders(template):
            if name not in known:
                result = _token_pattern(name).sub("", result)
    for key, value in values.items():
        if not key:
            continue
        replacement = "" if value is None else str(value)
        result = _token_pattern(key).sub(lambda _m, text=replacement: text, result)
    return result
