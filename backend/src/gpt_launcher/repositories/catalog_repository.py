from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import tempfile
from typing import Any, Dict, Iterable

import yaml

from ..core.prompts import GptDefinition, GptDraft


log = logging.getLogger("launcher.repositories.catalog")

CATALOG_VERSION = 1


@dataclass(frozen=True)
class CatalogDocument:
    version: int
    entries: list[Dict[str, Any]]


def entry_from_gpt(gpt: GptDefinition | GptDraft) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "name": gpt.name,
        "url": gpt.url,
        "description": gpt.description,
        "prompt_template": gpt.prompt_template,
        "fields": [item.to_dict() for item in gpt.fields],
    }
    if gpt.icon_url:
        entry["icon_url"] = gpt.icon_url
    if gpt.category:
        entry["category"] = gpt.category
    return entry


def parse_catalog(raw: Any) -> CatalogDocument:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError("Invalid catalog (root is not a mapping).")
    version = raw.get("version", CATALOG_VERSION)
    if not isinstance(version, int):
        raise ValueError("Invalid catalog (version must be an integer).")
    if version > CATALOG_VERSION:
        raise ValueError(f"Unsupported catalog version: {version}")
    gpts = raw.get("gpts", [])
    if not isinstance(gpts, list):
        raise ValueError("Invalid catalog (gpts must be a list).")
    entries: list[Dict[str, Any]] = []
    for index, item in enumerate(gpts):
        if not isinstance(item, dict):
            raise ValueError(f"Invalid catalog entry #{index + 1} (not a mapping).")
        for alias in ("fields", "prompt_fields"):
            fields = item.get(alias)
            if fields is not None and not isinstance(fields, list):
                raise ValueError(f"Invalid catalog entry #{index + 1} ({alias} must be a list).")
        entries.append(item)
    return CatalogDocument(version=version, entries=entries)


def loads_catalog(text: str) -> CatalogDocument:
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid catalog YAML: {exc}") from exc
    return parse_catalog(raw)


def dumps_catalog(gpts: Iterable[GptDefinition | GptDraft]) -> str:
    raw = {"version": CATALOG_VERSION, "gpts": [entry_from_gpt(gpt) for gpt in gpts]}
    return yaml.safe_dump(raw, allow_unicode=True, sort_keys=False, default_flow_style=False)


class CatalogRepository:
    """YAML file holding a whole catalog of GPT definitions."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> CatalogDocument:
        if not self.path.exists():
            raise FileNotFoundError(f"Catalog file not found: {self.path}")
        with self.path.open("r", encoding="utf-8") as f:
            document = loads_catalog(f.read())
        log.info("Catalog loaded: %s (%d entries)", self.path, len(document.entries))
        return document

    def save(self, gpts: Iterable[GptDefinition | GptDraft]) -> int:
        items = list(gpts)
        payload = dumps_catalog(items)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except Exception:
            try:
                os.remove(tmp_path)
            except OSError:
                pass
            log.exception("Failed to write catalog file: %s", self.path)
            raise
        log.info("Catalog saved: %s (%d entries)", self.path, len(items))
        return len(items)
