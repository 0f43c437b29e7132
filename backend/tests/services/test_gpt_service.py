from dataclasses import replace

import pytest

from gpt_launcher.core.errors import MalformedSubmission, MissingRequiredField
from gpt_launcher.core.prompts import GptDefinition, GptDraft
from gpt_launcher.repositories.catalog_repository import CatalogRepository, loads_catalog
from gpt_launcher.services.gpt_service import GptService, clean_draft
from gpt_launcher.services.launcher import CLIPBOARD_WARNING, HandoffClipboard, HandoffNavigator


class _InMemoryStore:
    def __init__(self):
        self.rows: dict[int, GptDefinition] = {}
        self._next_id = 1

    def list_gpts(self, *, order="desc", category=None):
        items = sorted(self.rows.values(), key=lambda g: g.id, reverse=(order == "desc"))
        if category:
            items = [g for g in items if (g.category or "").lower() == category.strip().lower()]
        return items

    def get(self, gpt_id):
        return self.rows.get(gpt_id)

    def create(self, draft: GptDraft):
        gpt = GptDefinition(id=self._next_id, **draft.__dict__)
        self.rows[gpt.id] = gpt
        self._next_id += 1
        return gpt

    def update(self, gpt_id, draft: GptDraft):
        if gpt_id not in self.rows:
            raise KeyError(gpt_id)
        self.rows[gpt_id] = GptDefinition(id=gpt_id, **draft.__dict__)
        return self.rows[gpt_id]

    def delete(self, gpt_id):
        return self.rows.pop(gpt_id, None) is not None


LESSON = {
    "name": "Lesson <b>planner</b>",
    "gpt_url": "https://chat.openai.com/g/g-lesson",
    "description": "Plans\r\nlessons",
    "prompt_template": "Create a {duration}-minute lesson for {grade} {subject}.",
    "prompt_fields": [
        {"label": "duration", "type": "text"},
        {"label": "grade", "type": "text"},
        {"label": "subject", "type": "select", "options": "Math,Physics"},
        {"label": "", "type": "text"},
    ],
}


def _service(**kwargs) -> tuple[GptService, _InMemoryStore]:
    store = _InMemoryStore()
    kwargs.setdefault("first_field_required", True)
    kwargs.setdefault("token_policy", "keep")
    kwargs.setdefault("max_fields", 50)
    return GptService(store, **kwargs), store


def test_clean_draft_sanitizes_and_drops_incomplete_fields():
    draft = clean_draft(LESSON, max_fields=10)

    assert draft.name == "Lesson planner"
    assert draft.url == "https://chat.openai.com/g/g-lesson"
    assert draft.description == "Plans\nlessons"
    assert [f.label for f in draft.fields] == ["duration", "grade", "subject"]


@pytest.mark.parametrize(
    "data",
    [
        {"name": "", "url": "https://example.com"},
        {"name": "Named", "url": ""},
        {"name": "Named", "url": "javascript:alert(1)"},
    ],
)
def test_clean_draft_requires_name_and_url(data):
    with pytest.raises(ValueError, match="Name and GPT URL are required"):
        clean_draft(data, max_fields=10)


def test_clean_draft_enforces_field_limit():
    data = {"name": "Many", "url": "https://example.com", "fields": [{"label": f"f{i}", "type": "text"} for i in range(4)]}
    with pytest.raises(ValueError, match="at most 3 fields"):
        clean_draft(data, max_fields=3)


def test_save_creates_then_updates():
    service, store = _service()
    created = service.save_gpt(LESSON)

    updated = service.save_gpt({**LESSON, "name": "Renamed", "prompt_fields": []}, gpt_id=created.id)

    assert updated.id == created.id
    assert store.rows[created.id].name == "Renamed"
    assert store.rows[created.id].fields == ()


def test_get_and_delete():
    service, _ = _service()
    created = service.save_gpt(LESSON)

    assert service.get_gpt(created.id).name == "Lesson planner"
    assert service.delete_gpt(created.id) is True
    assert service.delete_gpt(created.id) is False
    with pytest.raises(KeyError):
        service.get_gpt(created.id)
    with pytest.raises(ValueError):
        service.delete_gpt(0)


def test_list_orders_by_id():
    service, _ = _service()
    ids = [service.save_gpt({**LESSON, "name": f"G{i}"}).id for i in range(3)]

    assert [g.id for g in service.list_gpts(order="desc")] == list(reversed(ids))
    assert [g.id for g in service.list_gpts(order="asc")] == ids


def test_build_prompt_substitutes_submitted_values():
    service, _ = _service()
    gpt = service.save_gpt(LESSON)

    result = service.build_prompt(gpt.id, {"duration": " 45 ", "grade": "7th", "subject": "Chemistry"})

    assert result.prompt == "Create a 45-minute lesson for 7th Chemistry."
    assert result.values == {"duration": "45", "grade": "7th", "subject": "Chemistry"}


def test_build_prompt_rejects_missing_first_field():
    service, _ = _service()
    gpt = service.save_gpt(LESSON)

    with pytest.raises(MissingRequiredField) as excinfo:
        service.build_prompt(gpt.id, {"grade": "7th"})
    assert excinfo.value.label == "duration"


def test_build_prompt_rejects_nested_values():
    service, _ = _service()
    gpt = service.save_gpt(LESSON)

    with pytest.raises(MalformedSubmission):
        service.build_prompt(gpt.id, {"duration": {"minutes": 45}})


def test_build_prompt_honours_blank_policy():
    data = {**LESSON, "prompt_template": "{duration} min {notes}"}
    keep, _ = _service()
    blank, _ = _service(token_policy="blank")

    assert keep.build_prompt(keep.save_gpt(data).id, {"duration": "30"}).prompt == "30 min {notes}"
    assert blank.build_prompt(blank.save_gpt(data).id, {"duration": "30"}).prompt == "30 min "


def test_build_prompt_without_fields_returns_template():
    service, _ = _service()
    gpt = service.save_gpt({"name": "Bare", "url": "https://example.com", "prompt_template": "Hello {name}"})

    assert service.build_prompt(gpt.id, None).prompt == "Hello {name}"


def test_launch_keeps_navigating_when_clipboard_fails():
    service, _ = _service()
    gpt = service.save_gpt(LESSON)
    clipboard = HandoffClipboard(available=False)
    navigator = HandoffNavigator()

    outcome = service.launch(gpt.id, {"duration": "30"}, clipboard=clipboard, navigator=navigator)

    assert outcome.copied is False
    assert outcome.navigated is True
    assert outcome.warning == CLIPBOARD_WARNING
    assert outcome.manual_copy_text == outcome.prompt
    assert navigator.url == "https://chat.openai.com/g/g-lesson"


def test_showcase_lists_oldest_first_with_form_metadata(monkeypatch):
    from gpt_launcher.core.config import settings

    monkeypatch.setattr(settings, "showcase_order", "asc")
    service, store = _service()
    first = service.save_gpt(LESSON)
    service.save_gpt({"name": "Bare", "url": "https://example.com"})
    store.rows[first.id] = replace(store.rows[first.id], category="Teaching")

    cards = service.showcase()
    assert [card.name for card in cards] == ["Lesson planner", "Bare"]
    assert cards[0].has_form and not cards[1].has_form
    assert [card.name for card in service.showcase(category="teaching")] == ["Lesson planner"]


def test_import_catalog_replaces_existing_entries():
    service, store = _service()
    service.save_gpt(LESSON)
    document = loads_catalog(
        "version: 1\n"
        "gpts:\n"
        "  - name: Essay coach\n"
        "    url: https://chat.openai.com/g/g-essay\n"
        "    fields:\n"
        "      - {label: Topic, type: text}\n"
    )

    created = service.import_catalog(document, replace=True)

    assert [g.name for g in created] == ["Essay coach"]
    assert [g.name for g in store.list_gpts()] == ["Essay coach"]


def test_import_catalog_validates_before_writing():
    service, store = _service()
    service.save_gpt(LESSON)
    document = loads_catalog("gpts:\n  - name: Valid\n    url: https://example.com\n  - name: No url\n")

    with pytest.raises(ValueError):
        service.import_catalog(document, replace=True)
    assert [g.name for g in store.list_gpts()] == ["Lesson planner"]


def test_seed_only_fills_an_empty_store(tmp_path):
    catalog = CatalogRepository(tmp_path / "gpts.yaml")
    catalog.save([clean_draft(LESSON, max_fields=10)])

    service, store = _service()
    assert service.seed_if_empty(catalog) == 1
    assert service.seed_if_empty(catalog) == 0
    assert len(store.rows) == 1

    empty, _ = _service()
    assert empty.seed_if_empty(CatalogRepository(tmp_path / "absent.yaml")) == 0


def test_export_round_trips_through_catalog(tmp_path):
    service, _ = _service()
    service.save_gpt(LESSON)
    service.save_gpt({"name": "Second", "url": "https://example.com/2"})
    catalog = CatalogRepository(tmp_path / "export.yaml")

    assert catalog.save(service.export_catalog()) == 2

    restored, _ = _service()
    assert [g.name for g in restored.import_catalog(catalog.load())] == ["Lesson planner", "Second"]


@pytest.mark.parametrize("raw_fields", [5, "Topic", {"label": "Topic"}])
def test_clean_draft_rejects_non_list_fields(raw_fields):
    with pytest.raises(ValueError, match="Fields must be a list"):
        clean_draft({**LESSON, "prompt_fields": raw_fields}, max_fields=10)


def test_save_with_id_zero_is_an_update_of_a_missing_gpt():
    service, store = _service()
    service.save_gpt(LESSON)

    with pytest.raises(KeyError):
        service.save_gpt(LESSON, gpt_id=0)
    assert len(store.rows) == 1
