import pytest

from gpt_launcher.core.prompts import FieldDef, GptDraft
from gpt_launcher.repositories.catalog_repository import (
    CATALOG_VERSION,
    CatalogRepository,
    dumps_catalog,
    loads_catalog,
)


def test_save_then_load_keeps_entries(tmp_path):
    repo = CatalogRepository(tmp_path / "seed" / "gpts.yaml")
    drafts = [
        GptDraft(
            name="Lesson planner",
            url="https://chat.openai.com/g/g-lesson",
            description="Plans lessons",
            prompt_template="Plan a {Subject} lesson",
            fields=(FieldDef(label="Subject", type="select", options="Math,Physics"),),
            category="Teaching",
        ),
        GptDraft(name="Plain", url="https://chat.openai.com/g/g-plain"),
    ]

    assert repo.save(drafts) == 2
    assert repo.exists()
    assert not list(tmp_path.joinpath("seed").glob("*.tmp"))

    document = repo.load()
    assert document.version == CATALOG_VERSION
    assert [entry["name"] for entry in document.entries] == ["Lesson planner", "Plain"]
    assert document.entries[0]["fields"][0]["options"] == "Math,Physics"
    assert document.entries[0]["category"] == "Teaching"
    assert "category" not in document.entries[1]


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        CatalogRepository(tmp_path / "absent.yaml").load()


def test_dumps_catalog_is_readable_yaml():
    text = dumps_catalog([GptDraft(name="Émile", url="https://example.com/g")])
    assert text.startswith("version: 1\n")
    assert "Émile" in text


def test_empty_document_has_no_entries():
    assert loads_catalog("").entries == []


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "version: 99\ngpts: []\n",
        "version: one\n",
        "gpts: {name: x}\n",
        "gpts:\n  - not a mapping\n",
        "gpts:\n  - name: x\n    fields: nope\n",
        "gpts:\n  - name: x\n    prompt_fields: 5\n",
        "gpts: [unclosed\n",
    ],
)
def test_invalid_catalogs_raise_value_error(text):
    with pytest.raises(ValueError):
        loads_catalog(text)
