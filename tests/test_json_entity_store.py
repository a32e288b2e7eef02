from __future__ import annotations

import json
from pathlib import Path

import pytest

from adapters.entity_catalog import EntityCatalog
from adapters.entity_store import JsonDirectoryEntityStore
from contracts import CharacterRecord, EntityType
from ports.entity_store import (
    ContentNotFoundError,
    RecordParseError,
    RecordValidationError,
    RecordWriteError,
    StoreUnavailableError,
)


def _write_json(path: Path, payload) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_loads_character_records(tmp_path):
    _write_json(tmp_path / "characters" / "elena.json",
                {"id": "elena", "name": "Elena Voss", "aliases": ["El"], "tags": ["lead"]})
    store = JsonDirectoryEntityStore(tmp_path)

    refs = store.list_record_refs()
    entity = store.load_record(refs[0])

    assert len(refs) == 1
    assert entity.id == "elena"
    assert entity.aliases == ("El",)
    assert entity.tags == ("lead",)
    assert entity.entity_type == EntityType.CHARACTER
    assert entity.source_ref == refs[0]


def test_accepts_pascal_case_keys_from_desktop_app(tmp_path):
    path = _write_json(tmp_path / "characters" / "john.json",
                       {"Id": "john", "Name": "John Smith", "Aliases": ["John"], "Tags": []})

    entity = JsonDirectoryEntityStore(tmp_path).load_record(str(path))

    assert (entity.id, entity.name, entity.aliases) == ("john", "John Smith", ("John",))


def test_missing_id_gets_generated(tmp_path):
    path = _write_json(tmp_path / "characters" / "kael.json", {"name": "Kael"})

    entity = JsonDirectoryEntityStore(tmp_path).load_record(str(path))

    assert entity.name == "Kael"
    assert entity.id


def test_malformed_record_raises_record_parse_error(tmp_path):
    path = tmp_path / "characters" / "broken.json"
    path.parent.mkdir(parents=True)
    path.write_text("{not json", encoding="utf-8")
    wrong_type = _write_json(tmp_path / "characters" / "wrong.json", {"id": "w", "aliases": 7})
    store = JsonDirectoryEntityStore(tmp_path)

    with pytest.raises(RecordParseError) as exc_info:
        store.load_record(str(path))
    assert exc_info.value.record_ref == str(path)
    with pytest.raises(RecordParseError):
        store.load_record(str(wrong_type))
    with pytest.raises(RecordParseError):
        store.load_record(str(tmp_path / "characters" / "missing.json"))


def test_missing_root_is_unavailable(tmp_path):
    store = JsonDirectoryEntityStore(tmp_path / "nope")

    with pytest.raises(StoreUnavailableError):
        store.list_record_refs()


def test_missing_kind_directory_yields_no_records(tmp_path):
    assert JsonDirectoryEntityStore(tmp_path).list_record_refs() == []


def test_kind_directories_map_to_entity_types(tmp_path):
    _write_json(tmp_path / "characters" / "a.json", {"id": "a", "name": "Ann"})
    _write_json(tmp_path / "locations" / "b.json", {"id": "b", "name": "Brightwater"})
    store = JsonDirectoryEntityStore(
        tmp_path,
        {"characters": EntityType.CHARACTER, "locations": EntityType.LOCATION},
    )

    entities = [store.load_record(ref) for ref in store.list_record_refs()]

    assert [(e.id, e.entity_type) for e in entities] == [
        ("a", EntityType.CHARACTER),
        ("b", EntityType.LOCATION),
    ]


def test_extended_content_lives_next_to_record(tmp_path):
    path = _write_json(tmp_path / "characters" / "elena.json", {"id": "elena", "name": "Elena"})
    path.with_suffix(".md").write_text("# Elena\n\nBorn in Brightwater.", encoding="utf-8")
    _write_json(tmp_path / "characters" / "john.json", {"id": "john", "name": "John"})
    store = JsonDirectoryEntityStore(tmp_path)

    elena = store.load_record(str(path))
    john = store.load_record(str(tmp_path / "characters" / "john.json"))

    assert store.load_extended_content(elena).startswith("# Elena")
    with pytest.raises(ContentNotFoundError):
        store.load_extended_content(john)


def test_catalog_reload_skips_broken_files(tmp_path):
    _write_json(tmp_path / "characters" / "a.json", {"id": "a", "name": "Ann"})
    (tmp_path / "characters" / "b.json").write_text("[]", encoding="utf-8")
    _write_json(tmp_path / "characters" / "c.json", {"id": "c", "name": "Cora"})
    catalog = EntityCatalog(JsonDirectoryEntityStore(tmp_path))

    report = catalog.reload()

    assert report.loaded == 2
    assert len(report.skipped) == 1
    assert report.skipped[0].record_ref.endswith("b.json")
    assert [e.name for e in catalog] == ["Ann", "Cora"]


def test_catalog_reload_skips_file_that_is_not_utf8(tmp_path):
    _write_json(tmp_path / "characters" / "a.json", {"id": "a", "name": "Ann"})
    (tmp_path / "characters" / "b.json").write_bytes(b'{"id": "b", "name": "\xff\xfe"}')
    catalog = EntityCatalog(JsonDirectoryEntityStore(tmp_path))

    report = catalog.reload()

    assert report.loaded == 1
    assert report.skipped[0].record_ref.endswith("b.json")
    assert "cannot read file" in report.skipped[0].reason


def test_catalog_reload_skips_unreadable_record(tmp_path):
    _write_json(tmp_path / "characters" / "a.json", {"id": "a", "name": "Ann"})
    # a directory named like a record cannot be read as a file
    (tmp_path / "characters" / "dir.json").mkdir()
    catalog = EntityCatalog(JsonDirectoryEntityStore(tmp_path))

    report = catalog.reload()

    assert report.loaded == 1
    assert report.skipped[0].record_ref.endswith("dir.json")


def test_unreadable_extended_content_counts_as_missing(tmp_path):
    bad = _write_json(tmp_path / "characters" / "a.json", {"id": "a", "name": "Ann"})
    bad.with_suffix(".md").write_bytes(b"\xff\xfe bad")
    folder = _write_json(tmp_path / "characters" / "b.json", {"id": "b", "name": "Bo"})
    folder.with_suffix(".md").mkdir()
    store = JsonDirectoryEntityStore(tmp_path)
    catalog = EntityCatalog(store)
    catalog.reload()

    with pytest.raises(ContentNotFoundError):
        store.load_extended_content(catalog.find_by_id("a"))
    assert catalog.load_extended_content(catalog.find_by_id("a")) is None
    assert catalog.load_extended_content(catalog.find_by_id("b")) is None


def test_save_record_writes_json_and_markdown(tmp_path):
    store = JsonDirectoryEntityStore(tmp_path / "data")
    record = CharacterRecord(id="k1", name="Kael", aliases=["Kay"], tags=["rogue", "exile"])

    ref = store.save_record(record, "Grew up on the docks.")

    json_path = tmp_path / "data" / "characters" / "Kael!k1.json"
    assert ref == str(json_path)
    assert json.loads(json_path.read_text(encoding="utf-8"))["aliases"] == ["Kay"]
    markdown = json_path.with_suffix(".md").read_text(encoding="utf-8")
    assert markdown.startswith("---\nid: k1\ntype: character\nname: Kael\n")
    assert "aliases: [Kay]\ntags: [rogue, exile]\ncreated: " in markdown
    assert markdown.endswith("---\n\n# Kael\n\nGrew up on the docks.")

    entity = store.load_record(ref)
    assert (entity.id, entity.name, entity.aliases, entity.tags) == (
        "k1", "Kael", ("Kay",), ("rogue", "exile"),
    )
    assert store.load_extended_content(entity) == markdown


def test_save_record_without_content_uses_template(tmp_path):
    store = JsonDirectoryEntityStore(tmp_path)

    ref = store.save_record(CharacterRecord(id="m", name="Mira"))

    markdown = Path(ref).with_suffix(".md").read_text(encoding="utf-8")
    assert "aliases: []\ntags: []\n" in markdown
    assert "# Mira\n\n## Description\n" in markdown


def test_save_record_sanitizes_file_name(tmp_path):
    store = JsonDirectoryEntityStore(tmp_path)

    ref = store.save_record(CharacterRecord(id="q", name="Who/What?"))

    assert Path(ref).name == "Who_What_!q.json"
    assert store.load_record(ref).name == "Who/What?"


def test_save_record_requires_a_name(tmp_path):
    store = JsonDirectoryEntityStore(tmp_path)

    with pytest.raises(RecordValidationError):
        store.save_record(CharacterRecord(name="   "))
    assert not (tmp_path / "characters").exists()


def test_save_record_reports_write_failure(tmp_path):
    root = tmp_path / "file-not-dir"
    root.write_text("", encoding="utf-8")

    with pytest.raises(RecordWriteError):
        JsonDirectoryEntityStore(root).save_record(CharacterRecord(name="Kael"))


def test_memory_store_save_record():
    from adapters.entity_store import InMemoryEntityStore

    store = InMemoryEntityStore()
    ref = store.save_record(CharacterRecord(id="k", name="Kael", aliases=["Kay"]), "notes")

    entity = store.load_record(ref)
    assert (entity.name, entity.aliases) == ("Kael", ("Kay",))
    assert store.load_extended_content(entity) == "notes"
    with pytest.raises(RecordValidationError):
        store.save_record(CharacterRecord(name=""))


def test_stores_implement_the_port(tmp_path):
    from adapters.entity_store import InMemoryEntityStore
    from ports.entity_store import EntityStore

    assert isinstance(JsonDirectoryEntityStore(tmp_path), EntityStore)
    assert isinstance(InMemoryEntityStore(), EntityStore)
