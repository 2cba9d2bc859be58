"""Tests for the file-backed index store."""

import threading

import pytest

from chartindex.domain.catalog import Catalog
from chartindex.domain.errors import InvalidVersion, NotFound, ParseError
from chartindex.domain.models import ChartMetadata
from chartindex.storage.file_index_store import FileIndexStore


def _metadata(version: str = "1.0.0", name: str = "foo") -> ChartMetadata:
    return ChartMetadata(name=name, version=version)


def test_load_missing_file_is_empty(tmp_path):
    store = FileIndexStore(tmp_path / "index.yaml")

    catalog = store.load()

    assert len(catalog) == 0
    assert not (tmp_path / "index.yaml").exists()


def test_save_and_load(tmp_path):
    store = FileIndexStore(tmp_path / "repo" / "index.yaml")
    catalog = Catalog.new()
    catalog.add_or_replace(_metadata(), "foo-1.0.0.tgz", "https://example.com/charts")

    store.save(catalog)
    loaded = FileIndexStore(tmp_path / "repo" / "index.yaml").load()

    assert loaded.versions("foo") == catalog.versions("foo")


def test_save_leaves_no_temp_files(tmp_path):
    store = FileIndexStore(tmp_path / "index.yaml")

    store.save(Catalog.new())
    store.save(Catalog.new())

    assert [p.name for p in tmp_path.iterdir()] == ["index.yaml"]


def test_add_or_replace_persists(tmp_path):
    store = FileIndexStore(tmp_path / "index.yaml")

    record = store.add_or_replace(
        _metadata(),
        "foo-1.0.0.tgz",
        primary_base_url="s3://bucket/charts",
        digest="sha",
    )

    [stored] = store.load().versions("foo")
    assert stored == record
    assert stored.primary_urls == ["s3://bucket/charts/foo-1.0.0.tgz"]


def test_delete_persists(tmp_path):
    store = FileIndexStore(tmp_path / "index.yaml")
    store.add_or_replace(_metadata("1.0.0"), "foo-1.0.0.tgz")
    store.add_or_replace(_metadata("2.0.0"), "foo-2.0.0.tgz")

    removed = store.delete("foo", "1.0.0")

    assert removed.version == "1.0.0"
    assert [r.version for r in store.load().versions("foo")] == ["2.0.0"]


def test_failed_mutation_is_not_saved(tmp_path):
    path = tmp_path / "index.yaml"
    store = FileIndexStore(path)
    store.add_or_replace(_metadata(), "foo-1.0.0.tgz")
    before = path.read_bytes()

    with pytest.raises(NotFound):
        store.delete("foo", "9.9.9")
    with pytest.raises(InvalidVersion):
        store.add_or_replace(_metadata("bad version"), "foo.tgz")

    assert path.read_bytes() == before


def test_edit_does_not_save_when_block_raises(tmp_path):
    path = tmp_path / "index.yaml"
    store = FileIndexStore(path)

    with pytest.raises(RuntimeError):
        with store.edit() as catalog:
            catalog.add_or_replace(_metadata(), "foo-1.0.0.tgz")
            raise RuntimeError("abort")

    assert not path.exists()


def test_corrupt_index_raises_parse_error(tmp_path):
    path = tmp_path / "index.yaml"
    path.write_text("entries: [", encoding="utf-8")

    with pytest.raises(ParseError):
        FileIndexStore(path).load()


def test_concurrent_writers_do_not_lose_updates(tmp_path):
    store = FileIndexStore(tmp_path / "index.yaml")
    versions = [f"1.{i}.0" for i in range(10)]

    threads = [
        threading.Thread(
            target=store.add_or_replace,
            args=(_metadata(v), f"foo-{v}.tgz"),
        )
        for v in versions
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stored = {r.version for r in store.load().versions("foo")}
    assert stored == set(versions)
