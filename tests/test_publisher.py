"""Tests for the publishing service and archive digests."""

import hashlib
import logging

import pytest

from chartindex.core.config import IndexSettings
from chartindex.domain.errors import NotFound
from chartindex.domain.models import ChartMetadata
from chartindex.services.digest import digest_file
from chartindex.services.publisher import ChartPublisher
from chartindex.storage.file_index_store import FileIndexStore


@pytest.fixture
def archive(tmp_path):
    path = tmp_path / "build" / "nginx-1.0.0.tgz"
    path.parent.mkdir()
    path.write_bytes(b"chart archive bytes" * 1000)
    return path


@pytest.fixture
def publisher(tmp_path):
    settings = IndexSettings(
        data_dir=tmp_path / "data",
        primary_base_url="s3://bucket/charts",
        mirror_base_url="https://charts.example.com/",
    )
    return ChartPublisher(FileIndexStore(settings.index_path), settings)


def test_digest_file(archive):
    assert digest_file(archive) == hashlib.sha256(archive.read_bytes()).hexdigest()


def test_digest_of_empty_file(tmp_path):
    path = tmp_path / "empty.tgz"
    path.write_bytes(b"")
    assert digest_file(path) == hashlib.sha256(b"").hexdigest()


def test_publish_computes_digest_and_urls(publisher, archive):
    record = publisher.publish(ChartMetadata(name="nginx", version="1.0.0"), archive)

    assert record.digest == digest_file(archive)
    assert record.primary_urls == ["s3://bucket/charts/nginx-1.0.0.tgz"]
    assert record.mirror_urls == ["https://charts.example.com/nginx-1.0.0.tgz"]
    assert publisher.store.load().versions("nginx") == [record]


def test_publish_with_given_digest(publisher, tmp_path):
    # The archive does not need to exist when the digest is supplied.
    record = publisher.publish(
        ChartMetadata(name="nginx", version="1.0.0"),
        tmp_path / "missing" / "nginx-1.0.0.tgz",
        digest="precomputed",
    )

    assert record.digest == "precomputed"


def test_republish_replaces(publisher, archive):
    publisher.publish(ChartMetadata(name="nginx", version="1.0.0"), archive, digest="a")
    publisher.publish(ChartMetadata(name="nginx", version="1.0"), archive, digest="b")

    [record] = publisher.store.load().versions("nginx")
    assert record.digest == "b"


def test_unpublish(publisher, archive):
    publisher.publish(ChartMetadata(name="nginx", version="1.0.0"), archive)

    removed = publisher.unpublish("nginx", "1.0.0")

    assert removed.version == "1.0.0"
    assert publisher.store.load().versions("nginx") == []


def test_unpublish_missing(publisher):
    with pytest.raises(NotFound):
        publisher.unpublish("nginx", "1.0.0")


def test_publish_logs(publisher, archive, caplog):
    with caplog.at_level(logging.INFO, logger="chartindex.services.publisher"):
        publisher.publish(ChartMetadata(name="nginx", version="1.0.0"), archive)

    assert "Published nginx 1.0.0" in caplog.text
