"""Tests for store configuration and the Labels facade."""

import pytest

from doclabels.api import Labels
from doclabels.config import (
    CONFIG_FILENAME,
    StoreConfig,
    StorageConfig,
    DocumentsConfig,
    get_default_store_path,
    load_config,
    load_or_create_config,
    save_config,
)
from doclabels.storage import MemoryStorage, SqliteStorage

from conftest import doc_url, seed


class TestConfig:

    def test_creates_default_config(self, tmp_path):
        config = load_or_create_config(tmp_path)
        assert (tmp_path / CONFIG_FILENAME).exists()
        assert config.storage.backend == "sqlite"
        assert config.storage.quota_bytes == 0
        assert config.documents.key_prefix == "gd-labels-"

    def test_round_trip(self, tmp_path):
        config = StoreConfig(
            path=tmp_path,
            storage=StorageConfig(backend="memory", quota_bytes=5_000_000),
            documents=DocumentsConfig(
                key_prefix="notes-",
                id_pattern=r"/n/(\w+)",
                url_template="https://n.example/n/{id}",
            ),
        )
        save_config(config)
        loaded = load_config(tmp_path)
        assert loaded.storage == config.storage
        assert loaded.documents == config.documents
        assert loaded.created == config.created

    def test_missing_sections_use_defaults(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text('[store]\nversion = 1\n')
        config = load_config(tmp_path)
        assert config.storage == StorageConfig()
        assert config.documents == DocumentsConfig()

    def test_newer_version_rejected(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text('[store]\nversion = 99\n')
        with pytest.raises(ValueError, match="newer than supported"):
            load_config(tmp_path)

    def test_unknown_backend_rejected(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text('[storage]\nbackend = "redis"\n')
        with pytest.raises(ValueError, match="Unknown storage backend"):
            load_config(tmp_path)

    def test_negative_quota_rejected(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text('[storage]\nquota_bytes = -1\n')
        with pytest.raises(ValueError, match="quota_bytes"):
            load_config(tmp_path)

    def test_missing_config(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path)

    def test_default_store_path_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DOCLABELS_STORE_PATH", str(tmp_path / "store"))
        assert get_default_store_path() == (tmp_path / "store").resolve()

    def test_default_store_path_home(self, monkeypatch):
        monkeypatch.delenv("DOCLABELS_STORE_PATH", raising=False)
        assert get_default_store_path().name == ".doclabels"

    def test_bad_id_pattern_rejected(self):
        with pytest.raises(ValueError, match="capture group"):
            DocumentsConfig(id_pattern=r"/document/d/\w+").scheme()


class TestLabels:

    @pytest.fixture
    def labels(self, tmp_path):
        lb = Labels(tmp_path)
        yield lb
        lb.close()

    def test_uses_sqlite_by_default(self, labels, tmp_path):
        assert isinstance(labels.storage, SqliteStorage)
        assert (tmp_path / "labels.db").exists()
        assert (tmp_path / "doclabels-ops.log").exists()

    def test_memory_backend_from_config(self, tmp_path):
        config = StoreConfig(path=tmp_path, storage=StorageConfig(backend="memory"))
        with Labels(config=config) as lb:
            assert isinstance(lb.storage, MemoryStorage)

    def test_injected_storage(self, tmp_path):
        storage = MemoryStorage()
        with Labels(tmp_path, storage=storage) as lb:
            session = lb.open_session("docA", title="Report")
            lb.store.add_label(session, "Q1")
        assert storage.get("gd-labels-docA") is not None

    def test_open_session_defaults(self, labels):
        session = labels.open_session("docA")
        assert session.title == "Untitled"
        assert session.url == doc_url("docA")
        assert session.labels == []

    def test_open_session_keeps_stored_metadata(self, labels):
        seed(labels.storage, "docA", {"labels": ["a"], "title": "Stored", "url": "https://s"})
        session = labels.open_session("docA")
        assert session.title == "Stored"
        assert session.url == "https://s"
        assert session.labels == ["a"]

    def test_open_session_host_title_wins(self, labels):
        seed(labels.storage, "docA", {"labels": ["a"], "title": "Stored", "url": "https://s"})
        session = labels.open_session("docA", title="Live title")
        labels.store.add_label(session, "b")
        assert labels.get("docA").title == "Live title"

    def test_open_session_empty_id(self, labels):
        with pytest.raises(ValueError):
            labels.open_session("")

    def test_session_for_url(self, labels):
        session = labels.session_for_url(doc_url("abc_123-X"), title="T")
        assert session.document_id == "abc_123-X"
        assert session.url == doc_url("abc_123-X")

    def test_session_for_foreign_url(self, labels):
        with pytest.raises(ValueError, match="Not a document URL"):
            labels.session_for_url("https://example.com/")

    def test_find_sorted_by_title(self, labels):
        seed(labels.storage, "d1", {"labels": ["Q1"], "title": "beta", "url": "u1"})
        seed(labels.storage, "d2", {"labels": ["Q1"], "title": "Alpha", "url": "u2"})
        seed(labels.storage, "d3", {"labels": ["Q1"], "title": "gamma", "url": "u3"})
        assert [r.title for r in labels.find("Q1")] == ["Alpha", "beta", "gamma"]

    def test_export_import_between_stores(self, labels, tmp_path):
        seed(labels.storage, "docA", {"labels": ["Q1"], "title": "Report", "url": doc_url("docA")})
        seed(labels.storage, "docB", {"labels": ["Q1"], "title": "Notes", "url": doc_url("docB")})
        payload = labels.export_label("Q1")

        with Labels(tmp_path / "other") as other:
            seed(other.storage, "docA", {"labels": ["Q1"], "title": "Report", "url": doc_url("docA")})
            result = other.import_label(payload.to_json())
            assert result.imported_count == 1
            assert other.list_labels() == {"Q1": 2}

    def test_import_reaches_active_session_via_watcher(self, labels):
        session = labels.open_session("docA", title="Report")
        watcher = labels.watch(session)
        seen = []
        watcher.on_external_change(seen.append)

        result = labels.import_label({"label": "Q1", "documents": [{"url": doc_url("docA")}]})
        assert "docA" in result.document_ids
        assert watcher.check() is True
        assert seen == [["Q1"]]
        assert session.labels == ["Q1"]

    def test_quota_from_config(self, tmp_path):
        config = StoreConfig(path=tmp_path, storage=StorageConfig(quota_bytes=150))
        with Labels(config=config) as lb:
            session = lb.open_session("docA", title="R")
            lb.store.add_label(session, "fits")
            lb.store.add_label(session, "x" * 100)
            # Dropped write; memory copy still has it
            assert session.labels == ["fits", "x" * 100]
            assert lb.get("docA").labels == ["fits"]
