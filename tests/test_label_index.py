"""Tests for the label → documents reverse index."""

import pytest

from doclabels.host import DocumentUrlScheme
from doclabels.label_index import LabelIndex
from doclabels.types import DocumentRef

from conftest import FailingStorage, doc_url, seed


@pytest.fixture
def index(storage):
    return LabelIndex(storage)


def _by_id(refs):
    return {r.id: r for r in refs}


class TestFindDocumentsWithLabel:

    def test_empty_store(self, index):
        assert index.find_documents_with_label("Q1") == []

    def test_finds_matching_documents(self, index, storage):
        seed(storage, "docA", {"labels": ["Q1"], "title": "Report", "url": doc_url("docA")})
        seed(storage, "docB", {"labels": ["draft", "Q1"], "title": "Notes", "url": doc_url("docB")})
        seed(storage, "docC", {"labels": ["Q2"], "title": "Other", "url": doc_url("docC")})

        refs = _by_id(index.find_documents_with_label("Q1", "docA"))
        assert set(refs) == {"docA", "docB"}
        assert refs["docA"] == DocumentRef("docA", "Report", doc_url("docA"), is_current=True)
        assert refs["docB"] == DocumentRef("docB", "Notes", doc_url("docB"), is_current=False)

    def test_exact_case_sensitive_match(self, index, storage):
        seed(storage, "docA", {"labels": ["q1", "Q1 "], "title": "T", "url": "u"})
        assert index.find_documents_with_label("Q1") == []

    def test_duplicate_labels_listed_once(self, index, storage):
        seed(storage, "docA", {"labels": ["Q1", "Q1"], "title": "T", "url": "u"})
        assert len(index.find_documents_with_label("Q1")) == 1

    def test_legacy_record_gets_defaults(self, index, storage):
        seed(storage, "legacy1", ["Q1"])
        (ref,) = index.find_documents_with_label("Q1")
        assert ref.title == "Untitled"
        assert ref.url == "https://docs.google.com/document/d/legacy1/edit"

    def test_blank_title_and_url_get_defaults(self, index, storage):
        seed(storage, "docA", {"labels": ["Q1"], "title": "", "url": ""})
        (ref,) = index.find_documents_with_label("Q1")
        assert ref.title == "Untitled"
        assert ref.url == doc_url("docA")

    def test_custom_url_scheme(self, storage):
        scheme = DocumentUrlScheme(
            id_pattern=r"/notes/(\w+)", url_template="https://notes.example/notes/{id}",
        )
        seed(storage, "n1", ["Q1"])
        (ref,) = LabelIndex(storage, scheme).find_documents_with_label("Q1")
        assert ref.url == "https://notes.example/notes/n1"

    def test_malformed_entries_skipped(self, index, storage):
        seed(storage, "good", ["Q1"])
        seed(storage, "bad", "{not json")
        seed(storage, "wrong", {"labels": "Q1"})
        assert [r.id for r in index.find_documents_with_label("Q1")] == ["good"]

    def test_unrelated_keys_ignored(self, index, storage):
        storage.set("settings", '["Q1"]')
        seed(storage, "docA", ["Q1"])
        assert [r.id for r in index.find_documents_with_label("Q1")] == ["docA"]

    def test_no_current_document(self, index, storage):
        seed(storage, "docA", ["Q1"])
        (ref,) = index.find_documents_with_label("Q1")
        assert ref.is_current is False

    def test_read_failure_for_scan_is_empty(self, memory_storage):
        seed(memory_storage, "docA", ["Q1"])
        failing = FailingStorage(memory_storage)
        failing.fail_get = True
        assert LabelIndex(failing).find_documents_with_label("Q1") == []


class TestListLabels:

    def test_counts_documents_per_label(self, index, storage):
        seed(storage, "docA", ["Q1", "draft", "Q1"])
        seed(storage, "docB", {"labels": ["Q1"], "title": "B", "url": "u"})
        seed(storage, "bad", "nope")
        assert index.list_labels() == {"Q1": 2, "draft": 1}

    def test_sorted_by_label(self, index, storage):
        seed(storage, "docA", ["zeta", "alpha", "mid"])
        assert list(index.list_labels()) == ["alpha", "mid", "zeta"]

    def test_empty(self, index):
        assert index.list_labels() == {}
