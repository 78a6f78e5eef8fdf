"""Tests for botapidocs.models — decoding the specification document."""

import pytest

from botapidocs.models import Field, Method, Snapshot, Type

from conftest import SAMPLE_DOCUMENT


class TestFromDocument:
    def test_sample_document(self):
        snap = Snapshot.from_document(SAMPLE_DOCUMENT)
        assert set(snap.methods) == {"sendMessage", "getMe"}
        assert set(snap.types) == {"ChatMember", "Message"}
        assert snap.size == 4

    def test_method_fields_decoded(self):
        snap = Snapshot.from_document(SAMPLE_DOCUMENT)
        m = snap.methods["sendMessage"]
        assert isinstance(m, Method)
        assert m.returns == ("Message",)
        assert m.fields[0] == Field(
            name="chat_id",
            types=("Integer", "String"),
            required=True,
            description="Unique identifier for the target chat",
        )

    def test_type_without_fields(self):
        snap = Snapshot.from_document(SAMPLE_DOCUMENT)
        t = snap.types["ChatMember"]
        assert isinstance(t, Type)
        assert t.fields == ()

    def test_missing_sections_are_empty(self):
        snap = Snapshot.from_document({"version": "x"})
        assert dict(snap.methods) == {}
        assert dict(snap.types) == {}

    def test_unknown_top_level_keys_ignored(self):
        snap = Snapshot.from_document({"methods": {}, "types": {}, "extra": [1, 2]})
        assert snap.size == 0

    def test_name_defaults_to_key(self):
        snap = Snapshot.from_document({"methods": {"getMe": {"href": "h"}}})
        assert snap.methods["getMe"].name == "getMe"

    def test_mappings_are_read_only(self):
        snap = Snapshot.from_document(SAMPLE_DOCUMENT)
        with pytest.raises(TypeError):
            snap.methods["x"] = None  # type: ignore[index]


class TestShapeErrors:
    @pytest.mark.parametrize(
        "doc",
        [
            [],
            {"methods": []},
            {"types": "nope"},
            {"methods": {"getMe": "nope"}},
            {"methods": {"getMe": {"description": "not a list"}}},
            {"methods": {"getMe": {"returns": [1, 2]}}},
            {"types": {"User": {"fields": {"a": 1}}}},
            {"types": {"User": {"fields": [{"name": "id", "required": "yes"}]}}},
            {"types": {"User": {"fields": ["id"]}}},
        ],
    )
    def test_mismatch_raises_value_error(self, doc):
        with pytest.raises(ValueError):
            Snapshot.from_document(doc)

    @pytest.mark.parametrize(
        "doc",
        [
            {"methods": ""},
            {"methods": 0},
            {"methods": False},
            {"types": []},
            {"types": 0},
            {"methods": {}, "types": ""},
        ],
    )
    def test_falsy_wrong_type_not_treated_as_empty(self, doc):
        with pytest.raises(ValueError, match="must be an object"):
            Snapshot.from_document(doc)

    @pytest.mark.parametrize("doc", [{}, {"methods": None, "types": None}])
    def test_missing_or_null_sections_are_empty(self, doc):
        assert Snapshot.from_document(doc).size == 0


class TestGeneration:
    def test_with_generation_shares_maps(self):
        snap = Snapshot.from_document(SAMPLE_DOCUMENT)
        stamped = snap.with_generation(7)
        assert stamped.generation == 7
        assert stamped.methods is snap.methods
        assert stamped.types is snap.types
