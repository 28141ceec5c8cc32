"""Tests for slot text serialization and parsing."""

import json

import pytest

from slotstore.codec import parse_slot, record_length, serialize
from slotstore.errors import ParseError
from slotstore.models import FileRecord, new_group_id
from slotstore.partitioner import DEFAULT_CAPACITY, Slot


class TestFileRecord:

    def test_to_dict_omits_missing_group(self):
        assert FileRecord(name="a.txt", data="x").to_dict() == {"name": "a.txt", "data": "x"}

    def test_to_dict_includes_group(self):
        d = FileRecord(name="a.txt", data="x", group="g-12345678").to_dict()
        assert d == {"name": "a.txt", "data": "x", "group": "g-12345678"}

    def test_group_key_falls_back_to_name(self):
        assert FileRecord(name="a.txt", data="x").group_key == "a.txt"
        assert FileRecord(name="a.txt", data="x", group="g-1").group_key == "g-1"

    def test_new_group_id_format(self):
        gid = new_group_id()
        assert gid.startswith("g-")
        assert len(gid) == 10
        assert new_group_id() != gid


class TestSerialize:

    def test_compact_format(self):
        text = serialize([FileRecord(name="a.txt", data="data:text/plain;base64,aGk=")])
        assert text == '[{"name":"a.txt","data":"data:text/plain;base64,aGk="}]'

    def test_empty_list(self):
        assert serialize([]) == "[]"

    def test_non_ascii_names_not_escaped(self):
        text = serialize([FileRecord(name="résumé.txt", data="x")])
        assert "résumé.txt" in text

    @pytest.mark.parametrize("names", [
        ["a.txt"],
        ["a.txt", "b.png", "c.pdf"],
        ['quote".txt', "back\\slash.txt", "tab\t.txt", "ünïcode.txt"],
    ])
    def test_running_slot_length_matches_serialize(self, names):
        records = [FileRecord(name=n, data="data:x;base64," + "Q" * i, group=f"g-{i:08d}") for i, n in enumerate(names)]
        slot = Slot(capacity=DEFAULT_CAPACITY)
        for r in records:
            slot.add(r)
        assert slot.length == len(serialize(records))

    def test_record_length_is_single_object_length(self):
        r = FileRecord(name="a.txt", data="xyz", group="g-00000000")
        assert record_length(r) == len(serialize([r])) - 2


class TestParseSlot:

    def test_absent_and_blank_are_empty(self):
        assert parse_slot(None) == []
        assert parse_slot("") == []
        assert parse_slot("   \n") == []

    def test_parses_records_in_order(self):
        text = json.dumps([
            {"name": "a.txt", "data": "1"},
            {"name": "b.txt", "data": "2", "group": "g-2"},
        ])
        assert parse_slot(text) == [
            FileRecord(name="a.txt", data="1"),
            FileRecord(name="b.txt", data="2", group="g-2"),
        ]

    def test_round_trip(self):
        records = [FileRecord(name="a", data="1", group="g-1"), FileRecord(name="b", data="2")]
        assert parse_slot(serialize(records)) == records

    @pytest.mark.parametrize("text", [
        "not json",
        "[{",
        '{"name": "a", "data": "b"}',
        '["a"]',
        '[{"name": "a"}]',
        '[{"name": 1, "data": "b"}]',
        '[{"name": "a", "data": "b", "group": 7}]',
    ])
    def test_malformed_raises_parse_error(self, text):
        with pytest.raises(ParseError) as exc_info:
            parse_slot(text, "overflow")
        assert exc_info.value.slot == "overflow"
