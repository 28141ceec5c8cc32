"""Shared test fixtures for the slotstore test suite."""

import pytest

from slotstore.models import FileRecord
from slotstore.partitioner import Partitioner
from slotstore.store import RecordStore
from tests.helpers import text_payload


@pytest.fixture
def small_partitioner():
    """Partitioner with a 1000-char capacity per slot."""
    return Partitioner(capacity=1000)


@pytest.fixture
def empty_store():
    return RecordStore()


@pytest.fixture
def store_with_files():
    """Store holding three small, whole text files."""
    return RecordStore([
        FileRecord(name="a.txt", data=text_payload("alpha"), group="g-aaaaaaaa"),
        FileRecord(name="b.txt", data=text_payload("bravo"), group="g-bbbbbbbb"),
        FileRecord(name="c.txt", data=text_payload("charlie"), group="g-cccccccc"),
    ])
