import json
from unittest.mock import patch

import pytest

from bot.datastore import ChoiceStore, load_json, save_json


def test_save_then_load(store):
    store.save("3")
    assert store.load() == "3"


def test_clear_then_load(store):
    store.save("3")
    store.clear()
    assert store.load() is None
    assert not store.path.exists()


def test_last_write_wins(store):
    store.save("2")
    store.save("5")
    assert store.load() == "5"


def test_clear_is_idempotent(store):
    store.clear()
    store.clear()
    assert store.load() is None


def test_file_format(store):
    store.save("4")
    assert json.loads(store.path.read_text()) == {"choice": "4"}


def test_load_always_reads_disk(store):
    """A second store on the same file (i.e. another process) sees the write."""
    store.save("1")
    other = ChoiceStore(store.path)
    assert other.load() == "1"
    other.save("6")
    assert store.load() == "6"


def test_corrupt_file_reads_as_no_choice(store):
    store.path.write_text("{not json")
    assert store.load() is None


def test_missing_choice_key(store):
    store.path.write_text(json.dumps({"something": "else"}))
    assert store.load() is None


def test_save_json_leaves_no_temp_files(tmp_path):
    target = tmp_path / "nested" / "state.json"
    save_json(target, {"a": 1})
    save_json(target, {"a": 2})
    assert load_json(target, None) == {"a": 2}
    assert [p.name for p in target.parent.iterdir()] == ["state.json"]


def test_load_json_default(tmp_path):
    assert load_json(tmp_path / "missing.json", {"rooms": []}) == {"rooms": []}


def _half_written(obj, f, **kwargs):
    f.write('{"cho')
    raise OSError("disk full")


@pytest.mark.parametrize("target, failure", [
    ("bot.datastore.json.dump", _half_written),
    ("bot.datastore.os.replace", OSError("power cut")),
])
def test_failed_save_keeps_previous_choice(store, target, failure):
    """A write that dies midway leaves the old record intact and no temp file behind."""
    store.save("2")
    with patch(target, side_effect=failure):
        with pytest.raises(OSError):
            store.save("5")

    assert store.load() == "2"
    assert [p.name for p in store.path.parent.iterdir()] == ["booking_state.json"]
