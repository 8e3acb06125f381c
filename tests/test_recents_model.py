import logging

import pytest

from core.entry import encode
from core.errors import KeyCollision, LoadFailure, WriteFailure
from core.key_scheme import HashSuffixedScheme, IndexSuffixedScheme
from core.recents_model import LoadState, RecentEntryModel
from storage.stores import MemoryStore

from .conftest import LOCATION, PREFIX


def paths(model):
    return [entry.path for entry in model.entries]


def test_load_keeps_enumeration_order_and_filters_prefix(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()

    assert model.state is LoadState.LOADED
    assert isinstance(model.scheme, HashSuffixedScheme)
    assert paths(model) == ["/Users/me/Projects/Alpha", "/Users/me/Projects/Beta", "/Users/me/Projects/Gamma"]
    assert [entry.key_suffix for entry in model.entries] == ["-0_h1111", "-1_h2222", "-2_h3333"]
    assert hash_store.open_handles == 0


def test_load_replaces_previous_list(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    model.delete({0, 1, 2})
    model.load()

    assert len(model) == 3


def test_missing_namespace_is_silent(config):
    model = RecentEntryModel(MemoryStore(), config)

    assert model.load() == []
    assert model.state is LoadState.LOAD_FAILED
    assert not model.loaded_successfully


def test_save_after_missing_namespace_touches_nothing(config):
    store = MemoryStore()
    model = RecentEntryModel(store, config)
    model.load()
    store.calls.clear()

    assert model.save() is False
    assert store.calls == []


def test_save_before_load_touches_nothing(hash_store, config):
    model = RecentEntryModel(hash_store, config)

    assert model.save() is False
    assert hash_store.calls == []


def test_malformed_entry_is_skipped(config, caplog):
    store = MemoryStore(namespaces={LOCATION: {
        f"{PREFIX}-0_h1": b"/ok/first\0",
        f"{PREFIX}-1_h2": b"/bad/\xff\0",
        f"{PREFIX}-2_h3": b"\0",
        f"{PREFIX}-3_h4": b"/ok/second\0",
    }})
    model = RecentEntryModel(store, config)

    with caplog.at_level(logging.WARNING, logger="core.recents_model"):
        model.load()

    assert paths(model) == ["/ok/first", "/ok/second"]
    assert model.loaded_successfully
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 2


def test_unexpected_store_error_raises_load_failure(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    hash_store.fail_on.add("enumerate_keys")

    with pytest.raises(LoadFailure):
        model.revert()

    assert model.state is LoadState.LOAD_FAILED
    assert model.entries == []
    assert hash_store.open_handles == 0


def test_close_failure_during_revert_shuts_save_gate(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    model.delete({0})
    hash_store.fail_on.add("close")

    with pytest.raises(LoadFailure):
        model.revert()

    assert model.state is LoadState.LOAD_FAILED
    assert model.entries == []
    hash_store.calls.clear()
    assert model.save() is False
    assert hash_store.calls == []


def test_close_failure_on_first_load_raises_load_failure(hash_store, config):
    hash_store.fail_on.add("close")
    model = RecentEntryModel(hash_store, config)

    with pytest.raises(LoadFailure):
        model.load()
    assert not model.loaded_successfully


def test_revert_discards_edits(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    first = list(model.load())
    model.delete({1})
    model.move_up(1)

    assert model.revert() == first
    assert model.revert() == first


def test_revert_can_close_the_save_gate(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    del hash_store.namespaces[LOCATION]
    model.revert()

    assert model.state is LoadState.LOAD_FAILED
    assert model.save() is False


def test_delete_single_and_multiple(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()

    assert model.delete(set()) == 0
    assert len(model) == 3
    assert model.delete({1}) == 1
    assert paths(model) == ["/Users/me/Projects/Alpha", "/Users/me/Projects/Gamma"]

    model.load()
    assert model.delete([0, 2, 2, 9]) == 2
    assert paths(model) == ["/Users/me/Projects/Beta"]


@pytest.mark.parametrize("index", [0, 1, 2])
def test_delete_removes_exactly_one(hash_store, config, index):
    model = RecentEntryModel(hash_store, config)
    model.load()
    removed = model.entries[index]
    model.delete({index})

    assert len(model) == 2
    assert removed not in model.entries


def test_move_up_then_down_restores_order(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    original = list(model.entries)

    assert model.move_up(2) == 1
    assert paths(model)[1] == "/Users/me/Projects/Gamma"
    assert model.move_down(1) == 2
    assert model.entries == original


def test_move_keeps_key_identity(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    model.move_down({0})

    assert [e.key_suffix for e in model.entries] == ["-1_h2222", "-0_h1111", "-2_h3333"]


@pytest.mark.parametrize("selection", [set(), {0, 1}, [1, 2], {5}, -1])
def test_moves_with_bad_selection_are_ignored(hash_store, config, selection):
    model = RecentEntryModel(hash_store, config)
    model.load()
    original = list(model.entries)

    assert model.move_up(selection) is None
    assert model.move_down(selection) is None
    assert model.entries == original


def test_moves_at_edges_are_ignored(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    original = list(model.entries)

    assert model.move_up(0) is None
    assert model.move_down(2) is None
    assert model.entries == original


def test_index_save_after_delete_is_dense(index_store, config):
    model = RecentEntryModel(index_store, config)
    model.load()
    assert isinstance(model.scheme, IndexSuffixedScheme)

    model.delete({1})
    assert model.save() is True

    assert index_store.namespaces[LOCATION] == {
        f"{PREFIX}0": b"/work/one\0",
        f"{PREFIX}1": b"/work/three\0",
    }


def test_index_save_follows_new_order(index_store, config):
    model = RecentEntryModel(index_store, config)
    model.load()
    model.move_up(2)
    model.save()

    values = index_store.namespaces[LOCATION]
    assert list(values) == [f"{PREFIX}0", f"{PREFIX}1", f"{PREFIX}2"]
    assert values[f"{PREFIX}1"] == b"/work/three\0"
    assert values[f"{PREFIX}2"] == b"/work/two\0"


def test_hash_save_rewrites_keys_and_keeps_other_values(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    model.move_up(2)
    model.delete({0})
    hash_store.calls.clear()

    assert model.save() is True

    values = hash_store.namespaces[LOCATION]
    assert values == {
        "UnityEditorLastLayout_h9999": b"Default\0",
        f"{PREFIX}-2_h3333": b"/Users/me/Projects/Gamma\0",
        f"{PREFIX}-1_h2222": b"/Users/me/Projects/Beta\0",
    }
    deletes = [key for op, key in hash_store.calls if op == "delete_value"]
    assert sorted(deletes) == [f"{PREFIX}-0_h1111", f"{PREFIX}-1_h2222", f"{PREFIX}-2_h3333"]
    assert hash_store.open_handles == 0


def test_save_then_load_round_trip(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    model.move_down(0)
    model.save()

    reloaded = RecentEntryModel(hash_store, config)
    reloaded.load()
    assert sorted(reloaded.entries, key=lambda e: e.path) == sorted(model.entries, key=lambda e: e.path)


def test_save_preserves_missing_terminator(config):
    store = MemoryStore(namespaces={LOCATION: {f"{PREFIX}0": b"/work/raw"}})
    model = RecentEntryModel(store, config)
    model.load()
    model.save()

    assert store.namespaces[LOCATION] == {f"{PREFIX}0": b"/work/raw"}


def test_save_failure_is_raised_and_handle_released(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    hash_store.fail_on.add("set_value")

    with pytest.raises(WriteFailure):
        model.save()

    assert hash_store.open_handles == 0


def test_unwritable_namespace_raises_write_failure(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    hash_store.read_only = True
    hash_store.calls.clear()

    with pytest.raises(WriteFailure):
        model.save()
    assert hash_store.mutations() == []


def test_colliding_keys_abort_before_any_write(config):
    store = MemoryStore(namespaces={LOCATION: {
        f"{PREFIX}-x-1": b"/a/one\0",
        f"{PREFIX}-y-1": b"/a/two\0",
    }})
    model = RecentEntryModel(store, config)
    model.load()
    store.calls.clear()

    with pytest.raises(KeyCollision):
        model.save()
    assert store.calls == []


def test_display_rows_follow_current_order(hash_store, config):
    model = RecentEntryModel(hash_store, config)
    model.load()
    model.move_down(0)

    assert [row.name for row in model.get_display_rows()] == ["Beta", "Alpha", "Gamma"]
    assert model.entries[1] == RecentEntryModel(hash_store, config).load()[0]
    assert encode(model.entries[0]) == b"/Users/me/Projects/Beta\0"
