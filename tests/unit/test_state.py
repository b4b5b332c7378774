"""Tests for keypaths and the state store."""

import asyncio
import threading
import typing

import pytest

from jsonui.actions import create_engine
from jsonui.core.errors import StateTypeError
from jsonui.document import Action
from jsonui.state import StateStore, format_keypath, parse_keypath
from jsonui.value import Value


@pytest.mark.unit
class TestKeypath:
    """Keypath parsing."""

    @pytest.mark.parametrize(
        "path,segments",
        [
            ("counter", ("counter",)),
            ("user.profile.name", ("user", "profile", "name")),
            ("items[0].title", ("items", 0, "title")),
            ("items.0.title", ("items", "0", "title")),
            ("grid[1][2]", ("grid", 1, 2)),
            ("", ()),
        ],
    )
    def test_parse(self, path, segments):
        assert parse_keypath(path) == segments

    def test_malformed_bracket_is_literal(self):
        assert parse_keypath("a[x]") == ("a[x]",)

    def test_format_round_trip(self):
        assert format_keypath(parse_keypath("items[0].title")) == "items[0].title"


@pytest.mark.unit
class TestReadsAndWrites:
    """Path reads and writes."""

    def test_missing_reads_null(self, store):
        assert store.get("a.b.c").is_null

    def test_set_materializes_objects(self, store):
        store.set("user.profile.name", "Ada")
        assert store.get_python("user") == {"profile": {"name": "Ada"}}

    def test_array_index_paths(self):
        store = StateStore({"items": [{"done": False}, {"done": False}]})
        store.set("items[1].done", True)
        store.set("items.0.done", True)
        assert store.get_python("items") == [{"done": True}, {"done": True}]

    def test_index_equal_to_length_appends(self):
        store = StateStore({"items": [1]})
        store.set("items[1]", 2)
        assert store.get_python("items") == [1, 2]

    def test_out_of_range_write_raises(self):
        store = StateStore({"items": [1]})
        with pytest.raises(StateTypeError):
            store.set("items[5]", 2)
        assert store.get_python("items") == [1]

    def test_write_into_scalar_raises(self):
        store = StateStore({"count": 1})
        with pytest.raises(StateTypeError):
            store.set("count.value", 2)
        assert store.get_python("count") == 1

    def test_toggle(self):
        store = StateStore({"on": True, "label": "x"})
        store.toggle("on")
        store.toggle("missing")
        assert store.get_python("on") is False
        assert store.get_python("missing") is True
        with pytest.raises(StateTypeError):
            store.toggle("label")

    def test_append_requires_array(self, store):
        with pytest.raises(StateTypeError):
            store.append("missing", 1)
        store.set("items", [])
        store.append("items", {"id": 1})
        assert store.get_python("items") == [{"id": 1}]

    def test_remove(self):
        store = StateStore({"a": {"b": 1, "c": 2}})
        assert store.remove("a.b") is True
        assert store.remove("a.b") is False
        assert store.get_python("a") == {"c": 2}

    def test_initial_must_be_object(self):
        with pytest.raises(StateTypeError):
            StateStore([1, 2])  # type: ignore[arg-type]


@pytest.mark.unit
class TestLocalScopes:
    """Per-owner local state."""

    def test_scopes_are_isolated(self, store):
        first = store.declare_scope("row[0]", {"expanded": False})
        second = store.declare_scope("row[1]", {"expanded": False})

        first.toggle("expanded")

        assert first.get("expanded").as_bool() is True
        assert second.get("expanded").as_bool() is False
        assert store.get("expanded").is_null

    def test_redeclare_keeps_values(self, store):
        scope = store.declare_scope("card", {"count": 0})
        scope.set("count", 5)
        store.declare_scope("card", {"count": 0})
        assert scope.get("count") == Value.of(5)

    def test_undeclared_scope_reads_null(self, store):
        assert store.get("x", scope="nobody").is_null
        assert not store.has_scope("nobody")


@pytest.mark.unit
class TestObservers:
    """Change notification and dirty tracking."""

    def test_observer_receives_changes(self, store):
        changes = []
        store.observe(changes.append)

        store.set("count", 1)
        store.scope("card").set("open", True)

        assert [c.qualified_path for c in changes] == ["count", "local.card.open"]
        assert changes[0].old.is_null
        assert changes[0].new == Value.of(1)

    def test_failing_write_does_not_notify(self):
        store = StateStore({"count": 1})
        changes = []
        store.observe(changes.append)
        with pytest.raises(StateTypeError):
            store.append("count", 2)
        assert changes == []

    def test_failing_observer_is_isolated(self, store):
        seen = []

        def broken(change):
            raise RuntimeError("observer bug")

        store.observe(broken)
        store.observe(seen.append)
        store.set("count", 1)

        assert len(seen) == 1
        assert store.get_python("count") == 1

    def test_remove_observer(self, store):
        changes = []
        token = store.observe(changes.append)
        store.remove_observer(token)
        store.set("count", 1)
        assert changes == []

    def test_dirty_paths(self, store):
        store.set("a", 1)
        store.set("b", 2)
        assert store.consume_dirty_paths() == {"a", "b"}
        assert store.dirty_paths == frozenset()

    def test_snapshot_restore(self, store):
        store.set("count", 1)
        snapshot = store.snapshot()
        store.set("count", 2)
        store.restore(snapshot)
        assert store.get_python("count") == 1

    def test_dirty_paths_annotation_is_builtin_set(self):
        hints = typing.get_type_hints(StateStore.consume_dirty_paths)
        assert hints["return"] == set[str]


@pytest.mark.unit
class TestSeed:
    """Seeding global state from a document."""

    def test_existing_keys_win(self):
        store = StateStore({"count": 5})
        added = store.seed({"count": 0, "title": "Counter"})
        assert added == ["title"]
        assert store.get_python("count") == 5
        assert store.get_python("title") == "Counter"

    def test_dotted_key_is_literal(self, store):
        store.seed({"a.b": 1})
        assert store.values.get("a.b") == Value.of(1)
        assert store.get("a").is_null

    def test_seed_notifies(self, store):
        changes = []
        store.observe(changes.append)
        store.seed({"x": 1, "y": 2})
        assert [change.path for change in changes] == ["x", "y"]
        assert store.seed({"x": 3}) == []


# ============================================================================
# Concurrency
# ============================================================================

@pytest.mark.unit
class TestConcurrency:
    """No lost writes and no torn reads under concurrent access."""

    THREADS = 8
    ROUNDS = 250

    def _run_threads(self, target):
        threads = [threading.Thread(target=target) for _ in range(self.THREADS)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    def test_concurrent_updates_are_not_lost(self):
        store = StateStore({"count": 0})

        def increment():
            for _ in range(self.ROUNDS):
                store.update("count", lambda current: current.as_int() + 1)

        self._run_threads(increment)

        assert store.get_python("count") == self.THREADS * self.ROUNDS

    def test_concurrent_appends_are_not_lost(self):
        store = StateStore({"items": []})

        def append():
            for i in range(self.ROUNDS):
                store.append("items", i)

        self._run_threads(append)

        assert len(store.get_python("items")) == self.THREADS * self.ROUNDS

    def test_readers_never_see_partial_writes(self):
        store = StateStore({"pair": {"a": 0, "b": 0}})
        torn = []
        done = threading.Event()

        def write():
            for i in range(self.ROUNDS):
                store.set("pair", {"a": i, "b": i})
                store.set("pair", {"a": -i, "b": -i})

        def read():
            while not done.is_set():
                pair = store.values.get("pair")
                if pair.get("a") != pair.get("b"):
                    torn.append(pair)

        reader = threading.Thread(target=read)
        reader.start()
        self._run_threads(write)
        done.set()
        reader.join()

        assert torn == []
        assert store.get("pair.a") == store.get("pair.b")

    async def test_concurrent_action_runs(self):
        engine = create_engine()
        store = StateStore({"count": 0, "log": []})
        context = engine.context(store)
        increment = Action.create("setState", {"path": "count", "value": {"$expr": "${count} + 1"}})
        record = Action.create("appendToArray", {"path": "log", "value": {"$expr": "count"}})

        results = await asyncio.gather(
            *(engine.run(action, context) for _ in range(50) for action in (increment, record))
        )

        assert all(result.success for result in results)
        assert store.get_python("count") == 50
        assert len(store.get_python("log")) == 50
