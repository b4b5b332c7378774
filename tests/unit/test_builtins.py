"""Tests for built-in state, array and presentation actions."""

import pytest

from jsonui.actions import ActionPhase, AlertButtonStyle, NavigationPresentation, create_engine
from jsonui.core.errors import ExecutionErrorKind
from jsonui.document import Action
from jsonui.state import StateStore
from jsonui.value import Value


def inline(kind: str, **parameters) -> Action:
    return Action.model_validate({"type": kind, **parameters})


@pytest.fixture
def builtins_engine():
    """Engine with built-ins; no request is ever sent."""
    return create_engine()


async def run(engine, store, kind, presenters=None, scope_owner=None, **parameters):
    context = engine.context(store)
    if presenters is not None:
        context = engine.context(store, presenters=presenters)
    if scope_owner is not None:
        context = context.with_capture(scope_owner)
    return await engine.run(inline(kind, **parameters), context)


# ============================================================================
# setState / toggleState
# ============================================================================

@pytest.mark.unit
class TestStateActions:
    """Global and local state writes."""

    async def test_set_state_literal(self, builtins_engine, store):
        result = await run(builtins_engine, store, "setState", path="user.name", value="Ada")
        assert result.success
        assert store.get_python("user.name") == "Ada"

    async def test_set_state_expression(self, builtins_engine):
        store = StateStore({"count": 4})
        await run(builtins_engine, store, "setState", path="count", value={"$expr": "${count} + 1"})
        assert store.get_python("count") == 5

    async def test_set_state_local(self, builtins_engine, store):
        store.declare_scope("card", {"open": False})
        await run(builtins_engine, store, "setState", scope_owner="card", path="local.open", value=True)

        assert store.scope("card").get("open") == Value.of(True)
        assert store.get("local").is_null

    async def test_local_prefix_without_scope_is_global(self, builtins_engine, store):
        await run(builtins_engine, store, "setState", path="local.open", value=True)
        assert store.get_python("local.open") is True

    async def test_toggle_state(self, builtins_engine):
        store = StateStore({"menu": True})
        await run(builtins_engine, store, "toggleState", path="menu")
        await run(builtins_engine, store, "toggleState", path="fresh")
        assert store.get_python("menu") is False
        assert store.get_python("fresh") is True

    async def test_toggle_non_bool_fails(self, builtins_engine):
        store = StateStore({"name": "Ada"})
        result = await run(builtins_engine, store, "toggleState", path="name")
        assert result.error_kind == ExecutionErrorKind.EXECUTION_FAILED.value
        assert store.get_python("name") == "Ada"


# ============================================================================
# Array actions
# ============================================================================

@pytest.mark.unit
class TestArrayActions:
    """Array mutations are single atomic updates."""

    async def test_append(self, builtins_engine):
        store = StateStore({"items": [1]})
        await run(builtins_engine, store, "appendToArray", path="items", value={"$expr": "items.count + 1"})
        assert store.get_python("items") == [1, 2]

    async def test_append_to_missing_fails(self, builtins_engine, store):
        result = await run(builtins_engine, store, "appendToArray", path="items", value=1)
        assert not result.success
        assert result.failed_in == ActionPhase.EXECUTING
        assert store.get("items").is_null

    async def test_remove_by_index(self, builtins_engine):
        store = StateStore({"items": ["a", "b", "c"]})
        await run(builtins_engine, store, "removeFromArray", path="items", index=1)
        await run(builtins_engine, store, "removeFromArray", path="items", index=-1)
        assert store.get_python("items") == ["a"]

    async def test_remove_by_value_removes_all(self, builtins_engine):
        store = StateStore({"tags": ["x", "y", "x"]})
        await run(builtins_engine, store, "removeFromArray", path="tags", value="x")
        assert store.get_python("tags") == ["y"]

    async def test_remove_out_of_range_leaves_array(self, builtins_engine):
        store = StateStore({"items": ["a"]})
        changes = []
        store.observe(changes.append)

        result = await run(builtins_engine, store, "removeFromArray", path="items", index=3)

        assert not result.success
        assert store.get_python("items") == ["a"]
        assert changes == []

    async def test_remove_requires_index_or_value(self, builtins_engine, store):
        result = await run(builtins_engine, store, "removeFromArray", path="items")
        assert result.failed_in == ActionPhase.RESOLVED

    async def test_toggle_in_array(self, builtins_engine, store):
        await run(builtins_engine, store, "toggleInArray", path="selected", value=3)
        await run(builtins_engine, store, "toggleInArray", path="selected", value=4)
        await run(builtins_engine, store, "toggleInArray", path="selected", value=3)
        assert store.get_python("selected") == [4]

    async def test_toggle_objects_by_equality(self, builtins_engine):
        store = StateStore({"picked": [{"id": 1}]})
        await run(builtins_engine, store, "toggleInArray", path="picked", value={"id": 1})
        assert store.get_python("picked") == []

    async def test_set_array_item(self, builtins_engine):
        store = StateStore({"items": ["a", "b"]})
        await run(builtins_engine, store, "setArrayItem", path="items", index=0, value="A")
        await run(builtins_engine, store, "setArrayItem", path="items", index=2, value="C")
        result = await run(builtins_engine, store, "setArrayItem", path="items", index=9, value="Z")

        assert store.get_python("items") == ["A", "b", "C"]
        assert not result.success

    async def test_clear_array(self, builtins_engine):
        store = StateStore({"items": [1, 2, 3]})
        await run(builtins_engine, store, "clearArray", path="items")
        assert store.get_python("items") == []

    async def test_one_change_per_action(self, builtins_engine):
        store = StateStore({"items": [1, 2, 3]})
        changes = []
        store.observe(changes.append)

        await run(builtins_engine, store, "removeFromArray", path="items", value=2)

        assert len(changes) == 1
        assert changes[0].new == Value.of([1, 3])

    async def test_local_array(self, builtins_engine, store):
        store.declare_scope("list", {"rows": []})
        await run(builtins_engine, store, "appendToArray", scope_owner="list", path="local.rows", value="r")
        assert store.scope("list").get("rows") == Value.of(["r"])


# ============================================================================
# Presentation
# ============================================================================

@pytest.mark.unit
class TestPresentation:
    """Alerts, navigation, dismissal."""

    async def test_show_alert(self, builtins_engine, presenter, presenters):
        store = StateStore({"count": 2})
        result = await run(
            builtins_engine, store, "showAlert", presenters=presenters,
            title="Delete ${count} items?",
            message={"type": "binding", "path": "count"},
            buttons=[
                {"label": "Cancel", "style": "cancel"},
                {"label": "Delete", "style": "destructive",
                 "action": {"type": "clearArray", "path": "items"}},
            ],
        )

        assert result.success
        alert = presenter.alerts[0]
        assert alert.title == "Delete 2 items?"
        assert alert.message == "2"
        assert alert.buttons[1].style == AlertButtonStyle.DESTRUCTIVE
        assert alert.buttons[1].action.kind == "clearArray"

    async def test_alert_button_action_runs(self, builtins_engine, presenter, presenters):
        store = StateStore({"items": [1]})
        await run(
            builtins_engine, store, "showAlert", presenters=presenters,
            title="Clear?",
            buttons=[{"label": "OK", "action": {"type": "clearArray", "path": "items"}}],
        )
        context = builtins_engine.context(store, presenters=presenters)

        await context.execute_definition(presenter.alerts[0].buttons[0].action)

        assert store.get_python("items") == []

    async def test_alert_button_bad_action_fails_resolution(self, builtins_engine, presenters, store):
        result = await run(
            builtins_engine, store, "showAlert", presenters=presenters,
            buttons=[{"label": "OK", "action": "undefinedAction"}],
        )
        assert result.failed_in == ActionPhase.RESOLVED

    async def test_navigate_and_open_url(self, builtins_engine, presenter, presenters):
        store = StateStore({"id": 42})
        await run(builtins_engine, store, "navigate", presenters=presenters,
                  destination="detail/${id}", presentation="present")
        await run(builtins_engine, store, "openURL", presenters=presenters,
                  url="https://example.com/items/${id}")

        assert presenter.navigations == [("detail/42", NavigationPresentation.PRESENT)]
        assert presenter.urls == ["https://example.com/items/42"]

    async def test_dismiss(self, builtins_engine, presenter, presenters, store):
        await run(builtins_engine, store, "dismiss", presenters=presenters)
        assert presenter.dismissed == 1

    async def test_missing_presenter_is_not_an_error(self, builtins_engine, store):
        result = await run(builtins_engine, store, "dismiss")
        assert result.success


@pytest.mark.unit
async def test_named_actions_from_document(builtins_engine, counter_definition):
    """Named document actions run against the document's state."""
    store = StateStore(counter_definition.state)
    context = builtins_engine.context(store, counter_definition)

    for _ in range(3):
        result = await builtins_engine.run("increment", context)
        assert result.success
    await builtins_engine.run("reset", context)
    await builtins_engine.run("increment", context)

    assert store.get_python("count") == 1
