from __future__ import annotations

import math

from field_engine.field_kinds import FieldKind
from field_engine.field_store import FieldStore
from field_engine.geometry import Point, Rect, Size
from field_engine.session import PageGeometry, SessionContext
from field_engine.transform import to_document

A4_PAGE = PageGeometry(page_size=Size(595.0, 842.0), surface_size=Size(892.5, 1263.0))


def _loaded_store(scale: float = 1.0) -> FieldStore:
    context = SessionContext()
    context.replace_page(A4_PAGE)
    context.scale = scale
    return FieldStore(context)


def test_create_computes_document_rect_from_drop_point() -> None:
    store = _loaded_store()
    created = store.create(FieldKind.SIGNATURE, Point(100.0, 100.0), Size(150.0, 50.0))

    assert created is not None
    assert created.kind is FieldKind.SIGNATURE
    assert created.screen_rect == Rect(100.0, 100.0, 150.0, 50.0)
    assert created.document_rect.x == 66.67
    assert created.document_rect.width == 100.0
    assert created.document_rect.height == 33.33
    assert math.isclose(created.document_rect.y, 742.0, abs_tol=0.005)
    assert created.value == ""
    assert store.get(created.id) is created


def test_create_uses_default_size_from_limits() -> None:
    store = _loaded_store()
    created = store.create(FieldKind.TEXT, Point(0.0, 0.0))
    assert created is not None
    assert created.screen_rect.size == Size(150.0, 50.0)


def test_create_without_document_is_noop() -> None:
    store = FieldStore(SessionContext())
    assert store.create(FieldKind.TEXT, Point(10.0, 10.0), Size(150.0, 50.0)) is None
    assert len(store) == 0


def test_ids_are_unique_and_stable() -> None:
    store = _loaded_store()
    first = store.create(FieldKind.TEXT, Point(0.0, 0.0))
    second = store.create(FieldKind.DATE, Point(10.0, 10.0))
    assert first.id != second.id
    store.delete(first.id)
    third = store.create(FieldKind.RADIO, Point(20.0, 20.0))
    assert third.id not in {first.id, second.id}
    assert [item.id for item in store.all()] == [second.id, third.id]


def test_custom_id_factory_skips_collisions() -> None:
    context = SessionContext()
    context.replace_page(A4_PAGE)
    tokens = iter(["dup", "dup", "fresh"])
    store = FieldStore(context, id_factory=lambda: next(tokens))
    assert store.create(FieldKind.TEXT, Point(0.0, 0.0)).id == "dup"
    assert store.create(FieldKind.TEXT, Point(0.0, 0.0)).id == "fresh"


def test_move_to_keeps_size_and_mirrors_screen_rect() -> None:
    store = _loaded_store()
    created = store.create(FieldKind.TEXT, Point(100.0, 100.0), Size(150.0, 50.0))

    moved = store.move_to(created.id, Point(40.5, 60.25))

    assert moved.screen_rect == Rect(40.5, 60.25, 150.0, 50.0)
    assert moved.document_rect == to_document(moved.screen_rect, 1.0, A4_PAGE.page_size, A4_PAGE.surface_size)


def test_resize_clamps_to_minimum_before_conversion() -> None:
    store = _loaded_store()
    created = store.create(FieldKind.SIGNATURE, Point(100.0, 100.0), Size(150.0, 50.0))

    resized = store.resize_to(created.id, Size(30.0, 10.0))

    assert resized.screen_rect == Rect(100.0, 100.0, 50.0, 30.0)
    assert resized.document_rect.width == 33.33
    assert resized.document_rect.height == 20.0


def test_resize_clamps_each_axis_independently() -> None:
    store = _loaded_store()
    created = store.create(FieldKind.IMAGE, Point(0.0, 0.0))
    resized = store.resize_to(created.id, Size(200.0, 5.0))
    assert resized.screen_rect.size == Size(200.0, 30.0)


def test_mutations_on_unknown_id_are_noops() -> None:
    store = _loaded_store()
    assert store.move_to("missing", Point(0.0, 0.0)) is None
    assert store.resize_to("missing", Size(100.0, 100.0)) is None
    assert store.delete("missing") is False


def test_delete_selected_field_clears_selection() -> None:
    store = _loaded_store()
    created = store.create(FieldKind.SIGNATURE, Point(0.0, 0.0))
    store.context.select(created.id)

    assert store.delete(created.id) is True
    assert created.id not in store
    assert store.context.selected_id is None


def test_delete_unselected_field_keeps_selection() -> None:
    store = _loaded_store()
    kept = store.create(FieldKind.SIGNATURE, Point(0.0, 0.0))
    other = store.create(FieldKind.TEXT, Point(200.0, 200.0))
    store.context.select(kept.id)

    assert store.delete(other.id) is True
    assert store.context.selected_id == kept.id


def test_first_of_kind_and_set_value() -> None:
    store = _loaded_store()
    store.create(FieldKind.TEXT, Point(0.0, 0.0))
    signature = store.create(FieldKind.SIGNATURE, Point(10.0, 10.0))
    store.create(FieldKind.SIGNATURE, Point(20.0, 20.0))

    assert store.first_of_kind(FieldKind.SIGNATURE) is signature
    assert store.first_of_kind(FieldKind.RADIO) is None
    assert store.set_value(signature.id, "Jane Doe").value == "Jane Doe"
    assert store.set_value("missing", "x") is None


def test_clear_drops_fields_and_selection() -> None:
    store = _loaded_store()
    created = store.create(FieldKind.TEXT, Point(0.0, 0.0))
    store.context.select(created.id)
    store.clear()
    assert len(store) == 0
    assert store.context.selected_id is None
