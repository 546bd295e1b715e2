"""Integration tests for database-backed template storage."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from analysis.dto import DataMapping, Dataset
from core.charting.schema import WidgetType
from core.dashboard import DashboardStore
from core.export.template import DashboardTemplate, TemplateType
from core.models import TemplateBlob
from core.services import export_stored_template, import_and_store
from core.storage import TemplateStorage, get_item, keys, remove_item, set_item
from core.widgets import Widget

pytestmark = pytest.mark.integration

NOW = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)


@pytest.fixture
def template(sales_dataset: Dataset) -> DashboardTemplate:
    store = DashboardStore(title="Regional Sales")
    store.add_dataset(sales_dataset)
    store.add_widget(Widget.create("w1", WidgetType.PIE, mapping=DataMapping(x_axis="Region", y_axis=["Sales"])))
    return DashboardTemplate.from_store(store, TemplateType.COMPLETE, now=NOW)


@pytest.mark.django_db
def test_raw_key_value_helpers() -> None:
    assert get_item("a") is None
    set_item("a", "1")
    set_item("a", "2")
    set_item("b", "3")

    assert get_item("a") == "2"
    assert TemplateBlob.objects.count() == 2
    assert keys() == ["a", "b"]
    assert keys("b") == ["b"]
    assert remove_item("a") is True
    assert remove_item("a") is False


@pytest.mark.django_db
def test_save_load_list_delete(template: DashboardTemplate) -> None:
    storage = TemplateStorage()

    saved = storage.save("  regional  ", template)
    assert saved.ok
    assert saved.key == "dashboard_template_regional"

    loaded = storage.load("regional")
    assert loaded.ok
    assert loaded.template.as_json() == template.as_json()
    assert storage.list_names() == ["regional"]

    assert storage.delete("regional") is True
    assert storage.delete("regional") is False
    missing = storage.load("regional")
    assert not missing.found
    assert not missing.ok


@pytest.mark.django_db
def test_prefixes_isolate_namespaces(template: DashboardTemplate) -> None:
    default = TemplateStorage()
    other = TemplateStorage(prefix="team_")
    default.save("one", template)
    other.save("two", template)
    set_item("unrelated", "x")

    assert default.list_names() == ["one"]
    assert other.list_names() == ["two"]


@pytest.mark.django_db
def test_save_rejects_blank_and_long_names(template: DashboardTemplate) -> None:
    storage = TemplateStorage()

    blank = storage.save("   ", template)
    assert blank.error.kind == "filename_generation_failed"
    too_long = storage.save("x" * 300, template)
    assert too_long.error.kind == "filename_generation_failed"
    assert TemplateBlob.objects.count() == 0


@pytest.mark.django_db
def test_save_reports_serialization_failure(template: DashboardTemplate) -> None:
    template.datasets[0].data[0][2] = float("nan")

    result = TemplateStorage().save("broken", template)

    assert result.error.kind == "serialization_failed"
    assert get_item("dashboard_template_broken") is None


@pytest.mark.django_db
def test_load_reports_corrupt_documents() -> None:
    set_item("dashboard_template_bad", "{nope")
    set_item("dashboard_template_shape", '{"version": "1-0-0"}')
    storage = TemplateStorage()

    bad = storage.load("bad")
    assert bad.found
    assert bad.error.kind == "parse_failed"
    assert bad.error.line == 1

    shape = storage.load("shape")
    assert shape.error.kind == "parse_failed"
    assert shape.template is None


@pytest.mark.django_db
def test_import_and_store_respects_write_flag(template: DashboardTemplate) -> None:
    document = template.to_json()

    result, saved = import_and_store(document, "t.json", "dry", write=False)
    assert result.ok
    assert saved is None
    assert TemplateStorage().list_names() == []

    result, saved = import_and_store(document, "t.json", "kept")
    assert saved.ok
    assert TemplateStorage().list_names() == ["kept"]

    failed, saved = import_and_store("[]", "t.json", "never")
    assert failed.error.kind == "parse_failed"
    assert saved is None


@pytest.mark.django_db
def test_export_stored_template(template: DashboardTemplate) -> None:
    TemplateStorage().save("regional", template)

    generic = export_stored_template("regional", TemplateType.GENERIC, now=NOW)
    assert generic.ok
    assert generic.filename == "Regional_Sales_20240506_070809.json"
    assert "data" not in generic.template.datasets[0].as_json()

    complete = export_stored_template("regional", TemplateType.COMPLETE, now=NOW)
    assert complete.filename == "Regional_Sales_complete_20240506_070809.json"
    assert complete.template.datasets[0].data == template.datasets[0].data

    assert export_stored_template("missing", TemplateType.GENERIC) is None
    set_item("dashboard_template_corrupt", "{")
    corrupt = export_stored_template("corrupt", TemplateType.GENERIC)
    assert corrupt.error.kind == "serialization_failed"
