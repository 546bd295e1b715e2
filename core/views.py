"""Views for the core app.

Every endpoint returns JSON. Failures use `{"ok": false, "error": ...}` with a
4xx status; successes carry `"ok": true`.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from django.contrib.auth.decorators import login_required
from django.http import HttpRequest, JsonResponse

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset
from core.charting.builders import build_widget_options
from core.charting.schema import WidgetType
from core.charting.styles import style_from_json
from core.forms import CsvUploadForm, TemplateImportForm
from core.services import import_and_store, upload_csv
from core.storage import TemplateStorage

logger = logging.getLogger(__name__)


def _error(message: str, *, status: int = 400, **extra: Any) -> JsonResponse:
    return JsonResponse({"ok": False, "error": message, **extra}, status=status)


def _method_not_allowed(allowed: str) -> JsonResponse:
    response = _error("Method not allowed.", status=405)
    response["Allow"] = allowed
    return response


def _form_errors(form) -> str:
    return "; ".join(str(message) for messages in form.errors.values() for message in messages)


@login_required
def upload_dataset(request: HttpRequest) -> JsonResponse:
    """Parse an uploaded CSV file and return the inferred dataset."""

    if request.method != "POST":
        return _method_not_allowed("POST")

    form = CsvUploadForm(request.POST, request.FILES)
    if not form.is_valid():
        return _error(_form_errors(form))

    uploaded = form.cleaned_data["file"]
    result = upload_csv(uploaded.name, uploaded, uploaded.size)
    if result.error is not None or result.dataset is None:
        message = result.error.message if result.error is not None else "Upload failed."
        return _error(message)

    dataset = result.dataset
    return JsonResponse(
        {
            "ok": True,
            "dataset": dataset.as_json(),
            "row_count": dataset.row_count,
        },
        status=201,
    )


@login_required
def widget_options(request: HttpRequest) -> JsonResponse:
    """Build the option document for one widget.

    Expects a JSON body with `widget_type`, `dataset`, `mapping`, and the
    optional `style` and `aggregation` keys.
    """

    if request.method != "POST":
        return _method_not_allowed("POST")

    try:
        payload = json.loads(request.body or b"{}")
    except json.JSONDecodeError as exc:
        return _error(f"Request body is not valid JSON: {exc.msg}")
    if not isinstance(payload, dict):
        return _error("Request body must be a JSON object.")

    try:
        widget_type = WidgetType(payload.get("widget_type"))
    except ValueError:
        return _error(f"Unknown widget type: {payload.get('widget_type')!r}")
    try:
        aggregation = AggregationFunction(payload.get("aggregation") or AggregationFunction.default())
    except ValueError:
        return _error(f"Unknown aggregation: {payload.get('aggregation')!r}")

    raw_dataset = payload.get("dataset")
    if not isinstance(raw_dataset, dict):
        return _error("`dataset` must be a JSON object.")
    raw_mapping = payload.get("mapping")
    if raw_mapping is not None and not isinstance(raw_mapping, dict):
        return _error("`mapping` must be a JSON object.")

    style_result = style_from_json(widget_type, payload.get("style"))
    if style_result.style is None:
        message = style_result.error.message if style_result.error is not None else "Invalid style options."
        return _error(message)

    try:
        dataset = Dataset.from_json(raw_dataset)
        mapping = DataMapping.from_json(raw_mapping)
    except (TypeError, ValueError) as exc:
        return _error(f"Invalid dataset or mapping: {exc}")

    result = build_widget_options(
        widget_type,
        dataset,
        mapping,
        style_result.style,
        aggregation=aggregation,
    )
    if result.error is not None or result.options is None:
        message = result.error.message if result.error is not None else "Build failed."
        kind = result.error.kind if result.error is not None else ""
        return _error(message, kind=kind)
    return JsonResponse({"ok": True, "widget_type": str(widget_type), "options": json.loads(result.options)})


@login_required
def template_list(request: HttpRequest) -> JsonResponse:
    """List stored template names."""

    if request.method != "GET":
        return _method_not_allowed("GET")
    return JsonResponse({"ok": True, "templates": TemplateStorage().list_names()})


@login_required
def template_detail(request: HttpRequest, name: str) -> JsonResponse:
    """Return (GET) or delete (DELETE) one stored template."""

    storage = TemplateStorage()
    if request.method == "DELETE":
        if not storage.delete(name):
            return _error("Template not found.", status=404)
        return JsonResponse({"ok": True, "deleted": name})
    if request.method != "GET":
        return _method_not_allowed("GET, DELETE")

    loaded = storage.load(name)
    if not loaded.found:
        return _error("Template not found.", status=404)
    if loaded.template is None:
        return _error(loaded.error.user_message if loaded.error is not None else "Template is unreadable.")
    return JsonResponse({"ok": True, "name": name, "template": loaded.template.as_json()})


@login_required
def template_import(request: HttpRequest) -> JsonResponse:
    """Validate an uploaded or pasted template and store it under a name."""

    if request.method != "POST":
        return _method_not_allowed("POST")

    form = TemplateImportForm(request.POST, request.FILES)
    if not form.is_valid():
        return _error(_form_errors(form))

    name = form.cleaned_data["name"]
    result, saved = import_and_store(form.cleaned_data["json_text"], form.cleaned_data["source_name"], name)
    if result.error is not None:
        return _error(
            result.error.user_message,
            kind=result.error.kind,
            issues=[str(issue) for issue in result.error.issues],
        )
    if saved is None or saved.error is not None:
        message = saved.error.user_message if saved is not None and saved.error is not None else "Save failed."
        return _error(message, status=500)

    logger.info("Template %r imported via API", name)
    return JsonResponse(
        {
            "ok": True,
            "name": name,
            "warnings": [str(issue) for issue in result.warnings],
            "fixes": list(result.fixes),
        },
        status=201,
    )
