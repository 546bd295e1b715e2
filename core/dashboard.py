"""Owned dashboard state with change notifications.

`DashboardStore` is the single owner of datasets, widgets, layers, and the
dashboard title. Every mutation goes through a method here, runs to
completion, and then notifies subscribers, so observers never see a partial
update.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import replace

from analysis.dto import DataMapping, Dataset
from core.history import (
    DEFAULT_HISTORY_SIZE,
    AddWidget,
    Batch,
    Command,
    HistoryManager,
    MoveWidget,
    RemoveWidget,
    UpdateDataMapping,
    UpdateWidget,
)
from core.widgets import GridPosition, Layer, Widget

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Dashboard"

Observer = Callable[["DashboardStore", str], None]


def new_widget_id() -> str:
    """Return a fresh widget identifier."""

    return f"widget_{uuid.uuid4().hex[:12]}"


class DashboardStore:
    """Mutable dashboard state.

    Args:
        title: Initial dashboard title.
        history_size: Maximum number of undoable edits.

    Notifications pass the store and a topic: `datasets`, `widgets`,
    `layers`, `title`, or `template` (whole-state replacement).
    """

    def __init__(self, *, title: str = DEFAULT_TITLE, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self.title = title
        self.datasets: list[Dataset] = []
        self.widgets: list[Widget] = []
        self.layers: list[Layer] = []
        self.history = HistoryManager(max_size=history_size)
        self._observers: list[Observer] = []

    # Observers

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a callable that unsubscribes it."""

        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, topic: str) -> None:
        for observer in list(self._observers):
            observer(self, topic)

    # Datasets

    def add_dataset(self, dataset: Dataset) -> None:
        self.datasets.append(dataset)
        self._notify("datasets")

    def remove_dataset(self, dataset_id: str) -> bool:
        """Remove a dataset by id; returns False when it is not present."""

        remaining = [d for d in self.datasets if d.id != dataset_id]
        if len(remaining) == len(self.datasets):
            return False
        self.datasets = remaining
        self._notify("datasets")
        return True

    def set_active_dataset(self, dataset_id: str) -> None:
        """Mark exactly one dataset active; unknown ids leave none active."""

        for dataset in self.datasets:
            dataset.active = dataset.id == dataset_id
        self._notify("datasets")

    def active_dataset(self) -> Dataset | None:
        return next((d for d in self.datasets if d.active), None)

    def get_dataset(self, dataset_id: str) -> Dataset | None:
        return next((d for d in self.datasets if d.id == dataset_id), None)

    # Widgets

    def get_widget(self, widget_id: str) -> Widget | None:
        return next((w for w in self.widgets if w.id == widget_id), None)

    def get_layer(self, widget_id: str) -> Layer | None:
        return next((layer for layer in self.layers if layer.widget_id == widget_id), None)

    def add_widget(self, widget: Widget) -> None:
        """Add a widget and its layer, recording the edit for undo."""

        self._insert_widget(widget, None)
        self.history.execute(AddWidget(widget))
        self._notify("widgets")

    def remove_widget(self, widget_id: str) -> bool:
        """Remove a widget and its layer.

        Returns:
            False (and logs a warning) when the widget or its layer is missing.
        """

        widget = self.get_widget(widget_id)
        layer = self.get_layer(widget_id)
        if widget is None or layer is None:
            logger.warning("Cannot remove widget %s: widget or layer not found", widget_id)
            return False
        self._drop_widget(widget_id)
        self.history.execute(RemoveWidget(widget, layer))
        self._notify("widgets")
        return True

    def update_widget(self, widget: Widget) -> bool:
        """Replace the widget with the same id."""

        old = self.get_widget(widget.id)
        if old is None:
            return False
        self._replace_widget(widget)
        self.history.execute(UpdateWidget(old, widget))
        self._notify("widgets")
        return True

    def update_widget_mapping(self, widget_id: str, mapping: DataMapping) -> bool:
        widget = self.get_widget(widget_id)
        if widget is None:
            return False
        self._replace_widget(widget.with_mapping(mapping))
        self.history.execute(UpdateDataMapping(widget_id, widget.chart_config.data_mapping, mapping))
        self._notify("widgets")
        return True

    def update_widget_position(self, widget_id: str, position: GridPosition) -> bool:
        widget = self.get_widget(widget_id)
        if widget is None:
            return False
        self._replace_widget(widget.with_position(position))
        self.history.execute(MoveWidget(widget_id, widget.grid_position, position))
        self._notify("widgets")
        return True

    # Layers

    def toggle_layer_visibility(self, layer_id: str) -> None:
        self._toggle_layer(layer_id, "visible")

    def toggle_layer_lock(self, layer_id: str) -> None:
        self._toggle_layer(layer_id, "locked")

    def _toggle_layer(self, layer_id: str, attribute: str) -> None:
        for layer in self.layers:
            if layer.id == layer_id:
                setattr(layer, attribute, not getattr(layer, attribute))
                self._notify("layers")
                return

    # Title and whole-state replacement

    def set_title(self, title: str) -> None:
        self.title = title
        self._notify("title")

    def replace_state(
        self,
        *,
        title: str,
        datasets: list[Dataset],
        widgets: list[Widget],
        layers: list[Layer],
    ) -> None:
        """Install a complete dashboard (template import) and reset history."""

        self.title = title
        self.datasets = list(datasets)
        self.widgets = list(widgets)
        self.layers = list(layers)
        self.history = HistoryManager(max_size=self.history.max_size)
        self._notify("template")

    # History

    def execute(self, command: Command) -> None:
        """Apply an arbitrary command (usually a `Batch`) as one undoable edit."""

        self._apply(command, forward=True)
        self.history.execute(command)
        self._notify("widgets")

    def undo(self) -> bool:
        """Reverse the latest edit; returns False when there is nothing to undo."""

        command = self.history.undo()
        if command is None:
            return False
        self._apply(command, forward=False)
        self._notify("widgets")
        return True

    def redo(self) -> bool:
        """Re-apply the latest undone edit."""

        command = self.history.redo()
        if command is None:
            return False
        self._apply(command, forward=True)
        self._notify("widgets")
        return True

    def _apply(self, command: Command, *, forward: bool) -> None:
        if isinstance(command, Batch):
            ordered = command.commands if forward else tuple(reversed(command.commands))
            for inner in ordered:
                self._apply(inner, forward=forward)
        elif isinstance(command, AddWidget):
            if forward:
                self._insert_widget(command.widget, None)
            else:
                self._drop_widget(command.widget.id)
        elif isinstance(command, RemoveWidget):
            if forward:
                self._drop_widget(command.widget.id)
            else:
                self._insert_widget(command.widget, command.layer)
        elif isinstance(command, UpdateWidget):
            self._replace_widget(command.new if forward else command.old)
        elif isinstance(command, MoveWidget):
            widget = self.get_widget(command.widget_id)
            if widget is not None:
                position = command.new_position if forward else command.old_position
                self._replace_widget(widget.with_position(position))
        elif isinstance(command, UpdateDataMapping):
            widget = self.get_widget(command.widget_id)
            if widget is not None:
                mapping = command.new_mapping if forward else command.old_mapping
                self._replace_widget(widget.with_mapping(mapping))

    def _insert_widget(self, widget: Widget, layer: Layer | None) -> None:
        self.widgets.append(widget)
        self.layers.append(replace(layer) if layer is not None else Layer.for_widget(widget))

    def _drop_widget(self, widget_id: str) -> None:
        self.widgets = [w for w in self.widgets if w.id != widget_id]
        self.layers = [layer for layer in self.layers if layer.widget_id != widget_id]

    def _replace_widget(self, widget: Widget) -> None:
        self.widgets = [widget if w.id == widget.id else w for w in self.widgets]
