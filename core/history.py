"""Undo/redo history for dashboard edits.

Commands are plain records describing a change and enough state to reverse
it. `HistoryManager` only moves commands between its undo and redo stacks;
`core.dashboard.DashboardStore` applies them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from analysis.dto import DataMapping
from core.widgets import GridPosition, Layer, Widget

DEFAULT_HISTORY_SIZE = 50


@dataclass(frozen=True, slots=True)
class AddWidget:
    widget: Widget


@dataclass(frozen=True, slots=True)
class RemoveWidget:
    widget: Widget
    layer: Layer | None = None


@dataclass(frozen=True, slots=True)
class UpdateWidget:
    old: Widget
    new: Widget


@dataclass(frozen=True, slots=True)
class MoveWidget:
    widget_id: str
    old_position: GridPosition
    new_position: GridPosition


@dataclass(frozen=True, slots=True)
class UpdateDataMapping:
    widget_id: str
    old_mapping: DataMapping
    new_mapping: DataMapping


@dataclass(frozen=True, slots=True)
class Batch:
    """Several commands undone and redone as one step."""

    commands: tuple["Command", ...] = ()


Command = AddWidget | RemoveWidget | UpdateWidget | MoveWidget | UpdateDataMapping | Batch


@dataclass(slots=True)
class HistoryManager:
    """Bounded undo/redo stacks.

    Attributes:
        max_size: Maximum number of undoable commands; the oldest is dropped
            when exceeded.
    """

    max_size: int = DEFAULT_HISTORY_SIZE
    _undo: list[Command] = field(default_factory=list)
    _redo: list[Command] = field(default_factory=list)

    def execute(self, command: Command) -> None:
        """Record a command that has just been applied."""

        self._undo.append(command)
        self._redo.clear()
        if len(self._undo) > self.max_size:
            del self._undo[0]

    def undo(self) -> Command | None:
        """Move the latest command to the redo stack and return it."""

        if not self._undo:
            return None
        command = self._undo.pop()
        self._redo.append(command)
        return command

    def redo(self) -> Command | None:
        """Move the latest undone command back to the undo stack and return it."""

        if not self._redo:
            return None
        command = self._redo.pop()
        self._undo.append(command)
        return command

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
