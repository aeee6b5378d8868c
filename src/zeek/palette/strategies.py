"""Navigation strategies: how a popup answers drill-down and selection.

Every popup hands the controller one strategy. The controller asks it for
replacement lists on ``navigate``/``navigate-up`` and reports the final
outcome through :meth:`NavigationStrategy.on_select` exactly once.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Literal, Protocol

logger = logging.getLogger(__name__)

NavigationAction = Literal["select", "navigate", "navigate-up"]
SelectionEnd = Literal["first", "last"]


@dataclass(frozen=True)
class PaletteResult:
    """Outcome of one popup: the chosen line (``None`` if nothing) and how it was chosen."""

    line: str | None
    action: NavigationAction = "select"


ResultHandler = Callable[[PaletteResult], None]


class NavigationStrategy(Protocol):
    default_selection: SelectionEnd

    @property
    def header(self) -> str | None: ...

    def get_filter_text(self, line: str) -> str: ...

    def on_navigate(self, line: str | None, action: NavigationAction) -> list[str] | None: ...

    def on_select(self, line: str | None, action: NavigationAction) -> None: ...


class PlainListStrategy:
    """Flat list: no drill-down, selection starts at the top."""

    default_selection: SelectionEnd = "first"

    def __init__(self, on_result: ResultHandler | None = None, header: str | None = None) -> None:
        self._on_result = on_result
        self._header = header
        self.result: PaletteResult | None = None

    @property
    def header(self) -> str | None:
        return self._header

    def get_filter_text(self, line: str) -> str:
        return line

    def on_navigate(self, line: str | None, action: NavigationAction) -> list[str] | None:
        return None

    def on_select(self, line: str | None, action: NavigationAction) -> None:
        self.result = PaletteResult(line, action)
        if self._on_result is not None:
            self._on_result(self.result)


class HistoryStrategy(PlainListStrategy):
    """History list, oldest first; selection starts at the most recent entry."""

    default_selection: SelectionEnd = "last"


class DirectoryDrillDownStrategy(PlainListStrategy):
    """Browse a directory tree one listing at a time.

    *list_dir* produces the rows for a directory; *get_name* extracts the
    entry name from a row and *is_dir* tells whether a row is a
    subdirectory. Errors raised by *list_dir* propagate so the controller
    can keep the current view; :attr:`current_dir` only changes once a
    listing has succeeded.
    """

    def __init__(
        self,
        start_dir: str | Path,
        list_dir: Callable[[Path], list[str]],
        get_name: Callable[[str], str],
        is_dir: Callable[[str], bool],
        on_result: ResultHandler | None = None,
    ) -> None:
        super().__init__(on_result)
        self.current_dir = Path(os.path.abspath(start_dir))
        self._list_dir = list_dir
        self._get_name = get_name
        self._is_dir = is_dir

    @property
    def header(self) -> str | None:
        return str(self.current_dir)

    def get_filter_text(self, line: str) -> str:
        return self._get_name(line)

    def on_navigate(self, line: str | None, action: NavigationAction) -> list[str] | None:
        if action == "navigate":
            if line is None or not self._is_dir(line):
                return None
            return self._change_dir(self.current_dir / self._get_name(line))

        if action == "navigate-up":
            return self._change_dir(self.current_dir.parent)

        return None

    def _change_dir(self, target: Path) -> list[str]:
        items = self._list_dir(target)
        logger.debug("Drill-down moved from %s to %s", self.current_dir, target)
        self.current_dir = target
        return items
