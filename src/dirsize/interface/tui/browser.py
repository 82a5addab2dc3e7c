from __future__ import annotations

"""
Interactive Terminal Browser.

A small read-eval-print loop that walks a built tree one directory at a
time. The browser holds a cursor on the current directory plus the active
sort key; navigation only swaps the cursor for another existing node, so no
re-aggregation happens while browsing. State transitions are plain methods,
kept separate from the I/O loop in `run()`.
"""

import logging
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dirsize.core.analysis.sorter import sorted_children
from dirsize.core.services.scanner import scan_tree
from dirsize.domain.constants import DEFAULT_PAGE_SIZE
from dirsize.domain.errors import TreeError
from dirsize.domain.tree_models import SortKey, TreeNode
from dirsize.utils.formatting import format_size

logger = logging.getLogger(__name__)

HELP_LINES = [
    "Use w/s to move the selection, d to open a directory, a to go to the parent",
    "Use t to load a new folder, o to switch sort method",
    "Use q to quit, h to see this message again",
]


class Browser:
    """
    Cursor-based navigator over a directory tree.

    Attributes:
        current: Directory currently displayed.
        sort_key: Ordering of the displayed listing.
        selected: Index of the highlighted entry in `listing`.
        offset: Index of the first visible entry.
        page_size: Number of entries displayed at once.
    """

    def __init__(
            self,
            root: TreeNode,
            *,
            sort_key: SortKey = SortKey.NAME,
            page_size: int = DEFAULT_PAGE_SIZE,
            fatal_on_access_denied: bool = False,
            console: Optional[Console] = None,
            input_fn: Callable[[str], str] = input,
    ) -> None:
        self.current = root
        self.sort_key = sort_key
        self.page_size = max(1, page_size)
        self.fatal_on_access_denied = fatal_on_access_denied
        self.console = console or Console()
        self._input = input_fn
        self.listing: List[TreeNode] = []
        self.selected = 0
        self.offset = 0
        self._reload()

        self._commands: Dict[str, Callable[[], None]] = {
            "w": self.move_up,
            "s": self.move_down,
            "d": self.descend,
            "a": self.ascend,
            "t": self._prompt_retarget,
            "o": self._prompt_sort,
            "h": self.show_help,
        }

    # -------------------------------------------------------------------------
    # STATE TRANSITIONS
    # -------------------------------------------------------------------------

    @property
    def selected_entry(self) -> Optional[TreeNode]:
        if not self.listing:
            return None
        return self.listing[self.selected]

    def move_up(self) -> None:
        if self.selected > 0:
            self.selected -= 1
        self._scroll_to_selection()

    def move_down(self) -> None:
        if self.selected < len(self.listing) - 1:
            self.selected += 1
        self._scroll_to_selection()

    def descend(self) -> None:
        """Open the selected entry if it is a directory."""
        entry = self.selected_entry
        if entry is None or not entry.is_dir:
            return
        self.current = entry
        self._reload()

    def ascend(self) -> None:
        """Go to the parent directory; no-op at the root."""
        if self.current.parent is None:
            return
        previous = self.current
        self.current = self.current.parent
        self._reload()
        if previous in self.listing:
            self.selected = self.listing.index(previous)
            self._scroll_to_selection()

    def set_sort(self, sort_key: SortKey) -> None:
        if sort_key is self.sort_key:
            return
        self.sort_key = sort_key
        self._reload()

    def retarget(self, path: str) -> bool:
        """
        Scan `path` and make it the new root of the browser.

        Failures are reported on the console and leave the browser unchanged.

        Returns:
            bool: True if the new tree was loaded.
        """
        try:
            result = scan_tree(path, fatal_on_access_denied=self.fatal_on_access_denied)
        except TreeError as e:
            logger.error(f"Cannot load '{path}': {e}")
            self.console.print(f"[red]Cannot load '{escape(path)}': {escape(str(e))}[/red]")
            return False

        for w in result.warnings:
            self.console.print(f"[yellow]Skipped {escape(w.path)}: {escape(w.message)}[/yellow]")
        self.current = result.root
        self._reload()
        return True

    def handle(self, command: str) -> bool:
        """
        Apply one user command.

        Returns:
            bool: False when the user asked to quit.
        """
        command = command.strip().lower()
        if command == "q":
            return False
        action = self._commands.get(command)
        if action is not None:
            action()
        return True

    # -------------------------------------------------------------------------
    # RENDERING AND I/O LOOP
    # -------------------------------------------------------------------------

    def render(self) -> Table:
        """Build the table for the visible window of the current listing."""
        table = Table(
            title=f"{escape(self.current.name)} | {format_size(self.current.size)}",
            caption=f"sorted by {self.sort_key.value}",
        )
        table.add_column("", width=2)
        table.add_column("Kind")
        table.add_column("Name")
        table.add_column("Size", justify="right")

        if self.offset > 0:
            table.add_row("", "...", "", "")
        end = self.offset + self.page_size
        for index in range(self.offset, min(end, len(self.listing))):
            entry = self.listing[index]
            marker = "->" if index == self.selected else ""
            table.add_row(marker, entry.kind.value, escape(entry.name), format_size(entry.size))
        if end < len(self.listing):
            table.add_row("", "...", "", "")
        return table

    def show_help(self) -> None:
        for line in HELP_LINES:
            self.console.print(line)

    def run(self) -> None:
        """Read commands until the user quits or input is exhausted."""
        self.show_help()
        while True:
            self.console.print(self.render())
            try:
                command = self._input("> ")
            except EOFError:
                break
            if not self.handle(command):
                break

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _reload(self) -> None:
        self.listing = sorted_children(self.current, self.sort_key)
        self.selected = 0
        self.offset = 0

    def _scroll_to_selection(self) -> None:
        if self.selected < self.offset:
            self.offset = self.selected
        elif self.selected >= self.offset + self.page_size:
            self.offset = self.selected - self.page_size + 1

    def _prompt_retarget(self) -> None:
        path = self._input("Enter new target: ").strip()
        if path:
            self.retarget(path)

    def _prompt_sort(self) -> None:
        answer = self._input("Sort by (n)ame or (s)ize? ").strip().lower()
        if answer in ("n", "name"):
            self.set_sort(SortKey.NAME)
        elif answer in ("s", "size"):
            self.set_sort(SortKey.SIZE)
