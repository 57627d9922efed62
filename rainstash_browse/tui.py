from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import Key, Paste, Resize
from textual.widgets import OptionList, Static

from rainstash_browse.exceptions import ManifestError
from rainstash_browse.manifest import (
    Manifest,
    default_cache_path,
    ensure_manifest_cache,
    items_by_display_name,
    load_manifest,
)
from rainstash_browse.models import RiskItem
from rainstash_browse.rendering import highlight_matches, render_item_preview
from rainstash_browse.search import (
    DEFAULT_SCORING,
    RankedName,
    ScoringConfig,
    rank_matches,
)

logger = logging.getLogger(__name__)


def ordered_item_names(manifest: Manifest) -> list[str]:
    """Order display names by ``commandSort``, then alphabetically."""
    by_name = items_by_display_name(manifest.items)
    ordered: list[str] = []
    seen: set[str] = set()
    for entry in manifest.command_sort:
        item = manifest.items.get(entry)
        name = item.name if item is not None else entry
        if name in by_name and name not in seen:
            ordered.append(name)
            seen.add(name)
    ordered.extend(sorted(name for name in by_name if name not in seen))
    return ordered


class RainstashTui(App[None]):
    CSS_PATH = "rainstash_browse.tcss"
    ENABLE_COMMAND_PALETTE = False
    BINDINGS = [
        Binding("f", "filter_key_f", "Filter"),
        Binding("u", "update_key_u", "Update"),
        Binding("slash", "filter_key_slash", show=False),
        Binding("escape", "escape", "Back", show=False),
        Binding("q", "quit_or_type_q", "Quit"),
        Binding("ctrl+c", "quit", show=False),
    ]

    def __init__(
        self,
        *,
        cache_file: Path | None = None,
        manifest_url: str | None = None,
        refresh: bool = False,
        scoring: ScoringConfig = DEFAULT_SCORING,
    ) -> None:
        super().__init__()
        self.theme = "rose-pine"
        self._cache_file = cache_file or default_cache_path()
        self._manifest_url = manifest_url
        self._refresh_on_mount = refresh
        self._scoring = scoring
        self._manifest: Manifest | None = None
        self._items_by_name: dict[str, RiskItem] = {}
        self._all_item_names: list[str] = []
        self._visible_matches: list[RankedName] = []
        self._search_query = ""
        self._filter_mode = False
        self._loading = False
        self._previewed_item: str | None = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="body"):
            with Vertical(id="sidebar"):
                yield Static("Items", id="sidebar-title")
                yield OptionList(id="sidebar-list")
                yield Static("Loading manifest...", id="status")
            with Vertical(id="main-panel"):
                yield Static(
                    "Select an item in the sidebar.",
                    id="main-placeholder",
                )

    def on_mount(self) -> None:
        item_list = self.query_one("#sidebar-list", OptionList)
        item_list.disabled = True
        item_list.focus()
        self._update_filter_indicator()
        self._request_manifest_load(refresh=self._refresh_on_mount)

    def _request_manifest_load(self, *, refresh: bool) -> None:
        if self._loading:
            return
        self._loading = True
        self.run_worker(
            self._load_manifest(refresh=refresh),
            group="manifest",
            exclusive=True,
            exit_on_error=False,
        )

    def _read_manifest(self, refresh: bool) -> Manifest:
        ensure_manifest_cache(
            self._cache_file,
            manifest_url=self._manifest_url,
            refresh=refresh,
        )
        return load_manifest(self._cache_file)

    async def _load_manifest(self, *, refresh: bool) -> bool:
        status = self.query_one("#status", Static)
        status.update("Updating manifest..." if refresh else "Loading manifest...")
        try:
            manifest = await asyncio.to_thread(self._read_manifest, refresh)
        except ManifestError as exc:
            logger.warning("Failed to load manifest: %s", exc)
            status.update(f"Failed to load manifest: {exc!s}")
            return False
        finally:
            self._loading = False

        self._apply_manifest(manifest)
        return True

    def _apply_manifest(self, manifest: Manifest) -> None:
        self._manifest = manifest
        self._items_by_name = items_by_display_name(manifest.items)
        self._all_item_names = ordered_item_names(manifest)
        self._previewed_item = None

        item_list = self.query_one("#sidebar-list", OptionList)
        item_list.disabled = False
        item_list.focus()
        self._filter_items()

    def _main_panel_content_width(self) -> int:
        main_panel = self.query_one("#main-panel", Vertical)
        if main_panel.size.width <= 0:
            return 90
        return max(50, main_panel.size.width - 6)

    def _render_item_options(self, *, preserve_position: bool = False) -> None:
        item_list = self.query_one("#sidebar-list", OptionList)
        previous_highlight = item_list.highlighted
        previous_scroll_y = item_list.scroll_y
        item_list.clear_options()
        if not self._visible_matches:
            item_list.add_option("No items found")
            return

        item_list.add_options(
            [
                highlight_matches(match.name, match.result.matched_indices)
                for match in self._visible_matches
            ]
        )
        if preserve_position and previous_highlight is not None:
            item_list.highlighted = min(
                previous_highlight, len(self._visible_matches) - 1
            )
            item_list.scroll_to(y=previous_scroll_y, animate=False)
        else:
            item_list.action_first()

    def _update_item_selection_status(self) -> None:
        self.query_one("#status", Static).update(
            f"{len(self._visible_matches):,} items in selection."
        )

    def _filter_items(self) -> None:
        query = self._search_query if self._filter_mode else ""
        self._visible_matches = rank_matches(
            query, self._all_item_names, config=self._scoring
        )
        self._render_item_options()
        self._update_item_selection_status()
        self._previewed_item = None
        if self._visible_matches:
            self._preview_item(self._visible_matches[0].name)
        else:
            self.query_one("#main-placeholder", Static).update(
                "No items match the current filter."
            )

    def _preview_item(self, name: str) -> None:
        if self._previewed_item == name:
            return
        item = self._items_by_name.get(name)
        if item is None:
            return
        class_info = self._manifest.class_info if self._manifest else {}
        self.query_one("#main-placeholder", Static).update(
            render_item_preview(
                item,
                class_info,
                content_width=self._main_panel_content_width(),
            )
        )
        self._previewed_item = name

    def _filter_indicator_text(self) -> Text:
        indicator = Text()
        if self._filter_mode:
            indicator.append("f", style="bold red")
            indicator.append(f" {self._search_query}_", style="bold white")
        else:
            indicator.append("filter", style="dim")
            indicator.stylize("bold red", 0, 1)
        return indicator

    def _update_indicator_text(self) -> Text:
        indicator = Text("update", style="dim")
        indicator.stylize("bold red", 0, 1)
        return indicator

    def _update_filter_indicator(self) -> None:
        sidebar = self.query_one("#sidebar", Vertical)
        filter_indicator = self._filter_indicator_text()
        update_indicator = self._update_indicator_text()

        spacing = 1
        sidebar_width = sidebar.size.width
        if sidebar_width > 0:
            title_width = max(1, sidebar_width - 2)
            spacing = max(
                1,
                title_width - len(filter_indicator.plain) - len(update_indicator.plain),
            )

        sidebar.border_title = Text.assemble(
            filter_indicator, " " * spacing, update_indicator
        )
        main_panel = self.query_one("#main-panel", Vertical)
        main_panel.styles.border_title_align = "left"
        main_panel.border_title = Text(str(self._cache_file), style="dim")

    def _set_filter_mode(self, enabled: bool, *, reset_query: bool) -> None:
        self._filter_mode = enabled
        if reset_query:
            self._search_query = ""
        self._filter_items()
        self._update_filter_indicator()

    def _append_filter_char(self, char: str) -> None:
        self._search_query += char
        self._filter_items()
        self._update_filter_indicator()

    def _filter_or_append(self, char: str) -> None:
        if not self._filter_mode:
            self._set_filter_mode(True, reset_query=True)
            return
        self._append_filter_char(char)

    def action_filter_key_f(self) -> None:
        self._filter_or_append("f")

    def action_filter_key_slash(self) -> None:
        self._filter_or_append("/")

    def action_update_key_u(self) -> None:
        if self._filter_mode:
            self._append_filter_char("u")
            return
        self._request_manifest_load(refresh=True)

    def action_quit_or_type_q(self) -> None:
        if self._filter_mode:
            self._append_filter_char("q")
            return
        self.exit()

    def action_escape(self) -> None:
        if self._filter_mode:
            self._set_filter_mode(False, reset_query=True)

    def on_key(self, event: Key) -> None:
        if not self._filter_mode:
            return

        # These keys are handled by explicit bindings to avoid duplicate input.
        if event.key in {"f", "u", "slash", "q"}:
            return

        if event.key == "backspace":
            self._search_query = self._search_query[:-1]
            self._filter_items()
            self._update_filter_indicator()
            event.stop()
            return

        if event.key == "space":
            self._append_filter_char(" ")
            event.stop()
            return

        if event.character and event.character.isprintable():
            self._append_filter_char(event.character)
            event.stop()

    def on_paste(self, event: Paste) -> None:
        if not self._filter_mode:
            return
        sanitized = event.text.replace("\r", "").replace("\n", "")
        if not sanitized:
            return
        self._append_filter_char(sanitized)
        event.stop()

    def on_resize(self, event: Resize) -> None:
        del event
        self._update_filter_indicator()
        self.call_after_refresh(self._refresh_after_resize)

    def _refresh_after_resize(self) -> None:
        self._update_filter_indicator()
        if self._manifest is None:
            return
        self._render_item_options(preserve_position=True)
        highlighted = self.query_one("#sidebar-list", OptionList).highlighted
        if highlighted is not None and highlighted < len(self._visible_matches):
            # Previews wrap to the panel width.
            self._previewed_item = None
            self._preview_item(self._visible_matches[highlighted].name)

    def on_option_list_option_highlighted(
        self, event: OptionList.OptionHighlighted
    ) -> None:
        if event.option_list.id != "sidebar-list":
            return
        if event.option_index < 0 or event.option_index >= len(
            self._visible_matches
        ):
            return
        self._preview_item(self._visible_matches[event.option_index].name)
