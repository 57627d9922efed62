from __future__ import annotations

import textwrap
from collections.abc import Iterable

from rich.color import Color, ColorParseError
from rich.markup import escape
from rich.text import Text

from rainstash_browse.manifest import ClassInfo
from rainstash_browse.models import RiskItem, manifest_key_for_item_class

MATCH_STYLE = "bold red"


def format_detail_row(label: str, value: str) -> str:
    return f"{label:<20}{value}"


def render_kv_box(rows: list[tuple[str, str]], width: int) -> list[str]:
    if not rows:
        return []
    label_width = max(len(label) for label, _ in rows)
    inner_width = max(30, width - 2)
    value_width = max(10, inner_width - label_width - 3)

    lines = ["╭" + ("─" * inner_width) + "╮"]
    for label, value in rows:
        wrapped = textwrap.wrap(value, width=value_width) or [""]
        lines.append(f"│ {label:<{label_width}} {wrapped[0]:<{value_width}} │")
        for continuation in wrapped[1:]:
            lines.append(f"│ {'':<{label_width}} {continuation:<{value_width}} │")
    lines.append("╰" + ("─" * inner_width) + "╯")
    return lines


def item_class_color(item: RiskItem, class_info: ClassInfo) -> str | None:
    class_key = manifest_key_for_item_class(item.item_class)
    if class_key is None:
        return None
    color = class_info.get(class_key, {}).get("color")
    if not color:
        return None
    try:
        Color.parse(color)
    except ColorParseError:
        return None
    return color


def highlight_matches(name: str, indices: Iterable[int]) -> Text:
    text = Text(name)
    for index in indices:
        if 0 <= index < len(name):
            text.stylize(MATCH_STYLE, index, index + 1)
    return text


def render_item_preview(
    item: RiskItem,
    class_info: ClassInfo,
    *,
    content_width: int,
) -> str:
    """Render an item as Rich markup for the main panel."""
    rows = [
        (label, escape(value))
        for label, value in item.detail_rows()
        if label not in {"Name", "Description", "Item Class"}
    ]
    class_label = escape(item.item_class)
    color = item_class_color(item, class_info)
    if color is not None:
        class_label = f"[{color}]{class_label}[/]"

    description = textwrap.wrap(
        escape(item.description), width=max(20, content_width)
    ) or ["No description."]

    lines = [
        f"# {escape(item.name)}",
        "",
        format_detail_row("Item Class", class_label),
        "",
        *description,
        "",
        "Details:",
    ]
    lines.extend(render_kv_box(rows, content_width))
    return "\n".join(lines)
