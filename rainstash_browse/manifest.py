from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rainstash_browse.downloads import download_url_to_path
from rainstash_browse.exceptions import ManifestParseError
from rainstash_browse.models import RiskItem

logger = logging.getLogger(__name__)

VANILLA_MANIFEST_URL = (
    "https://fustran.github.io/rainstash/items/vanilla_items/itemManifest.json"
)
DOWNLOAD_TIMEOUT_SECONDS = 30.0

ClassInfo = dict[str, dict[str, str]]


@dataclass(frozen=True)
class Manifest:
    items: dict[str, RiskItem]
    class_info: ClassInfo = field(default_factory=dict)
    command_sort: list[str] = field(default_factory=list)


def default_cache_path() -> Path:
    return Path.home() / ".cache" / "rainstash-browse" / "itemManifest.json"


def update_manifest_cache(
    path: Path,
    *,
    manifest_url: str | None = None,
    timeout_seconds: float = DOWNLOAD_TIMEOUT_SECONDS,
) -> None:
    """Download the manifest into the local cache file at ``path``.

    ``manifest_url`` defaults to the vanilla Rainstash manifest.
    """
    url = manifest_url or VANILLA_MANIFEST_URL
    logger.info("Updating manifest cache %s", path)
    download_url_to_path(url, path, timeout_seconds=timeout_seconds)


def ensure_manifest_cache(
    path: Path,
    *,
    manifest_url: str | None = None,
    refresh: bool = False,
    timeout_seconds: float = DOWNLOAD_TIMEOUT_SECONDS,
) -> Path:
    if refresh or not path.is_file():
        update_manifest_cache(
            path, manifest_url=manifest_url, timeout_seconds=timeout_seconds
        )
    else:
        logger.debug("Using cached manifest %s", path)
    return path


def read_manifest_json(path: Path) -> dict[str, Any]:
    logger.info("Opening manifest file %s", path)
    try:
        with path.open(encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(f"{path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise ManifestParseError(f"Could not read {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestParseError(f"{path} does not contain a JSON object.")
    return data


def _section(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if key not in data:
        raise ManifestParseError(f"Could not parse {key} section of the manifest.")
    value = data[key]
    if not isinstance(value, kind):
        raise ManifestParseError(f"The {key} section has an unexpected shape.")
    return value


def parse_items(data: Mapping[str, Any]) -> dict[str, RiskItem]:
    """Parse the ``items`` object, keyed by the manifest object name."""
    items: dict[str, RiskItem] = {}
    for key, value in _section(data, "items", dict).items():
        try:
            items[key] = RiskItem.from_manifest(value)
        except ManifestParseError as exc:
            raise ManifestParseError(f"Invalid item {key!r}: {exc}") from exc
    return items


def parse_class_info(data: Mapping[str, Any]) -> ClassInfo:
    class_info: ClassInfo = {}
    for class_name, attributes in _section(data, "classInfo", dict).items():
        if not isinstance(attributes, dict):
            raise ManifestParseError(f"Invalid classInfo entry {class_name!r}.")
        class_info[class_name] = {
            str(attribute): str(value) for attribute, value in attributes.items()
        }
    return class_info


def parse_command_sort(data: Mapping[str, Any]) -> list[str]:
    command_sort = _section(data, "commandSort", list)
    if not all(isinstance(name, str) for name in command_sort):
        raise ManifestParseError("The commandSort section must list item names.")
    return list(command_sort)


def parse_items_from_file(path: Path) -> dict[str, RiskItem]:
    return parse_items(read_manifest_json(path))


def parse_class_info_from_file(path: Path) -> ClassInfo:
    return parse_class_info(read_manifest_json(path))


def parse_command_sort_from_file(path: Path) -> list[str]:
    return parse_command_sort(read_manifest_json(path))


def load_manifest(path: Path) -> Manifest:
    data = read_manifest_json(path)
    manifest = Manifest(
        items=parse_items(data),
        class_info=parse_class_info(data) if "classInfo" in data else {},
        command_sort=parse_command_sort(data) if "commandSort" in data else [],
    )
    logger.info("Parsed %d items from %s", len(manifest.items), path)
    return manifest


def items_by_display_name(items: Mapping[str, RiskItem]) -> dict[str, RiskItem]:
    return {item.name: item for item in items.values()}
