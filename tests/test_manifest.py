import io
import json
from pathlib import Path

import pytest

from rainstash_browse.exceptions import ManifestDownloadError, ManifestParseError
from rainstash_browse.manifest import (
    VANILLA_MANIFEST_URL,
    ensure_manifest_cache,
    items_by_display_name,
    load_manifest,
    parse_class_info_from_file,
    parse_command_sort_from_file,
    parse_items,
    parse_items_from_file,
    update_manifest_cache,
)
from rainstash_browse.models import RiskItem

MANIFEST_PATH = Path(__file__).parent / "data" / "test_object.json"


def test_parse_items_from_file_keys_items_by_object_name() -> None:
    parsed = parse_items_from_file(MANIFEST_PATH)

    assert parsed["Test_Item"].name == "Test Item"
    assert parsed["Strange_Bottle"].item_class == "Grey"
    assert len(parsed) == 6


def test_parse_class_info_and_command_sort_from_file() -> None:
    assert parse_class_info_from_file(MANIFEST_PATH)["green"] == {"color": "#6dbf42"}
    assert parse_command_sort_from_file(MANIFEST_PATH) == [
        "Bustling Fungus",
        "Soldiers_Syringe",
        "Unknown Item",
    ]


def test_parse_items_requires_items_section() -> None:
    with pytest.raises(ManifestParseError, match="items"):
        parse_items({"classInfo": {}})


def test_parse_items_names_the_invalid_item() -> None:
    with pytest.raises(ManifestParseError, match="Broken"):
        parse_items({"items": {"Broken": {"name": "Broken"}}})


def test_read_manifest_rejects_invalid_json(tmp_path) -> None:
    path = tmp_path / "itemManifest.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ManifestParseError, match="not valid JSON"):
        load_manifest(path)


def test_load_manifest_defaults_optional_sections(tmp_path) -> None:
    path = tmp_path / "itemManifest.json"
    path.write_text(
        json.dumps({"items": {"A": {"name": "A", "description": "first"}}}),
        encoding="utf-8",
    )

    manifest = load_manifest(path)

    assert manifest.items == {"A": RiskItem(name="A", description="first")}
    assert manifest.class_info == {}
    assert manifest.command_sort == []


def test_items_by_display_name() -> None:
    items = parse_items_from_file(MANIFEST_PATH)

    by_name = items_by_display_name(items)

    assert by_name["Soldier's Syringe"] is items["Soldiers_Syringe"]


def test_update_manifest_cache_uses_vanilla_url_and_timeout(
    tmp_path, monkeypatch
) -> None:
    destination = tmp_path / "cache" / "itemManifest.json"
    captured: dict[str, object] = {}

    def _fake_urlopen(url: str, timeout: float) -> io.BytesIO:
        captured["url"] = url
        captured["timeout"] = timeout
        return io.BytesIO(b'{"items": {}}')

    monkeypatch.setattr("urllib.request.urlopen", _fake_urlopen)

    update_manifest_cache(destination, timeout_seconds=12.5)

    assert captured == {"url": VANILLA_MANIFEST_URL, "timeout": 12.5}
    assert destination.read_bytes() == b'{"items": {}}'
    assert [path.name for path in destination.parent.iterdir()] == [
        "itemManifest.json"
    ]


def test_failed_download_keeps_existing_cache(tmp_path, monkeypatch) -> None:
    destination = tmp_path / "itemManifest.json"
    destination.write_text("cached", encoding="utf-8")

    def _fake_urlopen(url: str, timeout: float) -> io.BytesIO:
        raise OSError("connection refused")

    monkeypatch.setattr("urllib.request.urlopen", _fake_urlopen)

    with pytest.raises(ManifestDownloadError, match="connection refused"):
        update_manifest_cache(destination, manifest_url="https://example.invalid/m")

    assert destination.read_text(encoding="utf-8") == "cached"
    assert [path.name for path in tmp_path.iterdir()] == ["itemManifest.json"]


def test_ensure_manifest_cache_only_downloads_when_needed(
    tmp_path, monkeypatch
) -> None:
    destination = tmp_path / "itemManifest.json"
    downloads: list[str] = []

    def _fake_download(url: str, path: Path, *, timeout_seconds: float) -> None:
        downloads.append(url)
        path.write_text('{"items": {}}', encoding="utf-8")

    monkeypatch.setattr(
        "rainstash_browse.manifest.download_url_to_path", _fake_download
    )

    ensure_manifest_cache(destination, manifest_url="https://example.invalid/m")
    ensure_manifest_cache(destination, manifest_url="https://example.invalid/m")
    ensure_manifest_cache(
        destination, manifest_url="https://example.invalid/m", refresh=True
    )

    assert downloads == ["https://example.invalid/m", "https://example.invalid/m"]


def test_unknown_url_scheme_raises_download_error(tmp_path) -> None:
    destination = tmp_path / "itemManifest.json"

    with pytest.raises(ManifestDownloadError, match="not-a-url"):
        update_manifest_cache(destination, manifest_url="not-a-url")

    assert list(tmp_path.iterdir()) == []


def test_cache_parent_that_is_a_file_raises_download_error(tmp_path) -> None:
    blocker = tmp_path / "cache"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(ManifestDownloadError):
        update_manifest_cache(
            blocker / "itemManifest.json",
            manifest_url="https://example.invalid/m",
        )

    assert [path.name for path in tmp_path.iterdir()] == ["cache"]
