from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from rainstash_browse.exceptions import ManifestParseError

ItemClass = Literal[
    "White", "Green", "Red", "Yellow", "Orange", "Purple", "Grey", "None"
]

ITEM_CLASS_BY_MANIFEST_KEY: dict[str, ItemClass] = {
    "white": "White",
    "green": "Green",
    "red": "Red",
    "yellow": "Yellow",
    "orange": "Orange",
    "purple": "Purple",
    "misc": "Grey",
}

NOT_AVAILABLE = "N/A"


def item_class_from_manifest(value: Any) -> ItemClass:
    if isinstance(value, str):
        return ITEM_CLASS_BY_MANIFEST_KEY.get(value, "None")
    return "None"


def manifest_key_for_item_class(item_class: ItemClass) -> str | None:
    for key, value in ITEM_CLASS_BY_MANIFEST_KEY.items():
        if value == item_class:
            return key
    return None


def _required_text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ManifestParseError(f"Item field {key!r} must be a string.")
    return value


def _optional(data: Mapping[str, Any], key: str, kinds: tuple[type, ...]) -> Any:
    value = data.get(key)
    if value is None:
        return None
    # bool is an int subclass, never accept it as a number.
    if not isinstance(value, kinds) or (
        isinstance(value, bool) and bool not in kinds
    ):
        raise ManifestParseError(f"Item field {key!r} has an invalid type.")
    return value


@dataclass(frozen=True)
class RiskItem:
    name: str
    description: str
    item_class: ItemClass = "None"
    cooldown: float | None = None
    embryo: str | None = None
    stack: str | None = None
    unlock: str | None = None
    drop: str | None = None
    has_video: bool | None = None
    max_stacks: int | None = None

    @classmethod
    def from_manifest(cls, data: Mapping[str, Any]) -> RiskItem:
        if not isinstance(data, Mapping):
            raise ManifestParseError("Item entries must be JSON objects.")

        cooldown = _optional(data, "cooldown", (int, float))
        return cls(
            name=_required_text(data, "name"),
            description=_required_text(data, "description"),
            item_class=item_class_from_manifest(data.get("itemClass")),
            cooldown=float(cooldown) if cooldown is not None else None,
            embryo=_optional(data, "embryo", (str,)),
            stack=_optional(data, "stack", (str,)),
            unlock=_optional(data, "unlock", (str,)),
            drop=_optional(data, "drop", (str,)),
            has_video=_optional(data, "hasVideo", (bool,)),
            max_stacks=_optional(data, "maxStacks", (int,)),
        )

    @property
    def cooldown_or_default(self) -> float:
        return self.cooldown if self.cooldown is not None else 0.0

    @property
    def embryo_or_default(self) -> str:
        return self.embryo if self.embryo is not None else NOT_AVAILABLE

    @property
    def stack_or_default(self) -> str:
        return self.stack if self.stack is not None else NOT_AVAILABLE

    @property
    def unlock_or_default(self) -> str:
        return self.unlock if self.unlock is not None else NOT_AVAILABLE

    @property
    def drop_or_default(self) -> str:
        return self.drop if self.drop is not None else NOT_AVAILABLE

    @property
    def video_or_default(self) -> bool:
        return bool(self.has_video)

    @property
    def max_stacks_or_default(self) -> int:
        return self.max_stacks if self.max_stacks is not None else 0

    def detail_rows(self) -> list[tuple[str, str]]:
        return [
            ("Name", self.name),
            ("Description", self.description),
            ("Cooldown", f"{self.cooldown_or_default:g}"),
            ("Embryo", self.embryo_or_default),
            ("Stack", self.stack_or_default),
            ("Unlock", self.unlock_or_default),
            ("Drop", self.drop_or_default),
            ("Has Video", str(self.video_or_default).lower()),
            ("Max Stack Size", str(self.max_stacks_or_default)),
            ("Item Class", self.item_class),
        ]

    def __str__(self) -> str:
        return ", ".join(f"{label}: {value}" for label, value in self.detail_rows())
