"""
Standard item catalog for new rooms.

Room pools are always a prefix of the catalog in catalog order. The pool is
never shuffled, so two rooms created with the same size start from identical
pools and a draft can be replayed exactly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
import yaml
from pydantic import ValidationError

from draft.logic.state import DraftItem

if TYPE_CHECKING:
    from pathlib import Path

logger = structlog.get_logger()

STANDARD_CATALOG: tuple[DraftItem, ...] = (
    DraftItem(id=1, name="Lightning Bolt", power=100),
    DraftItem(id=2, name="Counterspell", power=90),
    DraftItem(id=3, name="Giant Growth", power=80),
    DraftItem(id=4, name="Dark Ritual", power=85),
    DraftItem(id=5, name="Healing Salve", power=70),
    DraftItem(id=6, name="Ancestral Recall", power=95),
    DraftItem(id=7, name="Black Lotus", power=100),
    DraftItem(id=8, name="Mox Pearl", power=90),
    DraftItem(id=9, name="Time Walk", power=95),
    DraftItem(id=10, name="Swords to Plowshares", power=85),
    DraftItem(id=11, name="Force of Will", power=90),
    DraftItem(id=12, name="Brainstorm", power=75),
    DraftItem(id=13, name="Sol Ring", power=85),
    DraftItem(id=14, name="Path to Exile", power=80),
    DraftItem(id=15, name="Demonic Tutor", power=90),
    DraftItem(id=16, name="Wrath of God", power=90),
    DraftItem(id=17, name="Llanowar Elves", power=70),
    DraftItem(id=18, name="Serra Angel", power=80),
    DraftItem(id=19, name="Shivan Dragon", power=85),
    DraftItem(id=20, name="Birds of Paradise", power=75),
    DraftItem(id=21, name="Fireball", power=80),
    DraftItem(id=22, name="Mana Drain", power=90),
    DraftItem(id=23, name="Sengir Vampire", power=75),
    DraftItem(id=24, name="Wheel of Fortune", power=85),
)


class CatalogError(ValueError):
    """Catalog file is missing, malformed, or holds duplicate item ids."""


def validate_catalog(items: tuple[DraftItem, ...]) -> tuple[DraftItem, ...]:
    """Return items unchanged after checking they are non-empty with unique ids."""
    if not items:
        raise CatalogError("Catalog must contain at least one item")
    seen: set[int] = set()
    for item in items:
        if item.id in seen:
            raise CatalogError(f"Duplicate catalog item id: {item.id}")
        seen.add(item.id)
    return items


def load_catalog(path: Path | None = None) -> tuple[DraftItem, ...]:
    """
    Load the item catalog.

    Returns the built-in catalog when path is None. Otherwise reads a YAML
    file of the form ``items: [{id, name, power}, ...]`` and keeps its order.
    """
    if path is None:
        return STANDARD_CATALOG

    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    with path.open() as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise CatalogError(f"Malformed catalog YAML in {path}: {e}") from e

    if not isinstance(config, dict) or not isinstance(config.get("items"), list):
        raise CatalogError(f"Catalog file {path} must define an 'items' list")

    try:
        items = tuple(DraftItem.model_validate(entry) for entry in config["items"])
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog item in {path}: {e}") from e

    validate_catalog(items)
    logger.info("loaded item catalog", path=str(path), item_count=len(items))
    return items


def build_pool(catalog: tuple[DraftItem, ...], pool_size: int) -> tuple[DraftItem, ...]:
    """Return the first pool_size catalog items. Caller checks the size fits."""
    if not 0 < pool_size <= len(catalog):
        raise ValueError(f"Pool size {pool_size} outside 1-{len(catalog)}")
    return catalog[:pool_size]
