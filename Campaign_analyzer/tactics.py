"""Tactic normalisation and product/sub-product mapping."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

CATEGORIES_PATH = Path(__file__).resolve().parent / "data" / "tactic_categories.json"


@dataclass(frozen=True, slots=True)
class SubProduct:
    code: str
    medium: str
    kpis: Tuple[str, ...]
    data_value: str


@dataclass(frozen=True, slots=True)
class TacticInfo:
    name: str
    platforms: Tuple[str, ...]
    category: str
    product: str
    sub_products: Mapping[str, SubProduct]


@dataclass(frozen=True, slots=True)
class TacticCategories:
    """Read-only taxonomy. Mapping order is the catalog declaration order."""

    platforms: Mapping[str, Tuple[str, ...]]
    tactics: Mapping[str, TacticInfo]


@dataclass(frozen=True, slots=True)
class ProductMapping:
    product: str
    sub_products: Tuple[str, ...]


def categories_from_dict(payload: Mapping[str, object]) -> TacticCategories:
    platforms_raw = payload.get("platforms") or {}
    tactics_raw = payload.get("tactics") or {}
    if not isinstance(platforms_raw, Mapping) or not isinstance(tactics_raw, Mapping):
        raise ValueError("Tactic categories must define 'platforms' and 'tactics' objects")

    platforms = {name: tuple(aliases or ()) for name, aliases in platforms_raw.items()}
    tactics: Dict[str, TacticInfo] = {}
    for name, info in tactics_raw.items():
        product = info.get("product")
        if not product:
            raise ValueError(f"Tactic '{name}' has no product")
        sub_products = {
            code: SubProduct(
                code=code,
                medium=str(sub.get("medium", "")),
                kpis=tuple(sub.get("kpis") or sub.get("kpi") or ()),
                data_value=str(sub.get("dataValue", "")),
            )
            for code, sub in (info.get("subProducts") or {}).items()
        }
        tactics[name] = TacticInfo(
            name=name,
            platforms=tuple(info.get("platform") or ()),
            category=str(info.get("category", "")),
            product=str(product),
            sub_products=MappingProxyType(sub_products),
        )
    return TacticCategories(platforms=MappingProxyType(platforms), tactics=MappingProxyType(tactics))


@lru_cache(maxsize=None)
def load_tactic_categories(path: Optional[str] = None) -> TacticCategories:
    source = Path(path) if path else CATEGORIES_PATH
    payload = json.loads(source.read_text(encoding="utf-8"))
    return categories_from_dict(payload)


def normalize_tactic_name(tactic_name: str) -> str:
    """Canonicalise legacy tactic abbreviations; YouTube labels pass through."""
    if "youtube" in tactic_name.lower():
        return tactic_name
    if tactic_name.upper() == "AAT":
        return "Advanced Audience Targeting"
    if tactic_name.upper() == "RTG":
        return "Retargeting"
    return tactic_name


def _mapping(info: TacticInfo) -> ProductMapping:
    return ProductMapping(product=info.product, sub_products=tuple(info.sub_products.keys()))


def map_tactic_to_product(
    tactic_name: str, categories: Optional[TacticCategories] = None
) -> Optional[ProductMapping]:
    """Resolve a tactic label to its product, or ``None`` when nothing matches.

    Resolution order: exact key, then two-way case-insensitive substring over
    the catalog keys, then platform name/alias. Ties go to the first entry in
    catalog order.
    """

    catalog = categories or load_tactic_categories()
    exact = catalog.tactics.get(tactic_name)
    if exact is not None:
        return _mapping(exact)

    lowered = tactic_name.lower()
    for key, info in catalog.tactics.items():
        key_lower = key.lower()
        if lowered in key_lower or key_lower in lowered:
            return _mapping(info)

    for platform, aliases in catalog.platforms.items():
        platform_lower = platform.lower()
        if platform_lower != lowered and not any(alias.lower() == lowered for alias in aliases):
            continue
        for info in catalog.tactics.values():
            if any(name.lower() == platform_lower for name in info.platforms):
                return _mapping(info)

    return None


def get_all_products(categories: Optional[TacticCategories] = None) -> List[str]:
    catalog = categories or load_tactic_categories()
    seen: Dict[str, None] = {}
    for info in catalog.tactics.values():
        seen.setdefault(info.product, None)
    return list(seen.keys())


def group_tactics_by_product(
    tactics: Iterable[str], categories: Optional[TacticCategories] = None
) -> Dict[str, List[str]]:
    """Group detected tactics under their resolved product.

    Tactics without a mapping are kept under their own name so they still take
    part in filename routing.
    """

    groups: Dict[str, List[str]] = {}
    for tactic in tactics:
        mapping = map_tactic_to_product(tactic, categories)
        product = mapping.product if mapping else tactic
        members = groups.setdefault(product, [])
        if tactic not in members:
            members.append(tactic)
    return groups
