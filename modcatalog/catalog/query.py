"""
Filtering and derived views for the mod catalogue.

Everything in this module is a pure function of its inputs: given the same
collection and the same filters the same lists come back, in the same
order, so callers are free to recompute on every render. Matching is
deliberately simple. Tags are an AND across a case-insensitive set, and
the free-text query is a lowercase substring test against a haystack built
from the mod's text fields. There is no tokenization and no ranking.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Set

from ..config import CAROUSEL_LIMIT
from .schemas import CatalogViews, Mod


def _norm(s: Optional[str]) -> str:
    """Normalize a string for case-insensitive comparison.

    Parameters
    ----------
    s : Optional[str]
        The string to normalize.

    Returns
    -------
    str
        The lowercased, stripped string. ``None`` becomes ``""``.
    """
    return (s or "").strip().lower()


def normalize_query(query: Optional[str]) -> str:
    return _norm(query)


def required_tag_set(tags: Iterable[str]) -> Set[str]:
    return {t.lower() for t in tags if t}


def dedupe_tags(tags: Iterable[str]) -> List[str]:
    """Drop case-insensitive duplicates, keeping the first-seen casing."""
    seen: Set[str] = set()
    unique: List[str] = []
    for tag in tags:
        key = tag.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(tag)
    return unique


def searchable_text(mod: Mod) -> str:
    """Return the lowercase haystack the text filter searches in."""
    parts = [
        mod.title,
        mod.description,
        mod.long_description,
        mod.author.name,
        " ".join(mod.tags),
        " ".join(mod.feature_list),
        mod.installation_guide,
        mod.changelog,
    ]
    return " ".join(parts).lower()


def matches_tags(mod: Mod, required: Set[str]) -> bool:
    if not required:
        return True
    mod_tags = {t.lower() for t in mod.tags}
    return required <= mod_tags


def matches_text(mod: Mod, query: str) -> bool:
    if not query:
        return True
    return query in searchable_text(mod)


def filter_mods(
    mods: Sequence[Mod],
    tags: Iterable[str] = (),
    query: Optional[str] = "",
) -> List[Mod]:
    """Filter a collection by required tags and free text.

    Parameters
    ----------
    mods : Sequence[Mod]
        The full collection, in display order.
    tags : Iterable[str]
        Tags every returned mod must carry (compared case-insensitively).
        An empty iterable matches everything.
    query : Optional[str]
        Free-text query. Surrounding whitespace and case are ignored; an
        empty query matches everything.

    Returns
    -------
    List[Mod]
        The mods matching both filters, in input order.
    """
    required = required_tag_set(tags)
    nq = normalize_query(query)
    return [m for m in mods if matches_tags(m, required) and matches_text(m, nq)]


def featured_mods(mods: Sequence[Mod]) -> List[Mod]:
    return [m for m in mods if m.featured]


def newest_mods(mods: Sequence[Mod], limit: int = CAROUSEL_LIMIT) -> List[Mod]:
    # sorted() is stable with reverse=True, so ties keep input order.
    return sorted(mods, key=lambda m: m.uploaded_date, reverse=True)[:limit]


def trending_mods(mods: Sequence[Mod], limit: int = CAROUSEL_LIMIT) -> List[Mod]:
    return sorted(mods, key=lambda m: m.downloads, reverse=True)[:limit]


def tag_universe(mods: Sequence[Mod]) -> List[str]:
    """Every distinct tag string across the whole collection.

    Tags differing only by case are kept as separate entries; callers sort
    the list themselves for display.
    """
    seen: Set[str] = set()
    tags: List[str] = []
    for mod in mods:
        for tag in mod.tags:
            if tag not in seen:
                seen.add(tag)
                tags.append(tag)
    return tags


def build_views(
    mods: Sequence[Mod],
    tags: Iterable[str] = (),
    query: Optional[str] = "",
) -> CatalogViews:
    results = filter_mods(mods, tags, query)
    return CatalogViews(
        results=results,
        featured=featured_mods(results),
        newest=newest_mods(results),
        trending=trending_mods(results),
    )
