"""Display helpers shared by the catalogue routes."""

from __future__ import annotations

import urllib.parse
from typing import List, Optional, Sequence

from .schemas import DeveloperLink, HeroStat, Mod

UNIVERSAL_KEYWORDS = {"universal", "all", "all versions", "any"}

# (hostname fragment, kind, label); first match wins.
HOSTNAME_MATCHERS = [
    ("github.", "github", "GitHub"),
    ("gitlab.", "github", "GitLab"),
    ("twitter.", "twitter", "Twitter"),
    ("x.com", "twitter", "Twitter"),
    ("youtube.", "youtube", "YouTube"),
    ("youtu.be", "youtube", "YouTube"),
    ("twitch.", "youtube", "Twitch"),
    ("itch.io", "website", "itch.io"),
    ("steamcommunity", "website", "Steam"),
    ("patreon.", "website", "Patreon"),
    ("gumroad.", "website", "Gumroad"),
    ("discord.", "website", "Discord"),
]


def format_game_version(value: Optional[str]) -> str:
    normalized = (value or "").strip()
    if not normalized:
        return "All Versions"
    if " ".join(normalized.lower().split()) in UNIVERSAL_KEYWORDS:
        return "All Versions"
    return normalized


def developer_link_meta(url: str) -> DeveloperLink:
    try:
        hostname = (urllib.parse.urlsplit(url).hostname or "").lower()
    except ValueError:
        hostname = ""
    for keyword, kind, label in HOSTNAME_MATCHERS:
        if hostname and keyword in hostname:
            return DeveloperLink(url=url, kind=kind, label=label)
    return DeveloperLink(url=url, kind="website", label="Website")


def developer_links(mod: Mod) -> List[DeveloperLink]:
    return [developer_link_meta(url) for url in mod.developer_links]


def format_stat_value(value: int) -> str:
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}m"
    if value >= 1_000:
        return f"{int(value / 1_000 + 0.5)}k"
    return f"{value:,}"


def hero_stats(mods: Sequence[Mod]) -> List[HeroStat]:
    """Landing page counters: live mods, distinct creators, total installs."""
    values = [
        ("Live Mods", len(mods)),
        ("Verified Creators", len({m.author.id for m in mods})),
        ("Daily Installs", sum(m.downloads for m in mods)),
    ]
    return [HeroStat(label=label, value=v, display=format_stat_value(v)) for label, v in values]
