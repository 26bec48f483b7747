"""Expected report tables per tactic, as exported by the reporting platform."""

from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, Tuple

FALLBACK_TABLES: Tuple[str, ...] = ("Monthly Performance", "Campaign Performance", "Creative Performance")

_META_TABLES = (
    "Monthly Performance",
    "Performance by Platform",
    "Campaign Performance",
    "Ad Set Performance",
    "Facebook Ads Performance",
    "Instagram Ads Performance",
    "Conversion Events Total",
    "Conversion Events by Campaign",
    "Conversion Events by Creative",
    "Performance by Gender Clicks",
    "Region Performance",
    "DMA Performance",
    "Post Interactions by Campaign",
)

_YOUTUBE_TABLES = (
    "Monthly Performance",
    "Campaign Performance",
    "Creative Performance",
    "Performance by DMA",
    "Performance by City",
    "Device Performance",
    "Placement Performance",
)

_GEOFENCING_TABLES = (
    "Monthly Performance",
    "Campaign Type",
    "Campaign Performance",
    "Tactic Performance",
    "Creative/Ad Performance",
    "Creative By Size",
    "Creative Previews",
    "Device Performance",
    "Performance by City",
    "Performance by Zip",
    "Conversion Zone Performance",
    "Target Fence Performance",
)

_AUDIENCE_TABLES = (
    "Monthly Performance",
    "Campaign Performance",
    "Tactic Performance",
    "Creative Performance",
    "Performance by City",
    "Performance by Zip",
    "Device Performance",
)

_ENDORSEMENT_TABLES = (
    "Monthly Performance",
    "Campaign Performance",
    "Creative Performance",
    "Other Creative Previews",
    "Impressions by Device",
    "Clicks by Device",
    "Station Performance",
)

_CALL_TABLES = (
    "Monthly Performance",
    "Caller Information",
    "Call Summary Information",
    "Caller State Breakout",
)

_EMAIL_TABLES = ("Monthly Performance", "Campaign Performance")

# Declaration order is the tie-break order for partial matches.
TACTIC_TABLES: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "Overview": (
            "Overview",
            "Display - Product Performance",
            "Video - Product Performance",
            "STV - Product Performance",
            "Search Engine Marketing",
            "Digital Endorsements - Product Performance",
            "Local Display (AMPED) - Product Performance",
            "Display Ads - Overall Performance",
            "Video Ads - Overall Performance",
            "STV Ads - Overall Performance",
            "Social Ads - Overall Performance",
            "SEM Ads - Overall Performance",
            "SPARK Ads - Overall Performance",
            "E-mail Marketing - Overall Performance",
            "Digital and Local Endorsements - Overall Performance",
            "AMPED Ads - Overall Performance",
            "Programmatic Audio Marketing Ads - Overall Performance",
            "Call Tracking - Overall Performance",
        ),
        "Spark": (
            "Monthly Performance",
            "Campaign Performance",
            "Geo Performance by City",
            "Geo Performance by State/Zip Code",
            "Device Performance",
            "Placements – Top 10",
        ),
        "Hulu": (
            "Monthly Performance",
            "Campaign Performance",
            "Tactic Performance",
            "Creative Performance",
            "Performance by City",
            "Performance by Zip",
        ),
        "Live 365": ("Monthly Performance", "Campaign Performance", "Creative Performance"),
        "SSM": (
            "Monthly Performance",
            "Campaign Performance",
            "Creative Performance",
            "Ad Set Performance",
            "Video Performance",
            "Device Performance",
            "Impressions by Gender",
            "Performance by Age Group",
            "Station Performance",
            "Post Interactions by Campaign",
        ),
        "SEM": (
            "Monthly Performance",
            "Campaign Performance",
            "Client Performance",
            "Ad Group Performance",
            "Top 10 Keywords (Impressions)",
            "Top 10 Keywords (Clicks)",
            "Top 10 Keywords (Conversions)",
            "Overall Keyword Performance",
            "Device Performance",
            "Performance by City",
            "Performance by Zip",
        ),
        "YouTube TV": _YOUTUBE_TABLES,
        "YouTube": _YOUTUBE_TABLES,
        "TrueView": _YOUTUBE_TABLES,
        "TikTok": (
            "Monthly Performance",
            "Campaign Performance",
            "Creative Performance",
            "Tactic Performance",
            "Monthly Video Performance",
            "Campaign Video Performance",
            "Creative Video Performance",
            "Performance by Age Group",
            "Performance by Gender",
            "Performance by DMA",
        ),
        "Targeted Video": (
            "Monthly Performance",
            "Campaign Performance",
            "Tactic Performance",
            "Creative Performance",
            "Creative Previews",
            "Performance by City",
            "Performance by Zip",
            "Device Performance",
            "Tracked Pixel Events by Day",
        ),
        "Target Native": _AUDIENCE_TABLES,
        "Targeted Display": (
            "Monthly Performance",
            "Campaign Performance",
            "Tactic Performance",
            "Creative Performance",
            "Creative By Name",
            "Creative By Size",
            "Creative Previews",
            "Performance by City",
            "Performance by Zip",
            "Device Performance",
            "Tracked Pixel Events by Day",
        ),
        "Streaming TV": (
            "Monthly Performance",
            "Campaign Performance",
            "Tactic Performance",
            "Creative Performance",
            "Performance by City",
            "Performance by Zip",
            "Publisher Performance",
        ),
        "Social Display": (
            "Monthly Performance",
            "Campaign Performance",
            "Tactic Performance",
            "Creative Performance",
            "Creative/Ad Performance",
            "Creative By Size",
            "Performance by City",
            "Performance by Zip",
            "Device Performance",
            "Tracked Pixel Events by Day",
        ),
        "Snapchat": (
            "Monthly Performance",
            "Swipe Ups",
            "Video Complete(s)",
            "Campaign Performance",
            "Creative Performance",
            "Creative Previews",
            "Video Performance",
            "Performance by Age Group",
            "Impressions by Gender",
            "Performance by Interest",
            "Impressions by Device",
            "Device Performance",
            "Performance by Region",
            "Geo Performance by DMA",
        ),
        "Programmatic Audio": (
            "Monthly Performance",
            "Campaign Performance",
            "Tactic Performance",
            "Creative Performance",
            "Creative Previews",
            "Geo Performance – City",
            "Geo Performance – Metro Area",
            "Site/Domain Performance",
        ),
        "Pinterest": (
            "Monthly Performance",
            "Conversion Type",
            "Campaign Performance",
            "Tactic Performance",
            "Initiative Performance",
            "Creative Performance",
            "Video Performance",
        ),
        "Nextdoor": ("Monthly Performance", "Campaign Performance", "Tactic Performance", "Creative Performance"),
        "Local Display": (
            "Monthly Performance",
            "Product Performance",
            "Product Performance by Station",
            "Tactic Performance",
            "Creative Performance",
            "Creative By Size",
            "Station Performance",
            "Device Breakdown",
            "Performance by Region",
            "Performance by City",
        ),
        "LinkedIn": ("Monthly Performance", "Campaign Performance", "Tactic Performance", "Creative Performance"),
        "Geofencing": _GEOFENCING_TABLES,
        "Geofencing W: Foot Traffic": _GEOFENCING_TABLES,
        "E-Mail Marketing": _EMAIL_TABLES,
        "Email Marketing": _EMAIL_TABLES,
        "Meta": _META_TABLES,
        "Facebook": _META_TABLES,
        "Instagram": _META_TABLES,
        "Digital Endorsements (Social & Local)": _ENDORSEMENT_TABLES,
        "Digital Endorsements": _ENDORSEMENT_TABLES,
        "Call Performance": _CALL_TABLES,
        "Call Tracking": _CALL_TABLES,
        "Addressable STV": (
            "Monthly Performance",
            "Campaign Performance",
            "Tactic Performance",
            "Creative Performance",
            "Conversion Zone Performance",
            "Performance by City",
            "Performance by Zip",
            "Device Performance",
            "Site/Domain Performance",
        ),
        "Addressable Video": (
            "Monthly Performance",
            "Campaign Performance",
            "Tactic Performance",
            "Creative By Name",
            "Creative Previews",
            "Conversion Zone Performance",
            "Performance by City",
            "Performance by Zip",
            "Device Performance",
            "Site/Domain Performance",
        ),
        "Addressable Display": (
            "Monthly Performance",
            "Campaign Performance",
            "Tactic Performance",
            "Creative By Name",
            "Creative By Size",
            "Creative Previews",
            "Conversion Zone Performance",
            "Performance by City",
            "Performance by Zip",
        ),
        # Legacy abbreviations still present in older campaign exports
        "AAT": _AUDIENCE_TABLES,
        "RTG": _AUDIENCE_TABLES,
        "Advanced Audience Targeting": _AUDIENCE_TABLES,
        "Retargeting": _AUDIENCE_TABLES,
    }
)


def tables_for_tactic(tactic: str) -> List[str]:
    """Return the expected tables for ``tactic``; never empty.

    Exact key, then case-insensitive key, then two-way substring in
    declaration order, then :data:`FALLBACK_TABLES`.
    """

    direct = TACTIC_TABLES.get(tactic)
    if direct is not None:
        return list(direct)

    lowered = tactic.lower()
    for key, tables in TACTIC_TABLES.items():
        if key.lower() == lowered:
            return list(tables)

    for key, tables in TACTIC_TABLES.items():
        key_lower = key.lower()
        if lowered in key_lower or key_lower in lowered:
            return list(tables)

    return list(FALLBACK_TABLES)


def has_tables(tactic: str) -> bool:
    """True when ``tactic`` is an exact catalog key."""
    return tactic in TACTIC_TABLES
