"""
Day-level statistics derived from timeline cards.

Every function here is pure and independent of card order except where the
order of first appearance is used for presentation (categories, app ties,
distractions). Failed-processing cards must already be removed by the caller.
"""
import json
import math
from typing import Iterable, Optional

from pydantic import ValidationError

from schemas import (
    ActivityRecord,
    AnnotatedDistraction,
    AppUsage,
    CardMetadata,
    CategoryShare,
    DayAggregate
)

UNCATEGORIZED = "Uncategorized"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_duration(start_ts: int, end_ts: int) -> int:
    """Seconds interval to whole minutes, rounding .5 up."""
    return round_half_up((end_ts - start_ts) / 60)


def card_minutes(card: ActivityRecord) -> int:
    return calculate_duration(card.start_ts, card.end_ts)


def parse_metadata(raw: Optional[str]) -> tuple[CardMetadata, Optional[str]]:
    """
    Parse a card's metadata JSON.

    Returns (metadata, warning). Missing metadata is simply empty; metadata
    that is not valid JSON or not a JSON object is also treated as empty,
    with a warning message describing the failure. Within an object, a
    malformed distractions or appSites field only empties that field.
    """
    if not raw:
        return CardMetadata(), None

    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        return CardMetadata(), f"Failed to parse metadata: {e}"

    if not isinstance(parsed, dict):
        return CardMetadata(), f"Failed to parse metadata: expected an object, got {type(parsed).__name__}"

    try:
        return CardMetadata.model_validate(parsed), None
    except ValidationError as e:
        return CardMetadata(), f"Failed to parse metadata: {e}"


def total_duration(cards: Iterable[ActivityRecord]) -> int:
    return sum(card_minutes(card) for card in cards)


def distinct_categories(cards: Iterable[ActivityRecord]) -> list[str]:
    """Non-empty categories in first-seen order."""
    categories = []
    for card in cards:
        if card.category and card.category not in categories:
            categories.append(card.category)
    return categories


def category_breakdown(cards: Iterable[ActivityRecord]) -> list[CategoryShare]:
    """Minutes per category (missing -> Uncategorized) with rounded percent shares."""
    minutes_by_category: dict[str, int] = {}
    for card in cards:
        category = card.category or UNCATEGORIZED
        minutes_by_category[category] = minutes_by_category.get(category, 0) + card_minutes(card)

    total = sum(minutes_by_category.values())
    return [
        CategoryShare(
            category=category,
            minutes=minutes,
            percent=round_half_up(minutes / total * 100) if total else 0
        )
        for category, minutes in minutes_by_category.items()
    ]


def _app_usage_from(pairs: Iterable[tuple[ActivityRecord, CardMetadata]]) -> list[AppUsage]:
    stats: dict[str, AppUsage] = {}
    for card, metadata in pairs:
        duration = card_minutes(card)
        for app in (metadata.app_sites.primary, metadata.app_sites.secondary):
            if not app:
                continue
            usage = stats.setdefault(app, AppUsage(app=app))
            usage.sessions += 1
            usage.total_minutes += duration

    # sorted() is stable, so ties keep first-appearance order
    return sorted(stats.values(), key=lambda u: u.total_minutes, reverse=True)


def _distractions_from(pairs: Iterable[tuple[ActivityRecord, CardMetadata]]) -> list[AnnotatedDistraction]:
    return [
        AnnotatedDistraction(**d.model_dump(), card_start=card.start, card_end=card.end)
        for card, metadata in pairs
        for d in metadata.distractions
    ]


def _with_metadata(cards: Iterable[ActivityRecord]) -> list[tuple[ActivityRecord, CardMetadata]]:
    return [(card, parse_metadata(card.metadata)[0]) for card in cards]


def application_usage(cards: Iterable[ActivityRecord]) -> list[AppUsage]:
    """Per-app sessions and minutes, most-used first."""
    return _app_usage_from(_with_metadata(cards))


def collect_distractions(cards: Iterable[ActivityRecord]) -> list[AnnotatedDistraction]:
    """All distractions, card by card, tagged with the card's display interval."""
    return _distractions_from(_with_metadata(cards))


def aggregate_day(cards: list[ActivityRecord]) -> DayAggregate:
    """
    Compute every statistic for one day's cards.

    Metadata is parsed once per card; parse failures become entries in
    `warnings` and the card contributes no apps or distractions.
    """
    pairs = []
    warnings = []
    for card in cards:
        metadata, warning = parse_metadata(card.metadata)
        if warning:
            warnings.append(f"Card {card.id}: {warning}")
        pairs.append((card, metadata))

    return DayAggregate(
        total_minutes=total_duration(cards),
        categories=distinct_categories(cards),
        category_breakdown=category_breakdown(cards),
        app_usage=_app_usage_from(pairs),
        distractions=_distractions_from(pairs),
        warnings=warnings
    )
