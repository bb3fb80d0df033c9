"""
Markdown rendering for daily Dayflow notes.

A note is YAML frontmatter followed by the daily summary, journal sections,
the timeline, the distractions log and app usage. Cards are rendered in the
order given, which the database returns chronologically.
"""
import re
from typing import Optional

from aggregate import UNCATEGORIZED, card_minutes, parse_metadata
from day_boundary import format_day_heading
from schemas import (
    ActivityRecord,
    DayAggregate,
    JournalRecord,
    NoteFrontmatter
)

YAML_SPECIAL_CHARS = [':', '#', '[', ']', '{', '}', '"', "'", '\n', '|', '>', ',']
YAML_LEADING_CHARS = ('-', '?', '!', '&', '*', '%', '@', '`', ' ')
YAML_RESERVED = {"", "null", "~", "true", "false", "yes", "no", "on", "off"}
NUMBER_PATTERN = re.compile(r'^[-+]?(\d[\d_]*)?(\.\d*)?([eE][-+]?\d+)?$')

BASE_TAGS = ["dayflow", "timeline"]


# =============================================================================
# FRONTMATTER
# =============================================================================

def sanitize_yaml_string(value: str) -> str:
    """Escape YAML special characters in string values."""
    if not isinstance(value, str):
        return str(value)
    needs_quotes = (
        any(c in value for c in YAML_SPECIAL_CHARS)
        or value.startswith(YAML_LEADING_CHARS)
        or value.endswith(' ')
        or value.lower() in YAML_RESERVED
        or NUMBER_PATTERN.match(value) is not None
    )
    if needs_quotes:
        # Escape existing double quotes and wrap
        escaped = value.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')
        return f'"{escaped}"'
    return value


def format_frontmatter(metadata: dict) -> str:
    """Generate YAML frontmatter block."""
    lines = ["---"]

    for key, value in metadata.items():
        if value is None:
            lines.append(f"{key}: null")
        elif isinstance(value, list):
            if not value:
                lines.append(f"{key}: []")
            else:
                lines.append(f"{key}:")
                for item in value:
                    if isinstance(item, str):
                        lines.append(f"  - {sanitize_yaml_string(item)}")
                    else:
                        lines.append(f"  - {item}")
        elif isinstance(value, bool):
            lines.append(f"{key}: {str(value).lower()}")
        elif isinstance(value, str):
            lines.append(f"{key}: {sanitize_yaml_string(value)}")
        else:
            lines.append(f"{key}: {value}")

    lines.append("---")
    return "\n".join(lines)


def generate_tags(categories: list[str]) -> list[str]:
    return BASE_TAGS + [c.lower() for c in categories]


def build_frontmatter(day: str, cards: list[ActivityRecord], journal: Optional[JournalRecord],
                      aggregate: DayAggregate, boundary: str,
                      created_at: str, updated_at: str) -> NoteFrontmatter:
    return NoteFrontmatter(
        dayflow_day=day,
        day_boundary=boundary,
        total_cards=len(cards),
        total_minutes=aggregate.total_minutes,
        categories=aggregate.categories,
        has_journal=journal is not None,
        journal_status=journal.status if journal and journal.status else None,
        created_at=created_at,
        updated_at=updated_at,
        tags=generate_tags(aggregate.categories)
    )


# =============================================================================
# BODY SECTIONS
# =============================================================================

def generate_daily_summary(day: str, cards: list[ActivityRecord], aggregate: DayAggregate) -> str:
    hours = f"{aggregate.total_minutes / 60:.1f}"
    percentages = ", ".join(
        f"{share.category} ({share.percent}%)" for share in aggregate.category_breakdown
    )

    return (
        f"# Dayflow: {format_day_heading(day)}\n\n"
        "## Daily Summary\n"
        f"**Total tracked time**: {hours} hours ({aggregate.total_minutes} minutes)\n"
        f"**Categories**: {percentages or 'None'}\n"
        f"**Timeline cards**: {len(cards)}\n\n"
        "---\n"
    )


def generate_journal_section(journal: Optional[JournalRecord]) -> str:
    """Morning half of the journal: intentions, goals, notes."""
    if journal is None:
        return ""

    section = ""
    if journal.intentions:
        section += f"## Morning Intentions\n{journal.intentions}\n\n"
    if journal.goals:
        section += f"## Daily Goals\n{journal.goals}\n\n"
    if journal.notes:
        section += f"## Journal Notes\n{journal.notes}\n\n"

    return section + "---\n\n" if section else ""


def video_link(path: str) -> str:
    return "file://" + path.replace(" ", "%20")


def generate_card_section(card: ActivityRecord) -> str:
    metadata, _ = parse_metadata(card.metadata)

    section = f"### {card.start} - {card.end} | {card.category or UNCATEGORIZED}\n"
    section += f"**{card.title or 'Untitled'}**\n\n"

    body = card.detailed_summary or card.summary
    if body:
        section += f"{body}\n\n"

    apps = [app for app in (metadata.app_sites.primary, metadata.app_sites.secondary) if app]
    if apps:
        section += f"**Apps**: {', '.join(apps)}\n"

    section += f"**Duration**: {card_minutes(card)} minutes\n"

    if card.subcategory:
        section += f"**Subcategory**: {card.subcategory}\n"

    if card.video_summary_url:
        section += f"**Video summary**: [View]({video_link(card.video_summary_url)})\n"

    return section


def generate_timeline_section(cards: list[ActivityRecord]) -> str:
    if not cards:
        return "## Timeline\n*No timeline cards for this day*\n\n---\n\n"

    sections = [generate_card_section(card) for card in cards]
    return "## Timeline\n\n" + "\n---\n\n".join(sections) + "\n\n---\n\n"


def generate_reflection_section(journal: Optional[JournalRecord]) -> str:
    """Evening half of the journal: reflections and the AI summary."""
    if journal is None:
        return ""

    section = ""
    if journal.reflections:
        section += f"## Evening Reflection\n{journal.reflections}\n\n"
    if journal.summary:
        section += f"## AI Summary\n{journal.summary}\n\n"

    return section + "---\n\n" if section else ""


def generate_distractions_section(aggregate: DayAggregate) -> str:
    if not aggregate.distractions:
        return "## Distractions Log\n*No distractions recorded today* ✨\n\n"

    items = []
    for d in aggregate.distractions:
        item = f"- **{d.start_time} - {d.end_time}**: {d.title}\n"
        if d.summary:
            item += f"  - {d.summary}\n"
        items.append(item)

    return "## Distractions Log\n" + "\n".join(items) + "\n\n"


def generate_app_usage_section(aggregate: DayAggregate) -> str:
    if not aggregate.app_usage:
        return "## App Usage Summary\n*No app usage recorded*\n"

    items = [
        f"- {u.app} ({u.sessions} sessions, {u.total_minutes} min)"
        for u in aggregate.app_usage
    ]
    return "## App Usage Summary\n" + "\n".join(items) + "\n"


# =============================================================================
# NOTE
# =============================================================================

def generate_day_note(day: str, cards: list[ActivityRecord], journal: Optional[JournalRecord],
                      aggregate: DayAggregate, frontmatter: NoteFrontmatter) -> str:
    """Full note content; the frontmatter block always comes first."""
    return "".join([
        format_frontmatter(frontmatter.model_dump()),
        "\n\n",
        generate_daily_summary(day, cards, aggregate),
        generate_journal_section(journal),
        generate_timeline_section(cards),
        generate_reflection_section(journal),
        generate_distractions_section(aggregate),
        generate_app_usage_section(aggregate),
    ])
