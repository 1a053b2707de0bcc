"""
Response formatting.

Parses the model's four-section markdown table into structured sections
and renders them as coloured console text.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from rich.console import Console
from rich.text import Text

LINE_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)
BULLET = re.compile(r"^(?:•\s*|[-*]\s+)")

# Cells that carry no finding
PLACEHOLDER_DETAILS = {"", "details", "-", "---"}

# Marker glyphs of every packaged analyzer, used when none are given
DEFAULT_MARKERS = ("💰", "📈", "💡", "⚡", "⚠", "⚙", "🔍", "📊", "🚨", "🔑", "🔒", "🛡")

RULE_WIDTH = 60
RENDER_WIDTH = 100


@dataclass(frozen=True)
class Section:
    """One recognised row of the response table."""
    heading: str
    items: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedResponse:
    """Result of parsing a model response.

    ``unparsed`` is set when the response had text but no recognisable
    section rows, e.g. an error message or free prose.
    """
    sections: List[Section]
    unparsed: bool = False


def _split_items(details: str) -> List[str]:
    items = []
    for raw_item in LINE_BREAK.split(details):
        item = BULLET.sub("", raw_item.strip()).strip()
        if item:
            items.append(item)
    return items


def parse_sections(text: Optional[str], markers: Optional[Iterable[str]] = None) -> ParsedResponse:
    """Parse a pipe-table response into sections.

    Only lines holding a ``|`` and one of the section markers are
    considered. The first cell is the heading, the second the details.
    Details are split on ``<br>``; bullets are stripped. Rows with empty
    or placeholder details are dropped.

    Args:
        text: Model response
        markers: Section marker glyphs, defaults to all known markers

    Returns:
        ParsedResponse, never raises on malformed input
    """
    marker_set = tuple(markers) if markers else DEFAULT_MARKERS
    sections = []
    for line in (text or "").splitlines():
        if "|" not in line or not any(marker in line for marker in marker_set):
            continue
        cells = [cell.strip() for cell in line.strip().strip("|").split("|")]
        if len(cells) < 2:
            continue
        heading, details = cells[0], cells[1]
        if not heading or details.lower() in PLACEHOLDER_DETAILS:
            continue
        items = _split_items(details)
        if items:
            sections.append(Section(heading=heading, items=items))

    unparsed = not sections and bool((text or "").strip())
    return ParsedResponse(sections=sections, unparsed=unparsed)


def _item_style(heading: str) -> str:
    upper = heading.upper()
    if "RISK" in upper or "CRITICAL" in upper:
        return "red"
    if "ISSUE" in upper or "COMPLIANCE" in upper:
        return "yellow"
    return "white"


def build_sections_text(sections: Sequence[Section], title: Optional[str] = None) -> Text:
    """Rich Text for a set of parsed sections, framed by rules."""
    text = Text()
    if title:
        text.append(f"\n{title}\n", style="bold cyan")
        text.append("─" * RULE_WIDTH + "\n", style="bright_black")
    for section in sections:
        text.append(f"\n{section.heading}\n", style="bold white")
        style = _item_style(section.heading)
        for item in section.items:
            text.append("  • ", style="yellow")
            text.append(f"{item}\n", style=style)
    if title:
        text.append("\n" + "─" * RULE_WIDTH + "\n", style="bright_black")
    return text


def to_ansi(renderable, width: int = RENDER_WIDTH) -> str:
    """Render any rich renderable to a string with ANSI colour codes."""
    console = Console(width=width, force_terminal=True, color_system="standard", record=False)
    with console.capture() as capture:
        console.print(renderable, end="")
    return capture.get()


def render(text: Optional[str], title: Optional[str] = None, markers: Optional[Iterable[str]] = None) -> str:
    """Render a model response as coloured console text.

    Only sections with real findings are shown. A response with no
    recognisable sections renders to an empty string (plus the title
    frame, if one is given).
    """
    parsed = parse_sections(text, markers)
    if not parsed.sections and not title:
        return ""
    return to_ansi(build_sections_text(parsed.sections, title))
