"""Markdown 'Related' list codec."""

import re
from typing import Iterable, NamedTuple, Optional

from markdown_it import MarkdownIt

from contact_relations.catalog import RelationshipCatalog
from contact_relations.catalog.types import EdgeType, Gender
from contact_relations.config import SyncSettings, settings

RELATIONSHIP_BULLET = re.compile(
    r"^\s*[-*]\s+(?P<term>[^\[\]]*?)\s*\[\[(?P<name>[^\[\]]+)\]\]\s*$"
)


class ListEntry(NamedTuple):
    """Relationship parsed from a Related bullet."""
    term: str
    type: EdgeType
    implied_gender: Gender
    contact_name: str


class ListItem(NamedTuple):
    """Relationship to render as a Related bullet."""
    type: EdgeType
    target_name: str
    target_gender: Gender = Gender.UNSPECIFIED


class Section(NamedTuple):
    """Line span of a Related section."""
    heading: int
    start: int
    end: int


def create_parser() -> MarkdownIt:
    """CommonMark parser used only to locate headings."""
    return MarkdownIt("commonmark")


def top_level_headings(text: str) -> list[tuple[int, int, str]]:
    """(first line, line after, text) of each top-level heading, code blocks excluded."""
    tokens = create_parser().parse(text)
    headings = []
    for i, token in enumerate(tokens):
        if token.type != "heading_open" or token.level != 0 or not token.map:
            continue
        inline = tokens[i + 1]
        headings.append((token.map[0], token.map[1], inline.content.strip()))
    return headings


def find_related_section(text: str, title: str = "Related") -> Optional[Section]:
    """
    Locate the Related section.

    Returns:
        Section whose end is the next heading's first line or the line count
    """
    wanted = title.strip().lower()
    headings = top_level_headings(text)
    for position, (first, after, heading) in enumerate(headings):
        if heading.lower() != wanted:
            continue
        if position + 1 < len(headings):
            end = headings[position + 1][0]
        else:
            end = len(text.splitlines())
        return Section(first, after, end)
    return None


def parse_bullet(line: str) -> Optional[tuple[str, str]]:
    """Split '- <term> [[<name>]]' into (term, name)."""
    match = RELATIONSHIP_BULLET.match(line)
    if not match:
        return None
    term = match.group("term").strip()
    # [[Name|alias]] links to Name
    name = match.group("name").split("|", 1)[0].strip()
    if not term or not name:
        return None
    return term, name


class ListCodec:
    """Encode and decode the bulleted Related section."""

    def __init__(self, catalog: Optional[RelationshipCatalog] = None,
                 sync_settings: Optional[SyncSettings] = None):
        self.catalog = catalog or RelationshipCatalog()
        self.settings = sync_settings or settings.sync

    def decode(self, text: str) -> list[ListEntry]:
        """Parse relationship bullets under the Related heading."""
        section = find_related_section(text, self.settings.related_heading)
        if section is None:
            return []

        lines = text.splitlines()
        entries = []
        for line in lines[section.start:section.end]:
            parsed = parse_bullet(line)
            if parsed is None:
                continue
            term, name = parsed
            rel_type, gender = self.catalog.canonicalize(term)
            entries.append(ListEntry(term, rel_type, gender, name))
        return entries

    def encode_lines(self, items: Iterable[tuple[EdgeType, str, Gender]]) -> list[str]:
        """Bullet lines sorted by (type, target name)."""
        rows = []
        for rel_type, name, gender in items:
            rel_type = self.catalog.coerce(rel_type)
            rows.append((rel_type.value, name, self.catalog.render(rel_type, gender)))
        rows.sort(key=lambda row: (row[0], row[1].lower(), row[1]))
        return [f"- {term} [[{name}]]" for _, name, term in rows]

    def encode(self, items: Iterable[tuple[EdgeType, str, Gender]]) -> str:
        """Full Related section; the heading is kept even with no bullets."""
        lines = [self.settings.heading_line, *self.encode_lines(items)]
        return "\n".join(lines) + "\n"
