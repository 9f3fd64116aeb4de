"""Contact markdown document: YAML frontmatter plus body."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import yaml

from contact_relations.catalog.types import Gender
from contact_relations.codec.frontmatter import is_related_key
from contact_relations.codec.related_list import find_related_section, parse_bullet
from contact_relations.errors import MalformedDocument

# --- delimited block at the very start of the document
_FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)

UID_KEY = "UID"
NAME_KEY = "FN"
GENDER_KEY = "GENDER"
REV_KEY = "REV"


def revision_stamp(moment: Optional[datetime] = None) -> str:
    """vCard REV timestamp, e.g. 20240101T120000Z."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


@dataclass
class ContactDocument:
    """A contact note split into frontmatter mapping and markdown body."""
    frontmatter: dict = field(default_factory=dict)
    body: str = ""

    @classmethod
    def parse(cls, text: str) -> "ContactDocument":
        """
        Split YAML frontmatter from the body.

        Raises:
            MalformedDocument: if the frontmatter block is not a YAML mapping
        """
        match = _FRONTMATTER_PATTERN.match(text)
        if not match:
            return cls({}, text)

        try:
            metadata = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            raise MalformedDocument(f"Unparseable frontmatter: {e}") from e

        if metadata is None:
            metadata = {}
        if not isinstance(metadata, dict):
            raise MalformedDocument("Frontmatter is not a key/value mapping")
        return cls(metadata, text[match.end():])

    def render(self) -> str:
        if not self.frontmatter:
            return self.body
        block = yaml.safe_dump(
            self.frontmatter,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
        return f"---\n{block}---\n{self.body}"

    # ─────────────────────────────────────────
    # Contact attributes
    # ─────────────────────────────────────────

    def _scalar(self, key: str) -> Optional[str]:
        value = self.frontmatter.get(key)
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @property
    def uid(self) -> Optional[str]:
        return self._scalar(UID_KEY)

    @property
    def display_name(self) -> Optional[str]:
        return self._scalar(NAME_KEY)

    @property
    def gender(self) -> Gender:
        return Gender.parse(self.frontmatter.get(GENDER_KEY))

    # ─────────────────────────────────────────
    # Relationship rewriting
    # ─────────────────────────────────────────

    def with_relationships(self, related_fields: dict[str, str], bullet_lines: list[str],
                           heading_line: str = "## Related",
                           malformed_keys: Optional[list[str]] = None,
                           section_title: str = "Related") -> "ContactDocument":
        """
        Copy with RELATED keys and the Related section replaced.

        Keys listed in malformed_keys are kept as they are.
        """
        keep = set(malformed_keys or [])
        frontmatter = {
            key: value for key, value in self.frontmatter.items()
            if not is_related_key(key) or key in keep
        }
        frontmatter.update(related_fields)

        body = replace_related_section(self.body, bullet_lines, heading_line, section_title)
        return ContactDocument(frontmatter, body)

    def stamp_revision(self, stamp: Optional[str] = None) -> None:
        self.frontmatter[REV_KEY] = stamp or revision_stamp()

    def fill_gender(self, gender: Gender) -> bool:
        """Write GENDER when the document has no value for it."""
        if not gender.is_specified or self._scalar(GENDER_KEY) is not None:
            return False
        self.frontmatter[GENDER_KEY] = gender.value
        return True

    def materially_equals(self, other: "ContactDocument") -> bool:
        """Same frontmatter (ignoring key order and REV) and same body."""
        mine = {k: v for k, v in self.frontmatter.items() if k != REV_KEY}
        theirs = {k: v for k, v in other.frontmatter.items() if k != REV_KEY}
        return mine == theirs and self.body == other.body


def replace_related_section(body: str, bullet_lines: list[str],
                            heading_line: str = "## Related",
                            section_title: str = "Related") -> str:
    """
    Rewrite the relationship bullets of the Related section.

    The existing heading line and any non-relationship lines in the section
    are kept. A missing section is appended only when there is something to
    list.
    """
    lines = body.splitlines()
    trailing_newline = body.endswith("\n")
    section = find_related_section(body, section_title)

    if section is None:
        if not bullet_lines:
            return body
        prefix = body.rstrip("\n")
        block = "\n".join([heading_line, *bullet_lines]) + "\n"
        return f"{prefix}\n\n{block}" if prefix else block

    kept = [line for line in lines[section.start:section.end] if parse_bullet(line) is None]
    while kept and not kept[0].strip():
        kept.pop(0)
    while kept and not kept[-1].strip():
        kept.pop()

    rebuilt = [*lines[section.heading:section.start], *bullet_lines, *kept]
    if section.end < len(lines):
        rebuilt.append("")

    result = "\n".join(lines[:section.heading] + rebuilt + lines[section.end:])
    if trailing_newline or section.end == len(lines):
        result += "\n"
    return result
