"""RELATED frontmatter field codec."""

import re
from typing import Any, Iterable, NamedTuple, Optional

from contact_relations.catalog import RelationshipCatalog
from contact_relations.catalog.types import EdgeType, Gender
from contact_relations.errors import InvalidRelationshipType, MalformedKey
from contact_relations.graph.models import RelatedReference
from contact_relations.observability import get_logger

logger = get_logger(__name__)

RELATED_KEY = re.compile(r"^RELATED(?:\[(?P<segment>[^\]]*)\])?$")
INDEXED_SEGMENT = re.compile(r"^(?P<index>\d+)(?::(?P<type>.*))?$")

BLANK_VALUES = {"", "null", "undefined"}


class RelatedEntry(NamedTuple):
    """One RELATED field: canonical type plus target reference."""
    type: EdgeType
    reference: RelatedReference
    implied_gender: Gender = Gender.UNSPECIFIED


class ParsedKey(NamedTuple):
    type: EdgeType
    index: Optional[int]
    implied_gender: Gender = Gender.UNSPECIFIED


def is_related_key(key: Any) -> bool:
    """RELATED, RELATED[...] and anything else in that namespace."""
    return isinstance(key, str) and (key == "RELATED" or key.startswith("RELATED["))


def is_blank_value(value: Any) -> bool:
    return value is None or str(value).strip().lower() in BLANK_VALUES


class FrontmatterCodec:
    """Encode and decode RELATED[...] keys."""

    def __init__(self, catalog: Optional[RelationshipCatalog] = None):
        self.catalog = catalog or RelationshipCatalog()

    def parse_key(self, key: str) -> ParsedKey:
        """
        Parse RELATED[<type>] or RELATED[<index>:<type>].

        Raises:
            MalformedKey: for RELATED, RELATED[<index>] and empty type segments
        """
        match = RELATED_KEY.match(key)
        if not match or match.group("segment") is None:
            raise MalformedKey(key)

        segment = match.group("segment").strip()
        index = None
        indexed = INDEXED_SEGMENT.match(segment)
        if indexed:
            if indexed.group("type") is None:
                raise MalformedKey(key, "index without relationship type")
            index = int(indexed.group("index"))
            segment = indexed.group("type")

        try:
            rel_type, _ = self.catalog.canonicalize(segment)
        except InvalidRelationshipType:
            raise MalformedKey(key, "empty relationship type") from None
        return ParsedKey(rel_type, index, self.catalog.implied_gender(segment))

    def malformed_keys(self, mapping: dict) -> list[str]:
        """RELATED keys that decode drops."""
        malformed = []
        for key in mapping:
            if not is_related_key(key):
                continue
            try:
                self.parse_key(key)
            except MalformedKey:
                malformed.append(key)
        return malformed

    def decode(self, mapping: dict) -> list[RelatedEntry]:
        """Read every well-formed, non-blank RELATED field."""
        parsed = []
        for key, value in mapping.items():
            if not is_related_key(key):
                continue
            try:
                parsed_key = self.parse_key(key)
            except MalformedKey as e:
                logger.warning("frontmatter_key_malformed", key=key, error=str(e))
                continue
            if is_blank_value(value):
                continue

            reference = RelatedReference.parse(str(value))
            if not reference.value:
                continue
            entry = RelatedEntry(parsed_key.type, reference, parsed_key.implied_gender)
            parsed.append((parsed_key, entry))

        # First occurrence (no index) sorts ahead of indexed keys of the same type
        parsed.sort(key=lambda item: (
            item[0].type.value,
            -1 if item[0].index is None else item[0].index,
        ))
        return [entry for _, entry in parsed]

    def encode(self, entries: Iterable[tuple[EdgeType, RelatedReference]]) -> dict[str, str]:
        """
        Write entries as RELATED keys.

        The first entry of each type is RELATED[<type>]; later ones are
        RELATED[<i>:<type>] with i counting from 0.
        """
        grouped: dict[str, list[str]] = {}
        for rel_type, reference in entries:
            rel_type = self.catalog.coerce(rel_type)
            values = grouped.setdefault(rel_type.value, [])
            value = reference.to_value()
            if value not in values:
                values.append(value)

        fields = {}
        for type_name, values in grouped.items():
            for position, value in enumerate(values):
                if position == 0:
                    fields[f"RELATED[{type_name}]"] = value
                else:
                    fields[f"RELATED[{position - 1}:{type_name}]"] = value
        return fields
