"""Text codecs for RELATED frontmatter fields and the Related list."""
from contact_relations.codec.frontmatter import FrontmatterCodec, RelatedEntry, is_related_key
from contact_relations.codec.related_list import ListCodec, ListEntry, ListItem
from contact_relations.codec.document import ContactDocument, replace_related_section, revision_stamp

__all__ = [
    "ContactDocument",
    "FrontmatterCodec",
    "ListCodec",
    "ListEntry",
    "ListItem",
    "RelatedEntry",
    "is_related_key",
    "replace_related_section",
    "revision_stamp",
]
