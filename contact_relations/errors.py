"""Exception hierarchy for relationship graph and sync operations."""


class ContactRelationsError(Exception):
    """Base class for all contact relationship errors."""


class UnknownContact(ContactRelationsError, KeyError):
    """Operation referenced a uid that is not present."""

    def __init__(self, uid: str):
        super().__init__(uid)
        self.uid = uid

    def __str__(self) -> str:
        return f"Unknown contact: {self.uid}"


class SelfLoopRejected(ContactRelationsError, ValueError):
    """An edge may not point from a contact to itself."""

    def __init__(self, uid: str):
        super().__init__(f"Self-referencing relationship rejected for {uid}")
        self.uid = uid


class InvalidRelationshipType(ContactRelationsError, ValueError):
    """Relationship term is blank and cannot be used as an edge label."""


class MalformedKey(ContactRelationsError, ValueError):
    """RELATED frontmatter key that carries no relationship type."""

    def __init__(self, key: str, reason: str = "missing relationship type"):
        super().__init__(f"Malformed RELATED key {key!r}: {reason}")
        self.key = key


class UnresolvedTarget(ContactRelationsError, LookupError):
    """Relationship target could not be resolved to a known contact."""

    def __init__(self, reference: str):
        super().__init__(f"Could not resolve relationship target: {reference}")
        self.reference = reference


class RevisionConflict(ContactRelationsError):
    """Contact text changed between read and write."""

    def __init__(self, uid: str, expected, actual):
        super().__init__(
            f"Revision conflict for {uid}: read at {expected!r}, now {actual!r}"
        )
        self.uid = uid
        self.expected = expected
        self.actual = actual


class MalformedDocument(ContactRelationsError, ValueError):
    """Contact document frontmatter could not be parsed."""
