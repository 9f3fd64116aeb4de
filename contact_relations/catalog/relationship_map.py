"""Gender-aware relationship vocabulary."""

from dataclasses import dataclass
from typing import Optional, Union

from contact_relations.errors import InvalidRelationshipType
from contact_relations.catalog.types import (
    CustomRelationshipType,
    EdgeType,
    Gender,
    RelationshipType,
)


@dataclass(frozen=True)
class RelationInfo:
    """Normalized relationship term."""
    term: str
    relation_type: RelationshipType
    gender: Gender


@dataclass(frozen=True)
class GenderedForms:
    """Display terms of one canonical type."""
    neutral: str
    male: Optional[str] = None
    female: Optional[str] = None


R = RelationshipType


class RelationshipCatalog:
    """Canonical relationship types, their gendered terms and reciprocals."""

    FORMS = {
        R.PARENT: GenderedForms("parent", "father", "mother"),
        R.CHILD: GenderedForms("child", "son", "daughter"),
        R.SIBLING: GenderedForms("sibling", "brother", "sister"),
        R.SPOUSE: GenderedForms("spouse", "husband", "wife"),
        R.AUNCLE: GenderedForms("auncle", "uncle", "aunt"),
        R.NIBLING: GenderedForms("nibling", "nephew", "niece"),
        R.GRANDPARENT: GenderedForms("grandparent", "grandfather", "grandmother"),
        R.GRANDCHILD: GenderedForms("grandchild", "grandson", "granddaughter"),
        R.PARTNER: GenderedForms("partner"),
        R.FRIEND: GenderedForms("friend"),
        R.COLLEAGUE: GenderedForms("colleague"),
        R.RELATIVE: GenderedForms("relative"),
        R.COUSIN: GenderedForms("cousin"),
    }

    # Informal spellings: accepted on input, never rendered
    ALIASES = {
        "dad": RelationInfo("father", R.PARENT, Gender.MALE),
        "daddy": RelationInfo("father", R.PARENT, Gender.MALE),
        "papa": RelationInfo("father", R.PARENT, Gender.MALE),
        "mom": RelationInfo("mother", R.PARENT, Gender.FEMALE),
        "mommy": RelationInfo("mother", R.PARENT, Gender.FEMALE),
        "mum": RelationInfo("mother", R.PARENT, Gender.FEMALE),
        "mama": RelationInfo("mother", R.PARENT, Gender.FEMALE),
        "grandpa": RelationInfo("grandfather", R.GRANDPARENT, Gender.MALE),
        "grandma": RelationInfo("grandmother", R.GRANDPARENT, Gender.FEMALE),
        "coworker": RelationInfo("colleague", R.COLLEAGUE, Gender.UNSPECIFIED),
        "co-worker": RelationInfo("colleague", R.COLLEAGUE, Gender.UNSPECIFIED),
    }

    RECIPROCALS = {
        R.PARENT: R.CHILD,
        R.CHILD: R.PARENT,
        R.GRANDPARENT: R.GRANDCHILD,
        R.GRANDCHILD: R.GRANDPARENT,
        R.AUNCLE: R.NIBLING,
        R.NIBLING: R.AUNCLE,
        R.SIBLING: R.SIBLING,
        R.SPOUSE: R.SPOUSE,
        R.PARTNER: R.PARTNER,
        R.FRIEND: R.FRIEND,
        R.COLLEAGUE: R.COLLEAGUE,
        R.RELATIVE: R.RELATIVE,
        R.COUSIN: R.COUSIN,
    }

    MAPPINGS: dict[str, RelationInfo] = {}

    @classmethod
    def _build_mappings(cls) -> dict[str, RelationInfo]:
        mappings = {}
        for rel_type, forms in cls.FORMS.items():
            mappings[forms.neutral] = RelationInfo(forms.neutral, rel_type, Gender.UNSPECIFIED)
            if forms.male:
                mappings[forms.male] = RelationInfo(forms.male, rel_type, Gender.MALE)
            if forms.female:
                mappings[forms.female] = RelationInfo(forms.female, rel_type, Gender.FEMALE)
        return mappings

    def normalize(self, term: str) -> Optional[RelationInfo]:
        """Look up a term in the table, then in the aliases."""
        if not term:
            return None
        key = term.strip().lower()
        return self.MAPPINGS.get(key) or self.ALIASES.get(key)

    def is_known_term(self, term: str) -> bool:
        """Check if term maps to a canonical type."""
        return self.normalize(term) is not None

    def canonicalize(self, term: str) -> tuple[EdgeType, Gender]:
        """Map a display term to (canonical type, implied gender)."""
        if term is None or not str(term).strip():
            raise InvalidRelationshipType("Relationship term is blank")
        info = self.normalize(term)
        if info:
            return info.relation_type, info.gender
        return CustomRelationshipType(term), Gender.UNSPECIFIED

    def implied_gender(self, term: str) -> Gender:
        """Gender implied by a term ('aunt' -> FEMALE)."""
        info = self.normalize(term)
        return info.gender if info else Gender.UNSPECIFIED

    def render(self, rel_type: Union[EdgeType, str], gender: Gender = Gender.UNSPECIFIED) -> str:
        """Display term for a type and the target's gender."""
        rel_type = self.coerce(rel_type)
        if isinstance(rel_type, CustomRelationshipType):
            return rel_type.value

        forms = self.FORMS[rel_type]
        if gender is Gender.MALE and forms.male:
            return forms.male
        if gender is Gender.FEMALE and forms.female:
            return forms.female
        return forms.neutral

    def reciprocal_of(self, rel_type: Union[EdgeType, str]) -> Optional[RelationshipType]:
        """Type the target should hold back toward the source; None if unmodeled."""
        rel_type = self.coerce(rel_type)
        if isinstance(rel_type, CustomRelationshipType):
            return None
        return self.RECIPROCALS.get(rel_type)

    def is_symmetric(self, rel_type: Union[EdgeType, str]) -> bool:
        rel_type = self.coerce(rel_type)
        return self.reciprocal_of(rel_type) == rel_type

    def coerce(self, rel_type: Union[EdgeType, str]) -> EdgeType:
        """Accept a canonical type, a custom type or any display term."""
        if isinstance(rel_type, (RelationshipType, CustomRelationshipType)):
            return rel_type
        return self.canonicalize(rel_type)[0]

    def gendered_terms(self) -> list[RelationInfo]:
        """Every table term with its type and implied gender."""
        return list(self.MAPPINGS.values())


RelationshipCatalog.MAPPINGS = RelationshipCatalog._build_mappings()
