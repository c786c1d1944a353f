"""Domain mapper: GEDCOM records to people/relationships and back."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable

from .accessors import parse_family, parse_individual
from .dates import iso_to_parts
from .models import Gender, MappingResult, Person, Relationship, RelationshipType
from .records import Family, Individual, ParsedDocument

logger = logging.getLogger("gedcom_interchange.mapper")

GENDER_FROM_SEX = {
    "M": Gender.MALE,
    "F": Gender.FEMALE,
    "X": Gender.OTHER,
}
SEX_FROM_GENDER = {gender: sex for sex, gender in GENDER_FROM_SEX.items()}


def strip_xref(xref: str) -> str:
    """'@I1@' -> 'I1'"""
    return xref.strip().strip("@")


def iso_to_date(value: str | None) -> date | None:
    """Partial ISO date to a calendar date; missing month/day become 1."""
    if not value:
        return None
    parts = iso_to_parts(value)
    if parts is None:
        return None
    year, month, day = parts
    try:
        return date(year, month or 1, day or 1)
    except ValueError:
        return None


# ============================================================================
# Import: GEDCOM -> Domain
# ============================================================================

def person_from_individual(individual: Individual, person_id: str) -> Person:
    death_date = iso_to_date(individual.death_date)
    return Person(
        id=person_id,
        first_name=individual.first_name,
        last_name=individual.last_name,
        maiden_name=individual.maiden_name,
        gender=GENDER_FROM_SEX.get(individual.sex or ""),
        date_of_birth=iso_to_date(individual.birth_date),
        birth_place=individual.birth_place,
        date_of_passing=death_date,
        death_place=individual.death_place,
        profession=individual.occupation,
        bio="\n".join(individual.notes) or None,
        is_living=not (individual.deceased or death_date is not None),
    )


def _family_relationships(
    family: Family,
    ids: dict[str, str],
    warnings: list[str],
) -> list[Relationship]:
    """Edges for one family, in the order SPOUSE pair, then PARENT/CHILD per child."""
    relationships = []

    def resolve(role: str, xref: str | None) -> str | None:
        if xref is None:
            return None
        person_id = ids.get(xref)
        if person_id is None:
            warnings.append(f"Family {family.xref}: {role} {xref} does not match any individual")
            logger.warning(f"Skipping {role} {xref} in family {family.xref}: individual not found")
        return person_id

    husband_id = resolve("HUSB", family.husband)
    wife_id = resolve("WIFE", family.wife)

    if husband_id and wife_id:
        marriage_date = iso_to_date(family.marriage_date)
        divorce_date = iso_to_date(family.divorce_date)
        # A DIV event without a date still ends the marriage
        divorced = family.divorced or divorce_date is not None
        for person_id, related_id in ((husband_id, wife_id), (wife_id, husband_id)):
            relationships.append(Relationship(
                person_id=person_id,
                related_person_id=related_id,
                type=RelationshipType.SPOUSE,
                is_active=not divorced,
                marriage_date=marriage_date,
                divorce_date=divorce_date,
                marriage_place=family.marriage_place,
            ))

    parent_ids = [pid for pid in (husband_id, wife_id) if pid]
    for child_xref in family.children:
        child_id = resolve("CHIL", child_xref)
        if child_id is None:
            continue
        for parent_id in parent_ids:
            relationships.append(Relationship(
                person_id=parent_id,
                related_person_id=child_id,
                type=RelationshipType.PARENT,
            ))
        for parent_id in parent_ids:
            relationships.append(Relationship(
                person_id=child_id,
                related_person_id=parent_id,
                type=RelationshipType.CHILD,
            ))

    return relationships


def map_from_gedcom(
    document: ParsedDocument,
    id_factory: Callable[[str], str] | None = None,
) -> MappingResult:
    """Translate a parsed document into people and relationships.

    Person ids default to the xref without '@' delimiters. References to
    unknown individuals are skipped and reported in `warnings`.
    """
    id_factory = id_factory or strip_xref
    people = []
    warnings = []
    ids: dict[str, str] = {}

    for record in document.individuals:
        if not record.xref:
            warnings.append(f"Individual record at line {record.line_number} has no xref, skipped")
            continue
        if record.xref in ids:
            warnings.append(f"Duplicate individual {record.xref}, later definition skipped")
            continue
        person_id = id_factory(record.xref)
        ids[record.xref] = person_id
        people.append(person_from_individual(parse_individual(record, document), person_id))

    relationships = []
    for record in document.families:
        family = parse_family(record, document)
        relationships.extend(_family_relationships(family, ids, warnings))

    logger.info(
        f"Mapped {len(people)} people and {len(relationships)} relationships "
        f"({len(warnings)} warnings)"
    )
    return MappingResult(people=people, relationships=relationships, warnings=warnings)


# ============================================================================
# Export: Domain -> GEDCOM
# ============================================================================

@dataclass
class GedcomProjection:
    """Individuals and families ready for the generator."""
    individuals: list[Individual] = field(default_factory=list)
    families: list[Family] = field(default_factory=list)


@dataclass
class _FamilyGroup:
    members: list[str] = field(default_factory=list)  # discovery order
    children: list[str] = field(default_factory=list)
    marriage_date: date | None = None
    divorce_date: date | None = None
    marriage_place: str | None = None
    divorced: bool = False


def _date_iso(value: date | None) -> str | None:
    return value.isoformat() if value else None


def individual_from_person(person: Person, xref: str) -> Individual:
    name = " ".join(part for part in (person.first_name, person.last_name) if part)
    return Individual(
        xref=xref,
        name=name,
        first_name=person.first_name,
        last_name=person.last_name,
        maiden_name=person.maiden_name,
        sex=SEX_FROM_GENDER.get(person.gender) if person.gender else None,
        birth_date=_date_iso(person.date_of_birth),
        birth_place=person.birth_place,
        death_date=_date_iso(person.date_of_passing),
        death_place=person.death_place,
        deceased=not person.is_living or person.date_of_passing is not None,
        occupation=person.profession,
        notes=[person.bio] if person.bio else [],
    )


def _parent_child(relationship: Relationship) -> tuple[str, str] | None:
    """(parent id, child id) for PARENT/CHILD edges."""
    if relationship.type == RelationshipType.PARENT:
        return relationship.person_id, relationship.related_person_id
    if relationship.type == RelationshipType.CHILD:
        return relationship.related_person_id, relationship.person_id
    return None


def map_to_gedcom(people: list[Person], relationships: list[Relationship]) -> GedcomProjection:
    """Translate people and relationships into individuals and families.

    Families are grouped by a key of (unordered parent set, discriminator).
    Children are attached to the family of their own first two parents, so
    children of different marriages never share a FAM record. A couple that
    records a second marriage with a different marriage date gets a new
    discriminator and therefore a separate family, whatever order the
    edges arrive in. People repeating an earlier id are skipped.
    """
    by_id: dict[str, Person] = {}
    for person in people:
        if person.id in by_id:
            logger.warning(f"Duplicate person {person.id}, later definition skipped")
            continue
        by_id[person.id] = person
    people = list(by_id.values())

    xrefs = {person.id: f"@I{index}@" for index, person in enumerate(people, start=1)}
    individuals = {
        person.id: individual_from_person(person, xrefs[person.id]) for person in people
    }

    def known(relationship: Relationship) -> bool:
        if relationship.person_id in by_id and relationship.related_person_id in by_id:
            return True
        logger.warning(
            f"Ignoring {relationship.type.value} relationship between "
            f"{relationship.person_id} and {relationship.related_person_id}: unknown person"
        )
        return False

    usable = [r for r in relationships if known(r)]

    # First pass: each child's parents in discovery order
    parents_of: dict[str, list[str]] = {}
    for relationship in usable:
        pair = _parent_child(relationship)
        if pair is None:
            continue
        parent_id, child_id = pair
        parents = parents_of.setdefault(child_id, [])
        if parent_id not in parents:
            parents.append(parent_id)

    groups: dict[tuple[frozenset, int], _FamilyGroup] = {}
    # Discriminator per marriage date, per couple; undated edges use 0
    couple_marriages: dict[frozenset, dict[date, int]] = {}

    def ensure(key: tuple[frozenset, int], members: list[str]) -> _FamilyGroup:
        group = groups.get(key)
        if group is None:
            group = _FamilyGroup(members=list(members))
            groups[key] = group
        return group

    # Second pass: families in first-encounter order
    for relationship in usable:
        if relationship.type == RelationshipType.SPOUSE:
            if relationship.person_id == relationship.related_person_id:
                continue
            couple = frozenset((relationship.person_id, relationship.related_person_id))
            marriages = couple_marriages.setdefault(couple, {})
            married = relationship.marriage_date
            if married is None:
                discriminator = 0
            else:
                discriminator = marriages.setdefault(married, len(marriages))

            group = ensure((couple, discriminator),
                           [relationship.person_id, relationship.related_person_id])
            group.marriage_date = group.marriage_date or relationship.marriage_date
            group.divorce_date = group.divorce_date or relationship.divorce_date
            group.marriage_place = group.marriage_place or relationship.marriage_place
            if not relationship.is_active or relationship.divorce_date is not None:
                group.divorced = True
            continue

        pair = _parent_child(relationship)
        if pair is None:
            continue
        child_id = pair[1]
        parents = parents_of[child_id][:2]
        group = ensure((frozenset(parents), 0), parents)
        if child_id not in group.children:
            group.children.append(child_id)

    families = []
    for index, group in enumerate(groups.values(), start=1):
        family_xref = f"@F{index}@"
        husband, wife = _assign_spouses(group.members, by_id)
        family = Family(
            xref=family_xref,
            husband=xrefs[husband] if husband else None,
            wife=xrefs[wife] if wife else None,
            children=[xrefs[child] for child in group.children],
            marriage_date=_date_iso(group.marriage_date),
            marriage_place=group.marriage_place,
            divorce_date=_date_iso(group.divorce_date),
            divorced=group.divorced,
        )
        families.append(family)

        for member in group.members:
            individuals[member].families_as_spouse.append(family_xref)
        for child in group.children:
            if family_xref not in individuals[child].families_as_child:
                individuals[child].families_as_child.append(family_xref)

    logger.info(f"Projected {len(individuals)} individuals into {len(families)} families")
    return GedcomProjection(
        individuals=[individuals[person.id] for person in people],
        families=families,
    )


def _assign_spouses(members: list[str], by_id: dict[str, Person]) -> tuple[str | None, str | None]:
    """Pick (husband, wife): a female goes to WIFE unless both are female."""
    if len(members) == 1:
        only = members[0]
        if by_id[only].gender == Gender.FEMALE:
            return None, only
        return only, None

    first, second = members[0], members[1]
    first_female = by_id[first].gender == Gender.FEMALE
    second_female = by_id[second].gender == Gender.FEMALE
    if first_female and not second_female:
        return second, first
    return first, second
