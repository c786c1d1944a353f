"""Tests for mapping between GEDCOM records and the person/relationship model."""

import os
import pytest
import sys
from datetime import date

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gedcom_interchange import (
    Gender,
    Person,
    Relationship,
    RelationshipType,
    map_from_gedcom,
    map_to_gedcom,
    parse,
    parse_file,
)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def document():
    """Parse the sample GEDCOM file."""
    return parse_file(os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "sample-family.ged"))


@pytest.fixture
def mapped(document):
    """Domain entities for the sample file."""
    return map_from_gedcom(document)


def edges(relationships, kind):
    return [(r.person_id, r.related_person_id) for r in relationships if r.type == kind]


def spouse(person_id, related_id, **kwargs):
    return Relationship(
        person_id=person_id, related_person_id=related_id, type=RelationshipType.SPOUSE, **kwargs
    )


def parent(parent_id, child_id):
    return Relationship(person_id=parent_id, related_person_id=child_id, type=RelationshipType.PARENT)


# ============================================================================
# Import Tests
# ============================================================================

class TestMapFromGedcom:
    """Tests for GEDCOM -> domain mapping."""

    def test_people(self, mapped):
        """Test one person per individual, ids from xrefs."""
        assert [p.id for p in mapped.people] == ["I1", "I2", "I3", "I4", "I5", "I6"]

    def test_person_fields(self, mapped):
        """Test field mapping for a full record."""
        john = mapped.people[0]
        assert john.first_name == "John"
        assert john.last_name == "Smith"
        assert john.gender == Gender.MALE
        assert john.date_of_birth == date(1950, 1, 15)
        assert john.birth_place == "Boston, Massachusetts, USA"
        assert john.profession == "Carpenter"
        assert john.bio == "Worked on houses across New England."
        assert john.is_living

    def test_maiden_name(self, mapped):
        """Test maiden names carry over."""
        mary = mapped.people[1]
        assert mary.gender == Gender.FEMALE
        assert mary.maiden_name == "Jones"

    def test_partial_date_normalized(self, mapped):
        """Test approximate dates become the first of the period."""
        alice, robert = mapped.people[2], mapped.people[3]
        assert alice.date_of_birth == date(1975, 1, 1)
        assert robert.date_of_birth == date(1978, 3, 1)

    def test_death_implies_not_living(self, mapped):
        """Test a death date or bare DEAT event."""
        george, helen = mapped.people[4], mapped.people[5]
        assert george.date_of_passing == date(1990, 12, 12)
        assert not george.is_living
        assert helen.date_of_passing is None
        assert not helen.is_living

    def test_relationship_order(self, mapped):
        """Test SPOUSE pair first, then PARENT and CHILD per child."""
        first_family = [(r.type, r.person_id, r.related_person_id) for r in mapped.relationships[:10]]
        assert first_family == [
            (RelationshipType.SPOUSE, "I1", "I2"),
            (RelationshipType.SPOUSE, "I2", "I1"),
            (RelationshipType.PARENT, "I1", "I3"),
            (RelationshipType.PARENT, "I2", "I3"),
            (RelationshipType.CHILD, "I3", "I1"),
            (RelationshipType.CHILD, "I3", "I2"),
            (RelationshipType.PARENT, "I1", "I4"),
            (RelationshipType.PARENT, "I2", "I4"),
            (RelationshipType.CHILD, "I4", "I1"),
            (RelationshipType.CHILD, "I4", "I2"),
        ]
        assert len(mapped.relationships) == 16

    def test_marriage_details(self, mapped):
        """Test marriage date and place on SPOUSE edges."""
        marriage = mapped.relationships[0]
        assert marriage.marriage_date == date(1972, 6, 10)
        assert marriage.marriage_place == "Boston, Massachusetts, USA"
        assert marriage.is_active

    def test_divorce_deactivates(self):
        """Test a divorced couple's edges are inactive."""
        doc = parse(
            "0 HEAD\n0 @I1@ INDI\n0 @I2@ INDI\n"
            "0 @F1@ FAM\n1 HUSB @I1@\n1 WIFE @I2@\n1 DIV\n2 DATE 3 APR 1980\n0 TRLR"
        )
        result = map_from_gedcom(doc)
        assert all(not r.is_active for r in result.relationships)
        assert result.relationships[0].divorce_date == date(1980, 4, 3)

    def test_unknown_references_skipped(self):
        """Test dangling references produce warnings, not errors."""
        doc = parse(
            "0 HEAD\n0 @I1@ INDI\n0 @I2@ INDI\n"
            "0 @F1@ FAM\n1 HUSB @I1@\n1 WIFE @I9@\n1 CHIL @I2@\n1 CHIL @I8@\n0 TRLR"
        )
        result = map_from_gedcom(doc)
        assert edges(result.relationships, RelationshipType.SPOUSE) == []
        assert edges(result.relationships, RelationshipType.PARENT) == [("I1", "I2")]
        assert edges(result.relationships, RelationshipType.CHILD) == [("I2", "I1")]
        assert len(result.warnings) == 2
        assert "@I9@" in result.warnings[0]

    def test_id_factory(self, document):
        """Test person ids can be overridden."""
        result = map_from_gedcom(document, id_factory=lambda xref: f"person-{xref.strip('@')}")
        assert result.people[0].id == "person-I1"
        assert result.relationships[0].person_id == "person-I1"

    def test_gender_other(self):
        """Test SEX X maps to OTHER and unknown codes to no gender."""
        doc = parse("0 HEAD\n0 @I1@ INDI\n1 SEX X\n0 @I2@ INDI\n1 SEX U\n0 TRLR")
        people = map_from_gedcom(doc).people
        assert people[0].gender == Gender.OTHER
        assert people[1].gender is None


# ============================================================================
# Export Tests
# ============================================================================

class TestMapToGedcom:
    """Tests for domain -> GEDCOM projection."""

    def test_john_smith_family(self):
        """Test a couple with one child."""
        people = [
            Person(id="a", first_name="John", last_name="Smith", gender=Gender.MALE,
                   date_of_birth=date(1950, 1, 15)),
            Person(id="b", first_name="Mary", last_name="Smith", gender=Gender.FEMALE),
            Person(id="c", first_name="Alice", last_name="Smith", gender=Gender.FEMALE),
        ]
        relationships = [
            spouse("a", "b", marriage_date=date(1972, 6, 10)),
            spouse("b", "a", marriage_date=date(1972, 6, 10)),
            parent("a", "c"),
            parent("b", "c"),
        ]
        projection = map_to_gedcom(people, relationships)

        assert [i.xref for i in projection.individuals] == ["@I1@", "@I2@", "@I3@"]
        assert projection.individuals[0].birth_date == "1950-01-15"
        assert len(projection.families) == 1
        family = projection.families[0]
        assert family.xref == "@F1@"
        assert family.husband == "@I1@"
        assert family.wife == "@I2@"
        assert family.children == ["@I3@"]
        assert family.marriage_date == "1972-06-10"
        assert projection.individuals[0].families_as_spouse == ["@F1@"]
        assert projection.individuals[2].families_as_child == ["@F1@"]

    def test_wife_chosen_by_gender(self):
        """Test a female discovered first still becomes WIFE."""
        people = [
            Person(id="w", gender=Gender.FEMALE),
            Person(id="h", gender=Gender.MALE),
        ]
        family = map_to_gedcom(people, [spouse("w", "h")]).families[0]
        assert family.husband == "@I2@"
        assert family.wife == "@I1@"

    def test_same_gender_couple_discovery_order(self):
        """Test two spouses of the same gender keep discovery order."""
        people = [Person(id="x", gender=Gender.FEMALE), Person(id="y", gender=Gender.FEMALE)]
        family = map_to_gedcom(people, [spouse("y", "x")]).families[0]
        assert family.husband == "@I2@"
        assert family.wife == "@I1@"

    def test_multiple_marriages_kept_apart(self):
        """Test children of different marriages land in different families."""
        people = [
            Person(id="p", gender=Gender.MALE),
            Person(id="w1", gender=Gender.FEMALE),
            Person(id="w2", gender=Gender.FEMALE),
            Person(id="c1"),
            Person(id="c2"),
        ]
        relationships = [
            spouse("p", "w1"),
            spouse("p", "w2"),
            parent("p", "c1"),
            parent("w1", "c1"),
            parent("p", "c2"),
            parent("w2", "c2"),
        ]
        projection = map_to_gedcom(people, relationships)
        assert len(projection.families) == 2
        first, second = projection.families
        assert (first.husband, first.wife, first.children) == ("@I1@", "@I2@", ["@I4@"])
        assert (second.husband, second.wife, second.children) == ("@I1@", "@I3@", ["@I5@"])
        assert projection.individuals[0].families_as_spouse == ["@F1@", "@F2@"]

    def test_single_parent_family(self):
        """Test a single parent gets their own family."""
        people = [Person(id="m", gender=Gender.FEMALE), Person(id="c")]
        projection = map_to_gedcom(people, [parent("m", "c")])
        family = projection.families[0]
        assert family.husband is None
        assert family.wife == "@I1@"
        assert family.children == ["@I2@"]

    def test_child_edges_build_same_family(self):
        """Test CHILD edges alone group a child with both parents."""
        people = [Person(id="f", gender=Gender.MALE), Person(id="m", gender=Gender.FEMALE), Person(id="c")]
        relationships = [
            Relationship(person_id="c", related_person_id="f", type=RelationshipType.CHILD),
            Relationship(person_id="c", related_person_id="m", type=RelationshipType.CHILD),
        ]
        projection = map_to_gedcom(people, relationships)
        assert len(projection.families) == 1
        assert projection.families[0].children == ["@I3@"]

    def test_parent_and_child_edges_not_duplicated(self):
        """Test a child is listed once when both edge directions exist."""
        people = [Person(id="f"), Person(id="c")]
        relationships = [
            parent("f", "c"),
            Relationship(person_id="c", related_person_id="f", type=RelationshipType.CHILD),
        ]
        projection = map_to_gedcom(people, relationships)
        assert projection.families[0].children == ["@I2@"]
        assert projection.individuals[1].families_as_child == ["@F1@"]

    def test_remarriage_same_couple(self):
        """Test a couple marrying twice on different dates yields two families."""
        people = [Person(id="h", gender=Gender.MALE), Person(id="w", gender=Gender.FEMALE)]
        relationships = [
            spouse("h", "w", marriage_date=date(1960, 1, 1), is_active=False),
            spouse("h", "w", marriage_date=date(1975, 5, 5)),
        ]
        families = map_to_gedcom(people, relationships).families
        assert len(families) == 2
        assert families[0].marriage_date == "1960-01-01"
        assert families[0].divorced
        assert families[1].marriage_date == "1975-05-05"
        assert not families[1].divorced

    def test_remarriage_edges_grouped_by_person(self):
        """Test edges listed per person still yield one family per marriage."""
        people = [Person(id="a", gender=Gender.MALE), Person(id="b", gender=Gender.FEMALE)]
        first, second = date(1960, 1, 1), date(1980, 1, 1)
        relationships = [
            spouse("a", "b", marriage_date=first, is_active=False),
            spouse("a", "b", marriage_date=second),
            spouse("b", "a", marriage_date=first, is_active=False),
            spouse("b", "a", marriage_date=second),
        ]
        projection = map_to_gedcom(people, relationships)
        assert [f.marriage_date for f in projection.families] == ["1960-01-01", "1980-01-01"]
        assert projection.individuals[0].families_as_spouse == ["@F1@", "@F2@"]
        assert projection.individuals[1].families_as_spouse == ["@F1@", "@F2@"]

    def test_undated_spouse_edge_joins_first_marriage(self):
        """Test an edge without a marriage date does not open a new family."""
        people = [Person(id="a"), Person(id="b")]
        relationships = [
            spouse("a", "b"),
            spouse("b", "a", marriage_date=date(1960, 1, 1)),
        ]
        families = map_to_gedcom(people, relationships).families
        assert len(families) == 1
        assert families[0].marriage_date == "1960-01-01"

    def test_duplicate_person_ids_skipped(self):
        """Test a repeated person id keeps only the first person."""
        people = [Person(id="a", first_name="First"), Person(id="a", first_name="Second"), Person(id="b")]
        individuals = map_to_gedcom(people, []).individuals
        assert [i.xref for i in individuals] == ["@I1@", "@I2@"]
        assert individuals[0].first_name == "First"

    def test_mirrored_spouse_edges_one_family(self):
        """Test both directions of a SPOUSE pair map to one family."""
        people = [Person(id="h"), Person(id="w")]
        relationships = [
            spouse("h", "w", marriage_date=date(1960, 1, 1)),
            spouse("w", "h", marriage_date=date(1960, 1, 1)),
        ]
        assert len(map_to_gedcom(people, relationships).families) == 1

    def test_unknown_person_ignored(self):
        """Test edges to unknown people are dropped."""
        people = [Person(id="a")]
        projection = map_to_gedcom(people, [spouse("a", "ghost"), parent("ghost", "a")])
        assert projection.families == []
        assert projection.individuals[0].families_as_child == []

    def test_deceased_and_living(self):
        """Test deceased flags and optional fields."""
        people = [
            Person(id="a", is_living=False),
            Person(id="b", date_of_passing=date(2001, 2, 3), death_place="Leeds"),
            Person(id="c", maiden_name="Jones", bio="Line one\nLine two"),
        ]
        individuals = map_to_gedcom(people, []).individuals
        assert individuals[0].deceased
        assert individuals[0].death_date is None
        assert individuals[1].deceased
        assert individuals[1].death_date == "2001-02-03"
        assert individuals[1].death_place == "Leeds"
        assert not individuals[2].deceased
        assert individuals[2].maiden_name == "Jones"
        assert individuals[2].notes == ["Line one\nLine two"]
