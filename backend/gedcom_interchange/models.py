"""Domain model: people and the relationships between them."""

from datetime import date
from enum import Enum

from pydantic import BaseModel


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class RelationshipType(str, Enum):
    """PARENT and CHILD are inverses; SPOUSE is symmetric."""
    PARENT = "PARENT"
    CHILD = "CHILD"
    SPOUSE = "SPOUSE"


class Person(BaseModel):
    """A person in the family tree."""
    id: str
    first_name: str = ""
    last_name: str = ""
    maiden_name: str | None = None
    gender: Gender | None = None
    date_of_birth: date | None = None
    birth_place: str | None = None
    date_of_passing: date | None = None
    death_place: str | None = None
    profession: str | None = None
    bio: str | None = None
    is_living: bool = True


class Relationship(BaseModel):
    """A directed edge: person_id is the PARENT/CHILD/SPOUSE of related_person_id."""
    person_id: str
    related_person_id: str
    type: RelationshipType
    is_active: bool = True
    marriage_date: date | None = None
    divorce_date: date | None = None
    marriage_place: str | None = None  # SPOUSE only


class MappingResult(BaseModel):
    """Domain entities produced from a GEDCOM document."""
    people: list[Person] = []
    relationships: list[Relationship] = []
    warnings: list[str] = []
