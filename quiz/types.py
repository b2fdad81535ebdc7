"""
Quiz data model.

Field names are snake_case in Python and camelCase on the wire, so the same
models validate Gemini payloads and the JSON kept in the local store.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        """Dump with wire (camelCase) field names."""
        return self.model_dump(by_alias=True)


class Option(Record):
    id: str
    text: str
    # Forwarded to the analysis prompt as a hint, never scored locally
    trait: str


class Question(Record):
    id: int
    text: str
    options: List[Option] = Field(min_length=1)


class UserAnswer(Record):
    question_id: int
    question_text: str
    selected_option_text: str
    selected_trait: str


class TraitScore(Record):
    trait: str
    score: int = Field(ge=0, le=100)
    full_mark: int = 100


class PersonalityResult(Record):
    archetype: str
    tagline: str
    description: str
    strengths: List[str]
    weaknesses: List[str]
    study_tips: List[str]
    career_paths: List[str]
    traits: List[TraitScore]


class SavedResult(PersonalityResult):
    id: str
    date: str  # ISO-8601, UTC

    def result(self) -> PersonalityResult:
        return PersonalityResult.model_validate(
            self.model_dump(exclude={"id", "date"})
        )


class User(Record):
    """Public session fields. Never carries credentials."""

    id: str
    name: str
    email: str


class UserRecord(User):
    password_hash: str

    def public(self) -> User:
        return User(id=self.id, name=self.name, email=self.email)
