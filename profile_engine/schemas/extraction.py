"""
Raw extraction payload as returned by the AI service.

Nothing here is trusted: every section is coerced to the container type it
should have and individual entries stay loose dicts until the normalizer
turns them into a CanonicalProfile.
"""
from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field, field_validator

SECTIONS = (
    "work_experiences",
    "educations",
    "certificates",
    "projects",
    "skills",
    "awards",
    "volunteering",
    "languages",
    "accomplishments",
)


class RawExtraction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    basic_info: Dict[str, Any] = Field(default_factory=dict)
    work_experiences: List[Any] = Field(default_factory=list)
    educations: List[Any] = Field(default_factory=list)
    certificates: List[Any] = Field(default_factory=list)
    projects: List[Any] = Field(default_factory=list)
    skills: List[Any] = Field(default_factory=list)
    awards: List[Any] = Field(default_factory=list)
    volunteering: List[Any] = Field(default_factory=list)
    languages: List[Any] = Field(default_factory=list)
    accomplishments: List[Any] = Field(default_factory=list)

    @field_validator("basic_info", mode="before")
    @classmethod
    def _coerce_mapping(cls, value):
        return value if isinstance(value, dict) else {}

    @field_validator(*SECTIONS, mode="before")
    @classmethod
    def _coerce_list(cls, value):
        return value if isinstance(value, list) else []
