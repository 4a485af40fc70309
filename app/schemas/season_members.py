"""People attached to a season. Rows are owned by their season and are
deleted with it."""

from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class Contestant(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "contestants"

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="seasons.id", index=True)
    name: str
    intro: str = Field(default="")
    gender: Gender
    address: str = Field(default="")
    image: str
    votes: int = Field(default=0)


class JuryMember(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "jury_members"

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="seasons.id", index=True)
    name: str
    designation: Optional[str] = None
    image: str


class Winner(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "winners"

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="seasons.id", index=True)
    rank: str
    name: str
    image: str
    slug: Optional[str] = None
