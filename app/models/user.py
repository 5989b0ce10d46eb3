from typing import Literal

from sqlmodel import Field, SQLModel

Role = Literal["admin", "reception", "doctor"]
STAFF_ROLES: tuple[str, ...] = ("admin", "reception", "doctor")


class UserBase(SQLModel):
    email: str = Field(unique=True, index=True)
    full_name: str | None = None
    role: str = Field(default="reception", index=True)


class User(UserBase, table=True):
    __tablename__ = "users"
    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str


class UserCreate(SQLModel):
    email: str
    password: str
    full_name: str | None = None
    role: Role = "reception"


class UserPublic(SQLModel):
    id: int
    email: str
    full_name: str | None = None
    role: str
