# domainstore/app/schemas/user.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from domainstore.app.models.user import parse_domains
from domainstore.app.schemas.common import CamelModel


def _reject_nul(password: str) -> str:
    # bcrypt cannot hash NUL bytes
    if "\x00" in password:
        raise ValueError("password must not contain NUL characters")
    return password


# Body for /login and /register
class Credentials(CamelModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)

    check_password = field_validator("password")(_reject_nul)


class LoginResponse(CamelModel):
    message: str
    token: str


class RegisterResponse(CamelModel):
    message: str
    id: int


class TokenClaims(CamelModel):
    """Payload carried inside a bearer token (a login-time snapshot)."""
    id: int
    username: str
    is_admin: bool = False


class MeUser(CamelModel):
    id: int
    username: str
    is_admin: bool


class MeResponse(CamelModel):
    is_logged_in: bool = True
    user: MeUser


class UserSummary(CamelModel):
    id: int
    username: str
    is_active: bool
    is_admin: bool


class DomainUsersResponse(CamelModel):
    users: List[UserSummary]


class UserDetail(UserSummary):
    domains: List[str] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None

    @field_validator("domains", mode="before")
    @classmethod
    def split_domains(cls, v):
        if v is None or isinstance(v, str):
            return sorted(parse_domains(v))
        return sorted(v)


class UserListResponse(CamelModel):
    users: List[UserDetail]


class AdminUserCreate(CamelModel):
    """
    Body for POST /admin/users.

    ``domain`` may name one domain or a comma-separated list.
    """
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    domain: Optional[str] = None
    is_active: bool = True
    is_admin: bool = False

    check_password = field_validator("password")(_reject_nul)


class AdminUserUpdate(CamelModel):
    is_active: Optional[bool] = None
    is_admin: Optional[bool] = None
    is_deleted: Optional[bool] = None


class AdminUserUpdateResponse(CamelModel):
    message: str
    user: UserDetail


class UserStatusUpdate(CamelModel):
    is_active: bool


class UserStatusResponse(CamelModel):
    message: str
    changes: int


class MembershipRequest(CamelModel):
    domain: str = Field(..., min_length=1)


class MembershipResponse(CamelModel):
    message: str
    domains: List[str]
