"""Role checks against the identity gateway's headers.

The gateway in front of this service authenticates the caller and forwards
``X-User-Id`` and ``X-User-Role``; this module only trusts and checks them.
"""
from dataclasses import dataclass
from http import HTTPStatus
from typing import Annotated, Literal

from fastapi import Depends, Header, HTTPException

Role = Literal["user", "admin"]


@dataclass(slots=True, frozen=True)
class Caller:
    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_caller(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Caller | None:
    if not x_user_id:
        return None
    role: Role = "admin" if x_user_role == "admin" else "user"
    return Caller(user_id=x_user_id, role=role)


def require_user(caller: Annotated[Caller | None, Depends(get_caller)]) -> Caller:
    if caller is None:
        raise HTTPException(HTTPStatus.UNAUTHORIZED, "Authentication required")
    return caller


def require_admin(caller: Annotated[Caller | None, Depends(get_caller)]) -> Caller:
    if caller is None or not caller.is_admin:
        raise HTTPException(HTTPStatus.FORBIDDEN, "Unauthorized: Admin access required")
    return caller
