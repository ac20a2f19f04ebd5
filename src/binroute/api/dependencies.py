"""Shared request dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from fastapi import Depends, Header, HTTPException, status

from ..data.sources import DataSource, build_data_source
from ..models.domain import Role


@lru_cache()
def get_data_source() -> DataSource:
    return build_data_source()


@dataclass(frozen=True, slots=True)
class Caller:
    user_id: str
    role: Role


def get_caller(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Caller:
    """Identity forwarded by the authenticating gateway."""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Missing caller identity")
    try:
        role = Role(x_user_role.strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unknown role '{x_user_role}'",
        ) from None
    return Caller(user_id=x_user_id.strip(), role=role)


def require_role(*roles: Role) -> Callable[[Caller], Caller]:
    allowed = frozenset(roles)

    def checker(caller: Caller = Depends(get_caller)) -> Caller:
        if caller.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{caller.role.value}' is not allowed to access this resource",
            )
        return caller

    return checker
