"""
Caller identity.

Authentication happens upstream; the gateway forwards the verified user id
and role as X-User-Id / X-User-Role headers.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

CANDIDATE_ROLE = "candidate"
STAFF_ROLE = "mis"


@dataclass
class CurrentUser:
    user_id: str
    role: str


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> CurrentUser:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return CurrentUser(user_id=x_user_id.strip(), role=(x_user_role or "").strip().lower())


async def get_current_candidate(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role != CANDIDATE_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Candidate access required")
    return user


async def get_current_staff(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role != STAFF_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Staff access required")
    return user
