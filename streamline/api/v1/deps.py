"""
FastAPI dependencies: database session, auth guards and company membership.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streamline.core.config import settings
from streamline.core.security import decode_access_token
from streamline.db.session import async_session_factory
from streamline.models.company import Company, CompanyMember
from streamline.models.user import User

# auto_error=False so the HttpOnly cookie can be used when the header is missing
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
def _token_from_cookie(access_token: str | None) -> str | None:
    if not access_token:
        return None
    # auth endpoints store the cookie as "Bearer <token>"
    if access_token.startswith("Bearer "):
        return access_token.split(" ", 1)[1]
    return access_token


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode JWT from Header OR Cookie, look up user."""
    final_token = token or _token_from_cookie(access_token)

    credentials_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not final_token:
        raise credentials_exc

    payload = decode_access_token(final_token)
    if payload is None:
        raise credentials_exc

    user_id: str | None = payload.get("sub")
    if user_id is None:
        raise credentials_exc

    user = await db.get(User, int(user_id))
    if user is None:
        raise credentials_exc
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Reject inactive accounts."""
    if not current_user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user account")
    return current_user


# ── Company membership ──────────────────────────────────────────────
async def find_membership(db: AsyncSession, company_id: int, user_id: int) -> CompanyMember | None:
    result = await db.execute(
        select(CompanyMember).where(
            CompanyMember.company_id == company_id,
            CompanyMember.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def load_membership(db: AsyncSession, company_id: int, user: User) -> CompanyMember:
    """Membership of *user* in *company_id*; 404 for unknown companies, 403 for outsiders."""
    company = await db.get(Company, company_id)
    if company is None:
        raise HTTPException(status_code=404, detail="Company not found")

    member = await find_membership(db, company_id, user.id)
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this company",
        )
    return member


async def get_membership(
    company_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
) -> CompanyMember:
    """Path-scoped guard: the caller must belong to ``{company_id}``."""
    return await load_membership(db, company_id, current_user)


async def require_company_admin(
    member: CompanyMember = Depends(get_membership),
) -> CompanyMember:
    """Only allow company admins to proceed."""
    if member.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return member


async def get_company(
    company_id: int,
    _member: CompanyMember = Depends(get_membership),
    db: AsyncSession = Depends(get_db),
) -> Company:
    company = await db.get(Company, company_id)
    if company is None:
        raise HTTPException(status_code=404, detail="Company not found")
    return company
