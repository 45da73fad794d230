# backend/app/auth.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

import jwt
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .models import AppUser, OrgMembership, Organization
from .services.financial_queries import AccessScope

ROLES = (
    "senior_admin",
    "junior_admin",
    "property_manager",
    "contractor",
    "artisan",
    "tenant",
)


@dataclass(frozen=True)
class Principal:
    org_id: int
    org_slug: str
    user_id: int
    email: str
    role: str  # one of ROLES


def access_scope_for(p: Principal) -> AccessScope:
    """
    Turns the caller's role into a data-visibility scope.
    Property managers only see their own buildings; contractor-family roles
    only see contractor-created expenses and revenues.
    """
    role = str(p.role or "").lower()
    return AccessScope(
        org_id=int(p.org_id),
        property_manager_id=int(p.user_id) if role == "property_manager" else None,
        creator_role_family="contractor" if "contractor" in role else "admin",
    )


# -------------------------
# JWT helpers
# -------------------------
def issue_token(*, user_id: int, org_slug: str, role: str | None = None) -> str:
    now = datetime.utcnow()
    payload: dict[str, Any] = {
        "sub": str(int(user_id)),
        "org": org_slug,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=int(settings.jwt_exp_minutes))).timestamp()),
    }
    if role:
        payload["role"] = str(role)
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_token(token: str) -> dict[str, Any]:
    try:
        return dict(jwt.decode(token, settings.jwt_secret, algorithms=["HS256"]))
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


# -------------------------
# Org + membership helpers
# -------------------------
def _resolve_org(db: Session, org_slug: str) -> Organization:
    org = db.scalar(select(Organization).where(Organization.slug == org_slug))
    if org:
        return org
    raise HTTPException(status_code=401, detail="Unknown org")


def _get_membership(db: Session, org_id: int, user_id: int) -> OrgMembership | None:
    return db.scalar(select(OrgMembership).where(OrgMembership.org_id == org_id, OrgMembership.user_id == user_id))


def _principal_from_user(db: Session, *, org_slug: str, user: AppUser) -> Principal:
    org = _resolve_org(db, org_slug=org_slug)
    mem = _get_membership(db, org_id=int(org.id), user_id=int(user.id))
    if mem is None:
        raise HTTPException(status_code=403, detail="Not a member of this org")
    return Principal(
        org_id=int(org.id),
        org_slug=str(org.slug),
        user_id=int(user.id),
        email=str(user.email),
        role=str(mem.role),
    )


def _dev_principal(db: Session, request: Request, org_slug: str) -> Principal:
    email = (request.headers.get(settings.dev_header_user_email) or "").strip().lower()
    role_hint = (request.headers.get(settings.dev_header_user_role) or "senior_admin").strip().lower()
    if not email:
        raise HTTPException(status_code=401, detail=f"Missing {settings.dev_header_user_email} for dev auth")

    provision = bool(settings.dev_auto_provision)

    org = db.scalar(select(Organization).where(Organization.slug == org_slug))
    if org is None and provision:
        org = Organization(slug=org_slug, name=org_slug, created_at=datetime.utcnow())
        db.add(org)
        db.commit()
        db.refresh(org)

    user = db.scalar(select(AppUser).where(AppUser.email == email))
    if user is None and provision:
        user = AppUser(email=email, display_name=email.split("@")[0], created_at=datetime.utcnow())
        db.add(user)
        db.commit()
        db.refresh(user)

    if org is None or user is None:
        raise HTTPException(status_code=401, detail="Dev auth could not provision user/org")

    mem = _get_membership(db, org_id=int(org.id), user_id=int(user.id))
    if mem is None and provision:
        mem = OrgMembership(
            org_id=int(org.id),
            user_id=int(user.id),
            role=role_hint if role_hint in ROLES else "junior_admin",
            created_at=datetime.utcnow(),
        )
        db.add(mem)
        db.commit()
    if mem is None:
        raise HTTPException(status_code=403, detail="Not a member of this org")

    return Principal(org_id=int(org.id), org_slug=str(org.slug), user_id=int(user.id), email=str(user.email), role=str(mem.role))


# -------------------------
# get_principal
# -------------------------
def get_principal(
    request: Request,
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> Principal:
    """
    Auth modes supported (in priority order):
      1) Authorization: Bearer <token>
      2) dev header spoofing (ONLY if settings.auth_mode == "dev")
    """
    org_slug = str(request.headers.get(settings.dev_header_org_slug) or "").strip()
    if not org_slug:
        raise HTTPException(status_code=401, detail=f"Missing {settings.dev_header_org_slug} (active org context).")

    token = None
    if authorization and str(authorization).lower().startswith("bearer "):
        token = str(authorization).split(" ", 1)[1].strip()

    if token:
        claims = decode_token(token)
        sub = str(claims.get("sub") or "")
        if not sub:
            raise HTTPException(status_code=401, detail="Token missing sub")
        user = db.scalar(select(AppUser).where(AppUser.id == int(sub)))
        if user is None:
            raise HTTPException(status_code=401, detail="Unknown user")
        return _principal_from_user(db, org_slug=org_slug, user=user)

    if (settings.auth_mode or "").strip().lower() == "dev":
        return _dev_principal(db, request, org_slug)

    raise HTTPException(status_code=401, detail="Not authenticated")


def require_roles(*roles: str) -> Callable[..., Principal]:
    allowed = frozenset(roles)

    def _dep(p: Principal = Depends(get_principal)) -> Principal:
        if p.role not in allowed:
            raise HTTPException(status_code=403, detail=f"Role {p.role!r} may not perform this action")
        return p

    return _dep
