"""
Dépendances FastAPI d'authentification et d'autorisation.

resolve_principal joue le rôle du collaborateur d'identité : il transforme
l'en-tête Authorization en Principal, ou None si rien n'est résolu.
Les dépendances require_* appliquent ensuite le contrôle d'accès (gate.authorize).
"""

import logging
import uuid
from typing import Callable, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from academy.auth.gate import authorize
from academy.auth.principal import Principal
from academy.auth.roles import Role
from academy.auth.security import AuthError, decode_access_token
from academy.database import get_db
from academy.models.user import User

logger = logging.getLogger(__name__)


def _parse_bearer(auth_header: Optional[str]) -> Optional[str]:
    if not auth_header:
        return None
    parts = auth_header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def resolve_principal(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db),
) -> Optional[Principal]:
    """Retourne le principal de la requête, ou None (jeton absent, invalide, compte inactif)."""
    token = _parse_bearer(authorization)
    if token is None:
        return None

    try:
        payload = decode_access_token(token)
        user_id = uuid.UUID(payload["sub"])
    except (AuthError, ValueError) as exc:
        logger.info("Jeton rejeté : %s", exc)
        return None

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return Principal.model_validate(user)


def require_authenticated() -> Callable:
    def dependency(principal: Optional[Principal] = Depends(resolve_principal)) -> Principal:
        return authorize(principal)

    return dependency


def require_role(minimum: Role) -> Callable:
    """Exige un rôle au moins aussi privilégié que `minimum`."""
    def dependency(principal: Optional[Principal] = Depends(resolve_principal)) -> Principal:
        return authorize(principal, minimum=minimum)

    return dependency


def require_any_role(*roles: Role) -> Callable:
    """Exige l'un des rôles listés."""
    allowed = frozenset(roles)

    def dependency(principal: Optional[Principal] = Depends(resolve_principal)) -> Principal:
        return authorize(principal, any_of=allowed)

    return dependency
