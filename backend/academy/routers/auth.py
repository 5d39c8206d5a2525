"""
Router d'authentification : connexion, profil courant, gestion des comptes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.auth.dependencies import require_authenticated, require_role
from academy.auth.principal import Principal
from academy.auth.provisioning import IdentityProvider, get_identity_provider
from academy.auth.roles import Role
from academy.database import get_db
from academy.schemas.auth import (
    LoginRequest,
    ResetPasswordRequest,
    ResetPasswordResponse,
    SignupRequest,
    TokenResponse,
    UserResponse,
)
from academy.services import auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentification"])


@router.post("/login", response_model=TokenResponse, summary="Connexion")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Connexion par e-mail ou identifiant élève. Retourne un jeton JWT."""
    return auth_service.login(db, data)


@router.get("/me", response_model=UserResponse, summary="Utilisateur courant")
def me(principal: Principal = Depends(require_authenticated())):
    return auth_service.me(principal)


@router.post("/signup", response_model=UserResponse, status_code=201, summary="Créer un compte")
def signup(
    data: SignupRequest,
    db: Session = Depends(get_db),
    identities: IdentityProvider = Depends(get_identity_provider),
    _: Principal = Depends(require_role(Role.ADMIN)),
):
    """Création d'un compte personnel ou parent par un administrateur."""
    return auth_service.signup(db, data, identities)


@router.post("/reset-password", response_model=ResetPasswordResponse, summary="Réinitialiser un mot de passe")
def reset_password(
    data: ResetPasswordRequest,
    identities: IdentityProvider = Depends(get_identity_provider),
    _: Principal = Depends(require_role(Role.ADMIN)),
):
    return auth_service.reset_password(data, identities)
