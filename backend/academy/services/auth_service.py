"""
Service d'authentification : connexion, création de comptes, réinitialisation de mot de passe.
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from academy.auth.principal import Principal
from academy.auth.provisioning import IdentityProvider, release_identity
from academy.auth.roles import STAFF, Role
from academy.auth.security import create_access_token, verify_password
from academy.errors import DependencyFailure, Unauthenticated
from academy.models.parent import Parent
from academy.models.teacher import Teacher
from academy.models.user import User
from academy.schemas.auth import (
    LoginRequest,
    ResetPasswordRequest,
    ResetPasswordResponse,
    SignupRequest,
    TokenResponse,
    UserResponse,
)
from academy.services.student_service import student_email

logger = logging.getLogger(__name__)


def login(db: Session, data: LoginRequest) -> TokenResponse:
    """
    Authentifie par e-mail ou par identifiant élève (sans '@', complété par le domaine élève).
    Même erreur pour un compte inconnu, inactif ou un mauvais mot de passe.
    """
    email = data.identifier if "@" in data.identifier else student_email(data.identifier)

    user = db.execute(select(User).where(User.email == email)).scalar()
    if user is None or not user.is_active or not verify_password(data.password, user.password_hash):
        logger.info("Échec de connexion pour %s", email)
        raise Unauthenticated("Identifiant ou mot de passe incorrect.")

    user.last_login = datetime.now()
    db.commit()

    token = create_access_token(subject=str(user.id), role=user.role)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


def me(principal: Principal) -> UserResponse:
    return UserResponse(id=principal.id, email=principal.email, name=principal.name, role=principal.role)


def signup(db: Session, data: SignupRequest, identities: IdentityProvider) -> UserResponse:
    """
    Crée un compte personnel ou parent avec son profil (Teacher pour le personnel, Parent sinon).
    Même compensation que l'inscription d'un élève si le profil ne peut pas être enregistré.
    """
    user_id = identities.create_identity(data.email, data.password, data.name, data.role)

    try:
        if data.role in STAFF:
            db.add(Teacher(id=uuid.uuid4(), user_id=user_id, name=data.name, phone=data.phone))
        elif data.role == Role.PARENT:
            db.add(Parent(id=uuid.uuid4(), user_id=user_id, name=data.name, phone=data.phone))
        db.commit()
    except Exception as exc:
        db.rollback()
        release_identity(identities, user_id)
        raise DependencyFailure("Enregistrement du profil impossible.") from exc

    logger.info("Compte créé : %s (%s)", data.email, data.role.value)
    return UserResponse(id=user_id, email=data.email, name=data.name, role=data.role)


def reset_password(data: ResetPasswordRequest, identities: IdentityProvider) -> ResetPasswordResponse:
    user_id = identities.set_password(data.email, data.new_password)
    logger.info("Mot de passe réinitialisé pour %s", data.email)
    return ResetPasswordResponse(
        user_id=user_id,
        email=data.email,
        message="Mot de passe réinitialisé.",
    )
