"""
Provisioning des identités de connexion.

L'identité (compte users) est créée et validée dans sa propre session, indépendamment
du profil métier (élève, enseignant...). L'appelant doit donc pouvoir la supprimer
si l'enregistrement du profil échoue ensuite (compensation, voir student_service).
"""

import logging
import uuid
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from academy.auth.roles import Role
from academy.auth.security import hash_password
from academy.database import SessionLocal
from academy.errors import DependencyFailure, DuplicateIdentifier, NotFound
from academy.models.user import User

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    def create_identity(self, email: str, password: str, name: str, role: Role) -> uuid.UUID:
        ...

    def delete_identity(self, user_id: uuid.UUID) -> None:
        ...

    def set_password(self, email: str, new_password: str) -> uuid.UUID:
        ...


class DatabaseIdentityProvider:
    """Identités stockées dans la table users, mot de passe haché en bcrypt."""

    def __init__(self, session_factory=SessionLocal):
        self._session_factory = session_factory

    def create_identity(self, email: str, password: str, name: str, role: Role) -> uuid.UUID:
        db = self._session_factory()
        try:
            user_id = uuid.uuid4()
            user = User(
                id=user_id,
                email=email,
                password_hash=hash_password(password),
                name=name,
                role=Role(role).value,
            )
            db.add(user)
            db.commit()
            logger.info("Identité créée : %s (%s)", email, role)
            return user_id
        except IntegrityError as exc:
            db.rollback()
            raise DuplicateIdentifier(f"Un compte existe déjà pour '{email}'.") from exc
        except SQLAlchemyError as exc:
            db.rollback()
            raise DependencyFailure("Création du compte de connexion impossible.") from exc
        finally:
            db.close()

    def delete_identity(self, user_id: uuid.UUID) -> None:
        db = self._session_factory()
        try:
            user = db.get(User, user_id)
            if user is not None:
                db.delete(user)
                db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise DependencyFailure("Suppression du compte de connexion impossible.") from exc
        finally:
            db.close()

    def set_password(self, email: str, new_password: str) -> uuid.UUID:
        db = self._session_factory()
        try:
            user = db.execute(select(User).where(User.email == email)).scalar()
            if user is None:
                raise NotFound(f"Aucun compte pour '{email}'.")
            user.password_hash = hash_password(new_password)
            user_id = user.id
            db.commit()
            return user_id
        except SQLAlchemyError as exc:
            db.rollback()
            raise DependencyFailure("Mise à jour du mot de passe impossible.") from exc
        finally:
            db.close()


def release_identity(identities: IdentityProvider, user_id: uuid.UUID) -> None:
    """
    Compensation : supprime une identité dont le profil n'a pas pu être enregistré.
    Un échec est journalisé sans masquer l'erreur d'origine de l'appelant.
    """
    try:
        identities.delete_identity(user_id)
    except Exception:
        # le compte reste orphelin : à supprimer manuellement
        logger.exception("Compensation impossible : compte %s non supprimé", user_id)
    else:
        logger.warning("Compte %s supprimé après l'échec de l'enregistrement du profil", user_id)


def get_identity_provider() -> IdentityProvider:
    """Dépendance FastAPI, remplaçable dans les tests via dependency_overrides."""
    return DatabaseIdentityProvider()
