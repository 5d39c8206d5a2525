"""
Tests unitaires pour la création de comptes et la connexion.
"""

import uuid
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from academy.auth.roles import Role
from academy.errors import DependencyFailure, Unauthenticated
from academy.models.parent import Parent
from academy.models.teacher import Teacher
from academy.schemas.auth import LoginRequest, SignupRequest
from academy.services.auth_service import login, signup


def make_signup(role):
    return SignupRequest(email="compte@example.com", password="secret1", name="Compte", role=role, phone="010-0000-1111")


def make_identities(user_id=None):
    identities = MagicMock()
    identities.create_identity.return_value = user_id or uuid.uuid4()
    return identities


@pytest.mark.parametrize("role", [Role.ADMIN, Role.SENIOR_TEACHER, Role.TEACHER, Role.ASSISTANT])
def test_personnel_recoit_un_profil_enseignant(role):
    db = MagicMock()
    user_id = uuid.uuid4()

    result = signup(db, make_signup(role), make_identities(user_id))

    profile = db.add.call_args.args[0]
    assert isinstance(profile, Teacher)
    assert profile.user_id == user_id
    assert result.role == role


def test_parent_recoit_un_profil_parent():
    db = MagicMock()
    signup(db, make_signup(Role.PARENT), make_identities())
    assert isinstance(db.add.call_args.args[0], Parent)


def test_echec_du_profil_compense_le_compte():
    db = MagicMock()
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("down"))
    user_id = uuid.uuid4()
    identities = make_identities(user_id)

    with pytest.raises(DependencyFailure):
        signup(db, make_signup(Role.TEACHER), identities)
    db.rollback.assert_called_once()
    identities.delete_identity.assert_called_once_with(user_id)


def test_connexion_compte_inactif():
    db = MagicMock()
    user = MagicMock()
    user.is_active = False
    db.execute.return_value.scalar.return_value = user

    with pytest.raises(Unauthenticated):
        login(db, LoginRequest(identifier="prof@example.com", password="secret1"))
    db.commit.assert_not_called()


def test_connexion_succes_met_a_jour_la_derniere_connexion():
    db = MagicMock()
    user = MagicMock()
    user.id = uuid.uuid4()
    user.email = "prof@example.com"
    user.name = "Prof"
    user.role = "TEACHER"
    user.is_active = True
    db.execute.return_value.scalar.return_value = user

    with patch("academy.services.auth_service.verify_password", return_value=True):
        result = login(db, LoginRequest(identifier="prof@example.com", password="secret1"))

    assert user.last_login is not None
    db.commit.assert_called_once()
    assert result.user.id == user.id
    assert result.access_token
