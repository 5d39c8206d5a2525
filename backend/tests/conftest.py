"""
Configuration partagée pour tous les tests.
Override get_db (aucune connexion réelle à PostgreSQL) et la résolution du principal
(aucun jeton à forger : le rôle courant est choisi par le test via login_as).
"""

import uuid
from datetime import date

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from academy.auth.dependencies import resolve_principal
from academy.auth.principal import Principal
from academy.auth.roles import Role
from academy.database import get_db
from academy.main import app
from academy.schemas.student import StudentResponse


def _principal(role: Role, user_id=None, email=None, name="Utilisateur Test") -> Principal:
    return Principal(
        id=user_id or uuid.uuid4(),
        email=email or f"{role.value.lower()}@example.com",
        name=name,
        role=role,
    )


@pytest.fixture
def make_principal():
    """Fabrique de Principal pour les tests de services."""
    return _principal


def _student_response(**overrides) -> StudentResponse:
    data = dict(
        id=uuid.uuid4(),
        login_id="Kim56789",
        name="Kim",
        birth_date=date(2012, 3, 1),
        gender="MALE",
        phone="010-1234-56789",
        grade="중2",
        enrollment_status="ACTIVE",
        management_status="NORMAL",
    )
    data.update(overrides)
    return StudentResponse(**data)


@pytest.fixture
def make_student_response():
    """Fabrique de StudentResponse valide, pour remplacer _to_response dans les tests."""
    return _student_response


@pytest.fixture
def current_principal():
    """Principal résolu pour les requêtes du client (ADMIN par défaut, None = non authentifié)."""
    return {"value": _principal(Role.ADMIN)}


@pytest.fixture
def login_as(current_principal):
    def _login(role, **kwargs):
        current_principal["value"] = _principal(role, **kwargs) if role is not None else None
        return current_principal["value"]
    return _login


@pytest.fixture
def client(current_principal):
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[resolve_principal] = lambda: current_principal["value"]
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
