"""
Tests API pour la consultation des enseignants et les supports de cours.
"""

import uuid
from unittest.mock import patch

from academy.auth.roles import Role
from academy.errors import NotFound
from academy.schemas.teacher import TeacherResponse


# ============================================================
# GET /api/v1/teachers
# ============================================================

def test_liste_enseignants_filtre_role(client, login_as):
    login_as(Role.ASSISTANT)
    teacher = TeacherResponse(
        id=uuid.uuid4(), user_id=uuid.uuid4(), name="Park", email="park@example.com",
        role="SENIOR_TEACHER", main_class_count=3, assistant_class_count=0,
    )
    with patch("academy.routers.teachers.teacher_service.get_teachers", return_value=[teacher]) as mock:
        response = client.get("/api/v1/teachers?search=park&role=SENIOR_TEACHER")

    assert response.status_code == 200
    assert response.json()[0]["main_class_count"] == 3
    assert mock.call_args.kwargs == {"search": "park", "role": "SENIOR_TEACHER"}


def test_liste_enseignants_role_inconnu(client):
    response = client.get("/api/v1/teachers?role=DIRECTOR")
    assert response.status_code == 422


def test_liste_enseignants_non_authentifie(client, login_as):
    login_as(None)
    response = client.get("/api/v1/teachers")
    assert response.status_code == 401


# ============================================================
# /api/v1/materials
# ============================================================

def test_liste_supports_filtres(client, login_as):
    login_as(Role.STUDENT)
    session_id = uuid.uuid4()
    with patch("academy.routers.materials.material_service.get_materials", return_value=[]) as mock:
        response = client.get(f"/api/v1/materials?file_type=pdf&session_id={session_id}")

    assert response.status_code == 200
    assert mock.call_args.kwargs["file_type"] == "pdf"
    assert mock.call_args.kwargs["session_id"] == session_id
    assert mock.call_args.kwargs["search"] is None


def test_support_introuvable(client):
    with patch(
        "academy.routers.materials.material_service.get_material",
        side_effect=NotFound("Support introuvable."),
    ):
        response = client.get(f"/api/v1/materials/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_modifier_support_par_eleve_interdit(client, login_as):
    login_as(Role.STUDENT)
    response = client.put(f"/api/v1/materials/{uuid.uuid4()}", json={"title": "Nouveau titre"})
    assert response.status_code == 403
