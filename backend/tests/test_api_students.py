"""
Tests API pour les endpoints élèves : contrôle d'accès, codes HTTP, format des erreurs.
"""

import uuid
from datetime import date
from unittest.mock import patch

from academy.auth.roles import Role
from academy.errors import DependencyFailure, DuplicateIdentifier, InvalidInput
from academy.schemas.student import (
    Pagination,
    StatusChangeResponse,
    StatusLogResponse,
    StudentCreatedResponse,
    StudentListResponse,
    StudentResponse,
)

STUDENT_ID = uuid.uuid4()

VALID_PAYLOAD = {
    "name": "Kim",
    "birth_date": "2012-03-01",
    "gender": "MALE",
    "phone": "010-1234-56789",
}


def make_student_response(**overrides):
    data = dict(
        id=STUDENT_ID,
        login_id="Kim56789",
        name="Kim",
        birth_date=date(2012, 3, 1),
        gender="MALE",
        school=None,
        phone="010-1234-56789",
        grade="초6",
        enrollment_status="ENROLLED",
        management_status="NORMAL",
    )
    data.update(overrides)
    return StudentResponse(**data)


# ============================================================
# POST /api/v1/students
# ============================================================

def test_inscription_retourne_les_identifiants(client):
    created = StudentCreatedResponse(
        student=make_student_response(),
        generated_login_id="Kim56789",
        generated_password="1203013",
    )
    with patch("academy.routers.students.student_service.create_student", return_value=created):
        response = client.post("/api/v1/students", json=VALID_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["generated_login_id"] == "Kim56789"
    assert body["generated_password"] == "1203013"
    assert body["student"]["grade"] == "초6"


def test_inscription_non_authentifie(client, login_as):
    login_as(None)
    response = client.post("/api/v1/students", json=VALID_PAYLOAD)
    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHENTICATED"


def test_inscription_par_un_enseignant_interdite(client, login_as):
    login_as(Role.TEACHER)
    with patch("academy.routers.students.student_service.create_student") as mock_create:
        response = client.post("/api/v1/students", json=VALID_PAYLOAD)
    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"
    mock_create.assert_not_called()


def test_inscription_identifiant_duplique(client):
    with patch(
        "academy.routers.students.student_service.create_student",
        side_effect=DuplicateIdentifier("L'identifiant 'Kim56789' est déjà attribué."),
    ):
        response = client.post("/api/v1/students", json=VALID_PAYLOAD)
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_IDENTIFIER"


def test_inscription_echec_du_fournisseur(client):
    with patch(
        "academy.routers.students.student_service.create_student",
        side_effect=DependencyFailure("Enregistrement de la fiche élève impossible."),
    ):
        response = client.post("/api/v1/students", json=VALID_PAYLOAD)
    assert response.status_code == 502
    assert response.json()["code"] == "DEPENDENCY_FAILURE"


def test_inscription_champ_manquant(client):
    payload = {k: v for k, v in VALID_PAYLOAD.items() if k != "phone"}
    response = client.post("/api/v1/students", json=payload)
    assert response.status_code == 422


# ============================================================
# GET /api/v1/students
# ============================================================

def test_liste_transmet_filtres_et_pagination(client, login_as):
    principal = login_as(Role.PARENT)
    listing = StudentListResponse(
        students=[make_student_response()],
        pagination=Pagination(total=1, page=2, limit=5, has_next=False),
    )
    tag_id = uuid.uuid4()
    with patch("academy.routers.students.student_service.get_students", return_value=listing) as mock_list:
        response = client.get(f"/api/v1/students?search=Kim&status=ENROLLED&page=2&limit=5&tags={tag_id}")

    assert response.status_code == 200
    assert response.json()["pagination"]["page"] == 2
    args, kwargs = mock_list.call_args
    assert args[1] == principal
    assert kwargs["search"] == "Kim"
    assert kwargs["enrollment_status"] == "ENROLLED"
    assert kwargs["tag_ids"] == [tag_id]
    assert kwargs["limit"] == 5


def test_liste_limite_trop_grande(client):
    response = client.get("/api/v1/students?limit=1000")
    assert response.status_code == 422


# ============================================================
# DELETE /api/v1/students/{id}
# ============================================================

def test_suppression_reservee_a_l_admin(client, login_as):
    login_as(Role.SENIOR_TEACHER)
    response = client.delete(f"/api/v1/students/{STUDENT_ID}")
    assert response.status_code == 403


def test_suppression_admin(client):
    with patch("academy.routers.students.student_service.delete_student") as mock_delete:
        response = client.delete(f"/api/v1/students/{STUDENT_ID}")
    assert response.status_code == 204
    mock_delete.assert_called_once()


# ============================================================
# POST /api/v1/students/{id}/status
# ============================================================

def test_changement_de_statut(client, login_as):
    actor = login_as(Role.SENIOR_TEACHER)
    result = StatusChangeResponse(
        student=make_student_response(management_status="CAUTION"),
        status_log=StatusLogResponse(
            id=uuid.uuid4(),
            student_id=STUDENT_ID,
            previous_status="NORMAL",
            new_status="CAUTION",
            reason="Absences répétées",
            changed_by=actor.id,
        ),
    )
    with patch(
        "academy.routers.students.status_service.change_management_status", return_value=result,
    ) as mock_change:
        response = client.post(
            f"/api/v1/students/{STUDENT_ID}/status",
            json={"new_status": "CAUTION", "reason": "Absences répétées"},
        )

    assert response.status_code == 200
    assert response.json()["status_log"]["previous_status"] == "NORMAL"
    mock_change.assert_called_once()
    assert mock_change.call_args.args[1:] == (STUDENT_ID, "CAUTION", "Absences répétées", actor)


def test_changement_de_statut_identique(client):
    with patch(
        "academy.routers.students.status_service.change_management_status",
        side_effect=InvalidInput("L'élève est déjà au statut CAUTION."),
    ):
        response = client.post(
            f"/api/v1/students/{STUDENT_ID}/status",
            json={"new_status": "CAUTION", "reason": "Absences"},
        )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_changement_de_statut_assistant_interdit(client, login_as):
    login_as(Role.ASSISTANT)
    response = client.post(
        f"/api/v1/students/{STUDENT_ID}/status",
        json={"new_status": "CAUTION", "reason": "Absences"},
    )
    assert response.status_code == 403
