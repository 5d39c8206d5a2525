"""
Tests API pour les séances : planification, appel et supports.
"""

import uuid
from datetime import date
from unittest.mock import patch

from academy.auth.roles import Role
from academy.errors import Conflict, InvalidInput
from academy.schemas.attendance import AttendanceResponse
from academy.schemas.class_session import SessionMaterialResponse, SessionResponse

SESSION_ID = uuid.uuid4()
CLASS_ID = uuid.uuid4()
STUDENT_ID = uuid.uuid4()
MATERIAL_ID = uuid.uuid4()


def _session_response(**overrides) -> SessionResponse:
    data = dict(
        id=SESSION_ID,
        class_id=CLASS_ID,
        class_name="수학 A반",
        session_date=date(2026, 3, 2),
        start_time="16:00",
        end_time="18:00",
        location="201호",
        status="SCHEDULED",
        notes=None,
        created_by=uuid.uuid4(),
    )
    data.update(overrides)
    return SessionResponse(**data)


# ============================================================
# POST /api/v1/sessions
# ============================================================

def test_planifier_seance(client, login_as):
    login_as(Role.TEACHER)
    payload = {
        "class_id": str(CLASS_ID),
        "session_date": "2026-03-02",
        "start_time": "16:00",
        "end_time": "18:00",
    }
    with patch("academy.routers.sessions.session_service.create_session", return_value=_session_response()) as mock:
        response = client.post("/api/v1/sessions", json=payload)

    assert response.status_code == 201
    assert response.json()["class_name"] == "수학 A반"
    assert mock.call_args.args[1].start_time == "16:00"


def test_planifier_seance_fin_avant_debut(client, login_as):
    login_as(Role.TEACHER)
    payload = {
        "class_id": str(CLASS_ID),
        "session_date": "2026-03-02",
        "start_time": "18:00",
        "end_time": "16:00",
    }
    response = client.post("/api/v1/sessions", json=payload)
    assert response.status_code == 422


def test_planifier_seance_heure_invalide(client, login_as):
    login_as(Role.TEACHER)
    payload = {
        "class_id": str(CLASS_ID),
        "session_date": "2026-03-02",
        "start_time": "25:00",
        "end_time": "26:00",
    }
    response = client.post("/api/v1/sessions", json=payload)
    assert response.status_code == 422


def test_planifier_seance_assistant_interdit(client, login_as):
    login_as(Role.ASSISTANT)
    payload = {
        "class_id": str(CLASS_ID),
        "session_date": "2026-03-02",
        "start_time": "16:00",
        "end_time": "18:00",
    }
    response = client.post("/api/v1/sessions", json=payload)
    assert response.status_code == 403


def test_planifier_seance_classe_desactivee(client):
    payload = {
        "class_id": str(CLASS_ID),
        "session_date": "2026-03-02",
        "start_time": "16:00",
        "end_time": "18:00",
    }
    with patch(
        "academy.routers.sessions.session_service.create_session",
        side_effect=Conflict("Impossible de planifier une séance pour une classe désactivée."),
    ):
        response = client.post("/api/v1/sessions", json=payload)
    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


# ============================================================
# GET /api/v1/sessions
# ============================================================

def test_lister_seances_filtres(client, login_as):
    login_as(Role.STUDENT)
    with patch("academy.routers.sessions.session_service.get_sessions", return_value=[_session_response()]) as mock:
        response = client.get(f"/api/v1/sessions?class_id={CLASS_ID}&date_from=2026-03-01&status=SCHEDULED")

    assert response.status_code == 200
    assert len(response.json()) == 1
    kwargs = mock.call_args.kwargs
    assert kwargs["class_id"] == CLASS_ID
    assert kwargs["date_from"] == date(2026, 3, 1)
    assert kwargs["date_to"] is None
    assert kwargs["status"] == "SCHEDULED"


def test_lister_seances_non_authentifie(client, login_as):
    login_as(None)
    response = client.get("/api/v1/sessions")
    assert response.status_code == 401


def test_suppression_seance_enseignant_interdite(client, login_as):
    login_as(Role.TEACHER)
    response = client.delete(f"/api/v1/sessions/{SESSION_ID}")
    assert response.status_code == 403


# ============================================================
# POST /api/v1/sessions/{id}/attendance
# ============================================================

def test_appel_par_assistant(client, login_as):
    principal = login_as(Role.ASSISTANT)
    rows = [AttendanceResponse(
        id=uuid.uuid4(), session_id=SESSION_ID, student_id=STUDENT_ID,
        status="PRESENT", notes=None, checked_by=principal.id,
    )]
    payload = {"attendances": [{"student_id": str(STUDENT_ID), "status": "PRESENT"}]}
    with patch("academy.routers.sessions.attendance_service.record_attendance", return_value=rows) as mock:
        response = client.post(f"/api/v1/sessions/{SESSION_ID}/attendance", json=payload)

    assert response.status_code == 200
    assert response.json()[0]["status"] == "PRESENT"
    assert mock.call_args.args[3] == principal


def test_appel_liste_vide(client, login_as):
    login_as(Role.ASSISTANT)
    response = client.post(f"/api/v1/sessions/{SESSION_ID}/attendance", json={"attendances": []})
    assert response.status_code == 422


def test_appel_statut_inconnu(client, login_as):
    login_as(Role.ASSISTANT)
    payload = {"attendances": [{"student_id": str(STUDENT_ID), "status": "MAYBE"}]}
    response = client.post(f"/api/v1/sessions/{SESSION_ID}/attendance", json=payload)
    assert response.status_code == 422


def test_appel_eleve_non_inscrit(client, login_as):
    login_as(Role.TEACHER)
    payload = {"attendances": [{"student_id": str(STUDENT_ID), "status": "ABSENT"}]}
    with patch(
        "academy.routers.sessions.attendance_service.record_attendance",
        side_effect=InvalidInput("Élèves non inscrits dans la classe de cette séance."),
    ):
        response = client.post(f"/api/v1/sessions/{SESSION_ID}/attendance", json=payload)
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_appel_par_eleve_interdit(client, login_as):
    login_as(Role.STUDENT)
    payload = {"attendances": [{"student_id": str(STUDENT_ID), "status": "PRESENT"}]}
    response = client.post(f"/api/v1/sessions/{SESSION_ID}/attendance", json=payload)
    assert response.status_code == 403


# ============================================================
# Supports d'une séance
# ============================================================

def test_associer_support(client, login_as):
    login_as(Role.ASSISTANT)
    link = SessionMaterialResponse(session_id=SESSION_ID, material_id=MATERIAL_ID)
    with patch("academy.routers.sessions.session_service.add_material", return_value=link) as mock:
        response = client.post(f"/api/v1/sessions/{SESSION_ID}/materials", json={"material_id": str(MATERIAL_ID)})

    assert response.status_code == 201
    mock.assert_called_once()
    assert mock.call_args.args[1:] == (SESSION_ID, MATERIAL_ID)


def test_retirer_support(client):
    with patch("academy.routers.sessions.session_service.remove_material") as mock:
        response = client.delete(f"/api/v1/sessions/{SESSION_ID}/materials/{MATERIAL_ID}")
    assert response.status_code == 204
    mock.assert_called_once()
