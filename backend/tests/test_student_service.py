"""
Tests unitaires pour l'inscription des élèves (saga compte + fiche) et leur consultation.
"""

import logging
import uuid
from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from academy.auth.roles import Role
from academy.errors import DependencyFailure, DuplicateIdentifier, Forbidden, NotFound
from academy.models.student import Student
from academy.models.user import User
from academy.schemas.student import StudentCreate, StudentUpdate
from academy.services.student_service import (
    _visibility_conditions,
    attendance_rate,
    create_student,
    delete_student,
    get_student_detail,
    student_email,
    update_student,
)


# --- Helpers ---

def make_student_data(**overrides):
    data = {
        "name": "Kim",
        "birth_date": date(2012, 3, 1),
        "gender": "MALE",
        "phone": "010-1234-56789",
    }
    data.update(overrides)
    return StudentCreate(**data)


def make_db_mock(scalar_value=None, get_value=None):
    db = MagicMock()
    db.get.return_value = get_value
    db.execute.return_value.scalar.return_value = scalar_value
    db.execute.return_value.scalars.return_value.all.return_value = []
    return db


def make_identities(user_id=None):
    identities = MagicMock()
    identities.create_identity.return_value = user_id or uuid.uuid4()
    return identities


def added_students(db):
    return [c.args[0] for c in db.add.call_args_list if isinstance(c.args[0], Student)]


# --- Validation des schémas ---

def test_student_create_sexe_invalide():
    with pytest.raises(ValidationError):
        make_student_data(gender="X")


def test_student_create_nom_vide():
    with pytest.raises(ValidationError):
        make_student_data(name="  ")


def test_student_update_ne_touche_pas_au_statut_de_suivi():
    assert "management_status" not in StudentUpdate.model_fields


# --- create_student ---

def test_inscription_succes(make_student_response):
    db = make_db_mock()
    user_id = uuid.uuid4()
    identities = make_identities(user_id)

    with patch("academy.services.student_service._to_response", return_value=make_student_response()):
        result = create_student(db, make_student_data(), identities)

    identities.create_identity.assert_called_once_with(
        student_email("Kim56789"), "1203013", "Kim", Role.STUDENT,
    )
    students = added_students(db)
    assert len(students) == 1
    assert students[0].user_id == user_id
    assert students[0].login_id == "Kim56789"
    db.commit.assert_called_once()
    identities.delete_identity.assert_not_called()
    assert result.generated_login_id == "Kim56789"
    assert result.generated_password == "1203013"


def test_email_technique_eleve():
    assert student_email("Kim56789") == "Kim56789@student.local"


def test_identifiant_deja_pris():
    db = make_db_mock(scalar_value=uuid.uuid4())
    identities = make_identities()

    with pytest.raises(DuplicateIdentifier):
        create_student(db, make_student_data(), identities)
    identities.create_identity.assert_not_called()
    db.add.assert_not_called()


def test_tag_inconnu_detecte_avant_la_creation_du_compte():
    db = make_db_mock()
    identities = make_identities()

    with pytest.raises(NotFound):
        create_student(db, make_student_data(tag_ids=[uuid.uuid4()]), identities)
    identities.create_identity.assert_not_called()


def test_echec_du_compte_aucune_fiche():
    db = make_db_mock()
    identities = make_identities()
    identities.create_identity.side_effect = DuplicateIdentifier("déjà pris")

    with pytest.raises(DuplicateIdentifier):
        create_student(db, make_student_data(), identities)
    db.add.assert_not_called()
    db.commit.assert_not_called()


def test_echec_de_la_fiche_compense_le_compte():
    db = make_db_mock()
    user_id = uuid.uuid4()
    identities = make_identities(user_id)
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("connexion perdue"))

    with pytest.raises(DependencyFailure):
        create_student(db, make_student_data(), identities)
    db.rollback.assert_called_once()
    identities.delete_identity.assert_called_once_with(user_id)


def test_echec_de_la_compensation_journalise_et_propage(caplog):
    db = make_db_mock()
    user_id = uuid.uuid4()
    identities = make_identities(user_id)
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("connexion perdue"))
    identities.delete_identity.side_effect = DependencyFailure("fournisseur indisponible")

    with caplog.at_level(logging.ERROR, logger="academy.auth.provisioning"):
        with pytest.raises(DependencyFailure) as exc_info:
            create_student(db, make_student_data(), identities)

    assert exc_info.value.message == "Enregistrement de la fiche élève impossible."
    assert str(user_id) in caplog.text


# --- Consultation ---

def test_visibilite_personnel_enseignant_sans_restriction(make_principal):
    assert _visibility_conditions(make_principal(Role.TEACHER)) == []


@pytest.mark.parametrize("role", [Role.ASSISTANT, Role.STUDENT, Role.PARENT])
def test_visibilite_restreinte(make_principal, role):
    assert len(_visibility_conditions(make_principal(role))) == 1


def test_fiche_d_un_autre_eleve_interdite(make_principal):
    other = MagicMock()
    other.id = uuid.uuid4()
    other.user_id = uuid.uuid4()
    db = make_db_mock(get_value=other)

    with pytest.raises(Forbidden):
        get_student_detail(db, make_principal(Role.STUDENT), other.id)


def test_fiche_introuvable(make_principal):
    with pytest.raises(NotFound):
        get_student_detail(make_db_mock(), make_principal(Role.ADMIN), uuid.uuid4())


def test_taux_de_presence():
    assert attendance_rate(["PRESENT", "ABSENT", "PRESENT", "LATE"]) == 50.0
    assert attendance_rate(["PRESENT", "PRESENT", "ABSENT"]) == 66.7
    assert attendance_rate([]) == 0.0


# --- Mise à jour / suppression ---

def test_update_remplace_les_tags_dans_le_meme_commit():
    student = MagicMock()
    student.id = uuid.uuid4()
    db = make_db_mock(get_value=student)

    with patch("academy.services.student_service._to_response") as mock_resp, \
         patch("academy.services.student_service.replace_tags") as mock_replace:
        mock_resp.return_value = MagicMock()
        update_student(db, student.id, StudentUpdate(school="Lycée Hana", tag_ids=[]))

    assert student.school == "Lycée Hana"
    mock_replace.assert_called_once()
    db.commit.assert_called_once()


def test_delete_introuvable():
    with pytest.raises(NotFound):
        delete_student(make_db_mock(), uuid.uuid4())


def test_delete_supprime_aussi_le_compte():
    student = MagicMock()
    user = MagicMock()
    db = make_db_mock()
    db.get.side_effect = lambda model, _id: {Student: student, User: user}.get(model)

    delete_student(db, uuid.uuid4())

    assert [c.args[0] for c in db.delete.call_args_list] == [student, user]
    db.get.assert_any_call(User, student.user_id)
    db.commit.assert_called_once()


def test_delete_echec_du_commit_rollback():
    db = make_db_mock()
    db.get.side_effect = lambda model, _id: {Student: MagicMock(), User: MagicMock()}.get(model)
    db.commit.side_effect = OperationalError("DELETE", {}, Exception("connexion perdue"))

    with pytest.raises(OperationalError):
        delete_student(db, uuid.uuid4())
    db.rollback.assert_called_once()
