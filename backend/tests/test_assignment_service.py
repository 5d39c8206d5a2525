"""
Tests unitaires pour les devoirs : dépôt des rendus et notation.
"""

import uuid
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from academy.auth.roles import Role
from academy.errors import Forbidden, InvalidInput, NotFound
from academy.models.assignment import Assignment, Submission
from academy.models.class_session import ClassSession
from academy.models.school_class import ClassStudent
from academy.models.student import Student
from academy.schemas.assignment import AssignmentCreate, GradeRequest, SubmissionCreate
from academy.services.assignment_service import delete_assignment, grade, submit


# --- Helpers ---

def make_assignment_mock(max_score=20):
    a = MagicMock()
    a.id = uuid.uuid4()
    a.session_id = uuid.uuid4()
    a.max_score = max_score
    return a


def make_db_mock(get_map=None, scalar_value=0):
    get_map = get_map or {}
    db = MagicMock()
    db.get.side_effect = lambda model, _id: get_map.get(model)
    db.execute.return_value.scalar.return_value = scalar_value
    return db


# --- Validation des schémas ---

def test_assignment_create_note_max_nulle_rejetee():
    with pytest.raises(ValidationError):
        AssignmentCreate(session_id=uuid.uuid4(), title="Exercices", due_date=datetime(2025, 1, 10), max_score=0)


def test_grade_note_negative_rejetee():
    with pytest.raises(ValidationError):
        GradeRequest(score=-1)


# --- submit ---

def test_eleve_ne_rend_pas_pour_un_autre(make_principal):
    student = MagicMock()
    student.user_id = uuid.uuid4()
    db = make_db_mock({Assignment: make_assignment_mock(), Student: student})

    with pytest.raises(Forbidden):
        submit(db, uuid.uuid4(), SubmissionCreate(student_id=uuid.uuid4()), make_principal(Role.STUDENT))
    db.add.assert_not_called()


def test_eleve_non_inscrit_refuse(make_principal):
    principal = make_principal(Role.STUDENT)
    student = MagicMock()
    student.user_id = principal.id
    db = make_db_mock({Assignment: make_assignment_mock(), Student: student, ClassSession: MagicMock()})

    with pytest.raises(InvalidInput):
        submit(db, uuid.uuid4(), SubmissionCreate(student_id=uuid.uuid4()), principal)


def test_eleve_rend_son_devoir(make_principal):
    principal = make_principal(Role.STUDENT)
    student = MagicMock()
    student.id = uuid.uuid4()
    student.user_id = principal.id
    db = make_db_mock({
        Assignment: make_assignment_mock(),
        Student: student,
        ClassSession: MagicMock(),
        ClassStudent: MagicMock(),
    })

    with patch("academy.services.assignment_service.SubmissionResponse") as mock_resp:
        submit(db, uuid.uuid4(), SubmissionCreate(student_id=student.id, file_url="https://files/x.pdf"), principal)

    submission = db.add.call_args.args[0]
    assert isinstance(submission, Submission)
    assert submission.status == "SUBMITTED"
    assert submission.student_id == student.id
    db.commit.assert_called_once()
    mock_resp.model_validate.assert_called_once_with(submission)


# --- grade ---

def test_note_superieure_au_maximum(make_principal):
    assignment = make_assignment_mock(max_score=20)
    submission = MagicMock()
    submission.assignment_id = assignment.id
    db = make_db_mock({Assignment: assignment, Submission: submission})

    with pytest.raises(InvalidInput):
        grade(db, assignment.id, uuid.uuid4(), GradeRequest(score=21), make_principal(Role.TEACHER))
    db.commit.assert_not_called()


def test_rendu_d_un_autre_devoir(make_principal):
    assignment = make_assignment_mock()
    submission = MagicMock()
    submission.assignment_id = uuid.uuid4()
    db = make_db_mock({Assignment: assignment, Submission: submission})

    with pytest.raises(NotFound):
        grade(db, assignment.id, uuid.uuid4(), GradeRequest(score=10), make_principal(Role.TEACHER))


def test_notation(make_principal):
    assignment = make_assignment_mock(max_score=20)
    submission = MagicMock()
    submission.assignment_id = assignment.id
    teacher = MagicMock()
    db = make_db_mock({Assignment: assignment, Submission: submission})
    db.execute.return_value.scalar.return_value = teacher  # profil enseignant

    with patch("academy.services.assignment_service.SubmissionResponse"):
        grade(db, assignment.id, uuid.uuid4(), GradeRequest(score=20, feedback="Très bien"), make_principal(Role.TEACHER))

    assert submission.status == "GRADED"
    assert submission.score == 20
    assert submission.graded_by == teacher.id
    db.commit.assert_called_once()


# --- delete_assignment ---

def test_suppression_compte_les_rendus():
    assignment = make_assignment_mock()
    db = make_db_mock({Assignment: assignment}, scalar_value=4)

    result = delete_assignment(db, assignment.id)

    assert result.removed_submissions == 4
    db.delete.assert_called_once_with(assignment)
