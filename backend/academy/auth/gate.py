"""
Contrôle d'accès : décide si un principal peut exécuter une opération.

Décision pure, sans effet de bord. Les échecs sont levés sous forme
d'Unauthenticated / Forbidden ; la traduction HTTP (401/403) est faite dans main.py.
"""

import uuid
from typing import Collection, Iterable, Optional

from academy.auth.principal import Principal
from academy.auth.roles import TEACHING_STAFF, STAFF, Role, at_least_as_privileged, is_any_of
from academy.errors import Forbidden, Unauthenticated


def authorize(
    principal: Optional[Principal],
    minimum: Optional[Role] = None,
    any_of: Optional[Iterable[Role]] = None,
) -> Principal:
    """
    Admet ou refuse le principal.

    - minimum : rang minimal requis (au moins aussi privilégié que ce rôle)
    - any_of  : ensemble explicite de rôles autorisés
    Sans exigence, seule l'authentification est vérifiée.
    """
    if principal is None:
        raise Unauthenticated("Authentification requise.")

    if minimum is not None and not at_least_as_privileged(principal.role, minimum):
        raise Forbidden("Droits insuffisants pour cette opération.")

    if any_of is not None and not is_any_of(principal.role, any_of):
        raise Forbidden("Droits insuffisants pour cette opération.")

    return principal


def ensure_can_view_student(
    principal: Principal,
    student_user_id: uuid.UUID,
    student_id: uuid.UUID,
    child_ids: Collection[uuid.UUID] = (),
) -> None:
    """
    Contrôle de propriété pour la lecture d'une fiche élève.
    Le personnel voit tout ; un élève ne voit que sa fiche ; un parent ne voit que ses enfants.
    """
    if is_any_of(principal.role, STAFF):
        return
    if principal.role == Role.STUDENT and student_user_id == principal.id:
        return
    if principal.role == Role.PARENT and student_id in child_ids:
        return
    raise Forbidden("Vous n'avez pas accès à cette fiche élève.")


def can_view_all_students(principal: Principal) -> bool:
    """Les rôles ADMIN, SENIOR_TEACHER et TEACHER listent tous les élèves sans restriction."""
    return is_any_of(principal.role, TEACHING_STAFF)
