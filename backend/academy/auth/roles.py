"""
Hiérarchie des rôles.

Le rang est fixe par rôle : plus il est petit, plus le rôle est privilégié.
La table est immuable ; les vérifications passent toutes par rank(),
at_least_as_privileged() et is_any_of().
"""

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping


class Role(str, Enum):
    ADMIN = "ADMIN"
    SENIOR_TEACHER = "SENIOR_TEACHER"
    TEACHER = "TEACHER"
    ASSISTANT = "ASSISTANT"
    STUDENT = "STUDENT"
    PARENT = "PARENT"


ROLE_RANK: Mapping[Role, int] = MappingProxyType({
    Role.ADMIN: 0,
    Role.SENIOR_TEACHER: 1,
    Role.TEACHER: 2,
    Role.ASSISTANT: 3,
    Role.STUDENT: 4,
    Role.PARENT: 5,
})

# Ensembles nommés utilisés par les routers
MANAGERS = frozenset({Role.ADMIN, Role.SENIOR_TEACHER})
TEACHING_STAFF = frozenset({Role.ADMIN, Role.SENIOR_TEACHER, Role.TEACHER})
STAFF = frozenset({Role.ADMIN, Role.SENIOR_TEACHER, Role.TEACHER, Role.ASSISTANT})


def rank(role: Role) -> int:
    return ROLE_RANK[Role(role)]


def at_least_as_privileged(actual: Role, required: Role) -> bool:
    """Vrai si `actual` a un rang inférieur ou égal à `required`."""
    return rank(actual) <= rank(required)


def is_any_of(actual: Role, allowed: Iterable[Role]) -> bool:
    return Role(actual) in {Role(r) for r in allowed}
