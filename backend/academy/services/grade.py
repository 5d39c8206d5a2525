"""
Calcul du niveau scolaire à partir de l'âge coréen.

Âge coréen = année de référence - année de naissance + 1 (le mois et le jour
sont ignorés volontairement). Le niveau n'est jamais stocké : il est recalculé
à chaque lecture pour rester juste au changement d'année.
"""

from datetime import date
from typing import Optional

UNDETERMINED_GRADE = "미정"

# (âge min, âge max, préfixe, décalage) : élémentaire, collège, lycée
_GRADE_BANDS = (
    (8, 13, "초", 7),
    (14, 16, "중", 13),
    (17, 19, "고", 16),
)


def korean_age(birth_date: date, as_of: Optional[date] = None) -> int:
    as_of = as_of or date.today()
    return as_of.year - birth_date.year + 1


def calculate_grade(birth_date: date, as_of: Optional[date] = None) -> str:
    age = korean_age(birth_date, as_of)
    for low, high, prefix, offset in _GRADE_BANDS:
        if low <= age <= high:
            return f"{prefix}{age - offset}"
    return UNDETERMINED_GRADE
