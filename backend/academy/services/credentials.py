"""
Génération des identifiants de connexion d'un élève.

- identifiant : nom + 5 derniers chiffres du téléphone (non-chiffres retirés)
- mot de passe initial : AAMMJJ de la date de naissance + code sexe (3 = garçon, 4 = fille)

Fonction déterministe, sans I/O. Les collisions d'identifiant sont détectées
par l'appelant (student_service) avant toute création de compte.
"""

import re
from dataclasses import dataclass
from datetime import date

from academy.errors import InvalidInput

PHONE_SUFFIX_LENGTH = 5
GENDER_CODES = {"MALE": "3", "FEMALE": "4"}

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class StudentCredentials:
    login_id: str
    initial_password: str


def phone_suffix(phone: str) -> str:
    """Retourne les 5 derniers chiffres du téléphone ; refuse un numéro trop court."""
    digits = _NON_DIGITS.sub("", phone or "")
    if len(digits) < PHONE_SUFFIX_LENGTH:
        raise InvalidInput(
            f"Le numéro de téléphone doit contenir au moins {PHONE_SUFFIX_LENGTH} chiffres."
        )
    return digits[-PHONE_SUFFIX_LENGTH:]


def generate_student_credentials(name: str, phone: str, birth_date: date, gender: str) -> StudentCredentials:
    if gender not in GENDER_CODES:
        raise InvalidInput(f"Sexe invalide. Valeurs acceptées : {set(GENDER_CODES)}")

    login_id = f"{name}{phone_suffix(phone)}"
    initial_password = f"{birth_date:%y%m%d}{GENDER_CODES[gender]}"
    return StudentCredentials(login_id=login_id, initial_password=initial_password)
