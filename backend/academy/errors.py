"""
Erreurs métier de l'application.

Les services lèvent ces exceptions ; main.py les traduit en réponses HTTP
via un exception handler unique (statut + code machine + détails).
"""

from typing import Any, Optional


class AcademyError(Exception):
    """Erreur métier de base."""
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class Unauthenticated(AcademyError):
    """Aucun utilisateur résolu pour la requête."""
    status_code = 401
    code = "UNAUTHENTICATED"


class Forbidden(AcademyError):
    """Utilisateur identifié mais rôle insuffisant."""
    status_code = 403
    code = "FORBIDDEN"


class InvalidInput(AcademyError):
    """Entrée manquante, mal formée ou contradictoire."""
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFound(AcademyError):
    status_code = 404
    code = "NOT_FOUND"


class Conflict(AcademyError):
    """Violation d'une règle métier (doublon, tag encore utilisé, ...)."""
    status_code = 409
    code = "CONFLICT"


class DuplicateIdentifier(Conflict):
    """Identifiant de connexion déjà attribué."""
    code = "DUPLICATE_IDENTIFIER"


class DependencyFailure(AcademyError):
    """Un collaborateur externe (provisioning, persistance) a échoué."""
    status_code = 502
    code = "DEPENDENCY_FAILURE"
