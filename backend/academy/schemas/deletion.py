"""
Résultat d'une suppression soumise à la politique « supprimer ou désactiver ».
"""

import uuid

from pydantic import BaseModel


class DeletionResult(BaseModel):
    id: uuid.UUID
    deleted: bool        # True : suppression définitive
    deactivated: bool    # True : désactivation à la place de la suppression
    dependents: int      # nombre d'enregistrements dépendants constatés
    message: str
