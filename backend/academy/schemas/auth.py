"""
Schémas Pydantic pour l'authentification et la gestion des comptes.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from academy.auth.roles import Role

MIN_PASSWORD_LENGTH = 6


class LoginRequest(BaseModel):
    """`identifier` : e-mail, ou identifiant élève (ex: Kim56789)."""
    identifier: str
    password: str

    @field_validator("identifier", "password")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("L'identifiant et le mot de passe sont obligatoires.")
        return v.strip()


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    role: Role

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class SignupRequest(BaseModel):
    """Création d'un compte personnel ou parent (les élèves passent par POST /students)."""
    email: EmailStr
    password: str
    name: str
    role: Role
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom ne peut pas être vide.")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères.")
        return v

    @field_validator("role")
    @classmethod
    def not_student(cls, v: Role) -> Role:
        if v == Role.STUDENT:
            raise ValueError("Les comptes élèves sont créés via l'inscription d'un élève.")
        return v


class ResetPasswordRequest(BaseModel):
    email: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères.")
        return v


class ResetPasswordResponse(BaseModel):
    user_id: uuid.UUID
    email: str
    message: str
