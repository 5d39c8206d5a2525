"""
Moteur SQLAlchemy, fabrique de sessions et dépendance FastAPI get_db.

Chaque requête HTTP reçoit sa propre session (get_db). Le provisioning des comptes
ouvre les siennes via SessionLocal pour valider l'identité indépendamment du profil.
"""

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from academy.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    echo=settings.SQL_ECHO,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
