"""
Configuration de la base de données avec SQLModel
"""
from sqlmodel import create_engine, SQLModel, Session
from app.core.settings import get_settings

settings = get_settings()


def _connect_args(database_url: str, statement_timeout_ms: int) -> dict:
    """Borne la durée des requêtes au niveau du driver."""
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": statement_timeout_ms / 1000}
    if database_url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={statement_timeout_ms}"}
    return {}


# Créer l'engine de base de données
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.DATABASE_URL, settings.DB_STATEMENT_TIMEOUT_MS),
)


def create_db_and_tables():
    """Créer toutes les tables de la base de données"""
    # Enregistre les tables dans SQLModel.metadata
    import app.domain.entities  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Générateur de session de base de données pour l'injection de dépendance"""
    with Session(engine) as session:
        yield session
