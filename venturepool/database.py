# venturepool/database.py

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from fastapi import Request
import logging

logger = logging.getLogger(__name__)

# Base pour créer les modèles (tables)
Base = declarative_base()


def make_engine(url: str) -> Engine:
    """
    Construit le moteur SQLAlchemy pour l'URL donnée.
    SQLite (dev/tests) n'accepte pas les options de pool.
    """
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=5,  # Nombre de connexions permanentes
        max_overflow=10,  # Connexions supplémentaires temporaires
        pool_pre_ping=True,  # Vérifie que la connexion est vivante avant utilisation
        echo=False
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency pour FastAPI
def get_db(request: Request):
    """
    Dépendance FastAPI pour obtenir une session de base de données.
    La fabrique de sessions est construite par create_app() et posée sur app.state.
    """
    db = request.app.state.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(engine: Engine):
    """Crée toutes les tables définies dans les modèles"""
    # Import pour enregistrer les modèles sur Base.metadata
    from venturepool.models import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("✅ Tables créées/vérifiées avec succès")


def check_connection(engine: Engine) -> bool:
    """Vérifie que la connexion à la base fonctionne"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"❌ Erreur de connexion: {e}")
        return False
