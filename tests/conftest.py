# venturepool/tests/conftest.py : configuration pour les tests

import sys
import os
from pathlib import Path

# Ajoute le dossier parent au PYTHONPATH
BASE_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BASE_DIR))

# Avant tout import de venturepool: la config est lue à l'import
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("ADMIN_SECRET", "admin123")

import pytest
from api_helpers import engine, TestingSessionLocal
from venturepool.database import Base, create_tables


@pytest.fixture
def db_session():
    """Session sur une base vierge, pour tester les services sans HTTP"""
    create_tables(engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
