# venturepool/config.py

import os
import logging
from dotenv import load_dotenv
from pathlib import Path

logger = logging.getLogger(__name__)

# Le .env est cherché à la racine du projet (à côté de pyproject.toml)
BASE_DIR = Path(__file__).parent.parent.absolute()
env_path = BASE_DIR / '.env'

if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    logger.info(f"✅ Fichier .env chargé depuis: {env_path}")
else:
    logger.debug(f"Pas de fichier .env à: {env_path}")

# ============================================
# CONFIGURATION ENVIRONNEMENT
# ============================================
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")


def is_production():
    """Vérifie si on est en production"""
    return ENVIRONMENT == "production"


# ============================================
# CONFIGURATION BASE DE DONNÉES
# ============================================
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    if is_production():
        raise ValueError("DATABASE_URL must be set in production")
    DATABASE_URL = "sqlite:///./venturepool.db"

# ============================================
# CONFIGURATION JWT / AUTH
# ============================================
SECRET_KEY = os.getenv("SECRET_KEY", "change_this_secret_key_in_production")
if SECRET_KEY == "change_this_secret_key_in_production" and is_production():
    raise ValueError("SECRET_KEY must be changed in production")

ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "10080"))  # 7 jours

# Secret à fournir à l'inscription pour obtenir le rôle admin
ADMIN_SECRET = os.getenv("ADMIN_SECRET", "admin123")

# Coût bcrypt (12 par défaut, les tests le baissent)
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# ============================================
# CONFIGURATION CORS (Frontend)
# ============================================
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

# ============================================
# LEDGER
# ============================================
TRANSACTIONS_LIMIT = int(os.getenv("TRANSACTIONS_LIMIT", "100"))
MASK_MIN_STARS = int(os.getenv("MASK_MIN_STARS", "3"))
DEFAULT_BUSINESS_ICON = os.getenv("DEFAULT_BUSINESS_ICON", "🏢")

ROLE_MEMBER = "member"
ROLE_ADMIN = "admin"

# ============================================
# LOGGING
# ============================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
