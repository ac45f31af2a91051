# venturepool/auth.py : mots de passe (bcrypt) et jetons de session (JWT)

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from venturepool.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, BCRYPT_ROUNDS
from venturepool.database import get_db
from venturepool.errors import AuthenticationError
from venturepool.models import models

# auto_error=False: le jeton manquant devient une AuthenticationError comme les autres
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Hash stocké illisible
        return False


def create_access_token(user: models.User, expires_delta: Optional[timedelta] = None) -> str:
    """Jeton porteur {id, username, role}, valable ACCESS_TOKEN_EXPIRE_MINUTES"""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": str(user.id),
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expirée")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Jeton invalide")


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> models.User:
    """Dépendance FastAPI: utilisateur authentifié par le jeton Bearer"""
    if not token:
        raise AuthenticationError("Jeton manquant")
    payload = decode_access_token(token)
    user_id = payload.get("id")
    user = db.get(models.User, user_id) if isinstance(user_id, int) else None
    if user is None:
        raise AuthenticationError("Utilisateur introuvable")
    return user
