# venturepool/routes/auth.py

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from venturepool import auth
from venturepool.config import ADMIN_SECRET, ROLE_ADMIN, ROLE_MEMBER
from venturepool.database import get_db
from venturepool.errors import AuthenticationError, ConflictError
from venturepool.models import models as db_models
from venturepool.schemas.schemas import UserCreate, LoginIn, AuthOut, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthOut)
def register(user: UserCreate, db: Session = Depends(get_db)):
    db_user = db.query(db_models.User).filter(db_models.User.username == user.username).first()
    if db_user:
        raise ConflictError("Nom d'utilisateur déjà utilisé")
    role = ROLE_ADMIN if user.admin_secret and user.admin_secret == ADMIN_SECRET else ROLE_MEMBER
    new_user = db_models.User(
        username=user.username,
        password_hash=auth.hash_password(user.password),
        role=role
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # Inscription concurrente avec le même nom
        db.rollback()
        raise ConflictError("Nom d'utilisateur déjà utilisé")
    db.refresh(new_user)
    logger.info(f"👤 Nouvel utilisateur {new_user.username} ({role})")
    return {"token": auth.create_access_token(new_user), "user": new_user}


@router.post("/login", response_model=AuthOut)
def login(credentials: LoginIn, db: Session = Depends(get_db)):
    db_user = db.query(db_models.User).filter(db_models.User.username == credentials.username).first()
    if not db_user or not auth.verify_password(credentials.password, db_user.password_hash):
        raise AuthenticationError("Identifiants invalides")
    return {"token": auth.create_access_token(db_user), "user": db_user}


@router.get("/me", response_model=UserOut)
def me(current_user: db_models.User = Depends(auth.get_current_user)):
    return current_user
