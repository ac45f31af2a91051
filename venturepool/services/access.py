# venturepool/services/access.py : contrôles de rôle et de gérance

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from venturepool.auth import get_current_user
from venturepool.config import ROLE_ADMIN
from venturepool.errors import AuthorizationError, NotFoundError
from venturepool.models import models

logger = logging.getLogger(__name__)


def is_admin(user: models.User) -> bool:
    return user.role == ROLE_ADMIN


def is_business_manager(db: Session, user_id: int, business_id: int) -> bool:
    return db.query(models.BusinessManager.id).filter(
        models.BusinessManager.business_id == business_id,
        models.BusinessManager.user_id == user_id
    ).first() is not None


def require_admin(user: models.User):
    if not is_admin(user):
        logger.warning(f"⛔ {user.username} a tenté une opération réservée aux admins")
        raise AuthorizationError("Réservé aux administrateurs")


def require_business_manager(db: Session, user: models.User, business_id: int):
    """Admin, ou gérant du business ciblé"""
    if is_admin(user):
        return
    if not is_business_manager(db, user.id, business_id):
        logger.warning(f"⛔ {user.username} n'est pas gérant du business {business_id}")
        raise AuthorizationError("Vous n'êtes pas gérant de ce business")


def require_withdrawal_delete(db: Session, user: models.User, withdrawal: models.Withdrawal):
    """Admin: tout retrait. Gérant: retraits de ses business. Membre: jamais."""
    if is_admin(user):
        return
    if not is_business_manager(db, user.id, withdrawal.business_id):
        logger.warning(f"⛔ {user.username} ne peut pas supprimer le retrait {withdrawal.id}")
        raise AuthorizationError("Vous n'êtes pas gérant du business de ce retrait")


def get_business_or_404(db: Session, business_id: int, active_only: bool = False) -> models.Business:
    query = db.query(models.Business).filter(models.Business.id == business_id)
    if active_only:
        query = query.filter(models.Business.active.is_(True))
    business = query.first()
    if not business:
        raise NotFoundError("Business non trouvé")
    return business


def get_user_or_404(db: Session, user_id: int) -> models.User:
    user = db.get(models.User, user_id)
    if not user:
        raise NotFoundError("Utilisateur non trouvé")
    return user


# Dépendance FastAPI pour les routes réservées aux admins
def admin_user(current_user: models.User = Depends(get_current_user)) -> models.User:
    require_admin(current_user)
    return current_user
