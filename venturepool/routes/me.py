# venturepool/routes/me.py : vues limitées à l'utilisateur connecté

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from venturepool.auth import get_current_user
from venturepool.database import get_db
from venturepool.models import models
from venturepool.routes.users import list_users_with_totals
from venturepool.schemas import schemas
from venturepool.services.access import is_admin
from venturepool.services.distribution import to_money
from venturepool.services.stats_service import StatsService
from venturepool.services.visibility import ViewerContext

router = APIRouter(prefix="/me", tags=["me"])


@router.get("/users", response_model=List[schemas.UserListItem])
def get_visible_users(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Utilisateurs dont le nom réel est visible pour moi"""
    viewer = ViewerContext.for_user(db, current_user)
    return [
        {
            "id": user.id,
            "username": user.username,
            "role": user.role,
            "created_at": user.created_at,
            "total_invested": to_money(total),
        }
        for user, total in list_users_with_totals(db)
        if viewer.can_see_user(user.id)
    ]


@router.get("/businesses", response_model=List[schemas.BusinessOut])
def get_manageable_businesses(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Business actifs que je peux gérer (tous pour un admin)"""
    query = db.query(models.Business).filter(models.Business.active.is_(True))
    if not is_admin(current_user):
        query = query.join(
            models.BusinessManager, models.BusinessManager.business_id == models.Business.id
        ).filter(models.BusinessManager.user_id == current_user.id)
    return query.order_by(models.Business.name).all()


@router.get("/stats", response_model=schemas.MyStats)
def get_my_stats(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    service = StatsService(db, ViewerContext.for_user(db, current_user))
    return service.get_my_stats(current_user)
