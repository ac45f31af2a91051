# venturepool/routes/users.py

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List

from venturepool.auth import get_current_user
from venturepool.database import get_db
from venturepool.models import models as db_models
from venturepool.schemas.schemas import UserListItem
from venturepool.services.distribution import to_money
from venturepool.services.visibility import ViewerContext

router = APIRouter(prefix="/users", tags=["users"])


def list_users_with_totals(db: Session):
    """Utilisateurs et total investi, du plus gros investisseur au plus petit"""
    total = func.coalesce(func.sum(db_models.Investment.amount), 0)
    return db.query(db_models.User, total.label("total_invested")).outerjoin(
        db_models.Investment, db_models.Investment.user_id == db_models.User.id
    ).group_by(db_models.User.id).order_by(total.desc(), db_models.User.id).all()


@router.get("/", response_model=List[UserListItem])
def get_users(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    viewer = ViewerContext.for_user(db, current_user)
    return [
        {
            "id": user.id,
            "username": viewer.user_name(user.username, user.id),
            "role": user.role,
            "created_at": user.created_at,
            "total_invested": to_money(total),
        }
        for user, total in list_users_with_totals(db)
    ]
