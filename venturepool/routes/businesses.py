# venturepool/routes/businesses.py
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List

from venturepool.auth import get_current_user
from venturepool.database import get_db
from venturepool.models import models as db_models
from venturepool.schemas import schemas
from venturepool.services.access import admin_user, get_business_or_404, require_business_manager
from venturepool.services.businesses import BusinessService
from venturepool.services.distribution import to_money
from venturepool.services.visibility import ViewerContext

router = APIRouter(prefix="/businesses", tags=["businesses"])


def _sum_for_business(db: Session, model, business_id: int):
    return to_money(db.query(func.coalesce(func.sum(model.amount), 0)).filter(
        model.business_id == business_id
    ).scalar())


@router.get("/", response_model=List[schemas.BusinessWithTotals])
def get_businesses(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    """Business actifs, avec le total investi recalculé"""
    total = func.coalesce(func.sum(db_models.Investment.amount), 0)
    rows = db.query(
        db_models.Business,
        total.label("total_invested_real"),
        func.count(func.distinct(db_models.Investment.user_id)).label("investors_count")
    ).outerjoin(
        db_models.Investment, db_models.Investment.business_id == db_models.Business.id
    ).filter(
        db_models.Business.active.is_(True)
    ).group_by(db_models.Business.id).order_by(
        db_models.Business.created_at.desc(), db_models.Business.id.desc()
    ).all()
    return [
        {
            **schemas.BusinessOut.model_validate(business).model_dump(),
            "total_invested_real": to_money(real_total),
            "investors_count": investors,
        }
        for business, real_total, investors in rows
    ]


@router.get("/{business_id}", response_model=schemas.BusinessWithTotals)
def get_business_details(
    business_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    """Détails d'un business, actif ou non, avec ses totaux"""
    business = get_business_or_404(db, business_id)
    investors = db.query(func.count(func.distinct(db_models.Investment.user_id))).filter(
        db_models.Investment.business_id == business_id
    ).scalar()
    return {
        **schemas.BusinessOut.model_validate(business).model_dump(),
        "total_invested_real": _sum_for_business(db, db_models.Investment, business_id),
        "investors_count": investors or 0,
        "total_earned": _sum_for_business(db, db_models.EarningShare, business_id),
        "total_expenses": _sum_for_business(db, db_models.ExpenseShare, business_id),
        "total_withdrawn": _sum_for_business(db, db_models.Withdrawal, business_id),
    }


@router.post("/", response_model=schemas.BusinessOut)
def create_business(
    business: schemas.BusinessCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(admin_user)
):
    return BusinessService(db).create(
        business.name, current_user,
        description=business.description,
        icon=business.icon,
        monthly_revenue=business.monthly_revenue
    )


@router.put("/{business_id}", response_model=schemas.BusinessOut)
def update_business(
    business_id: int,
    changes: schemas.BusinessUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    get_business_or_404(db, business_id)
    require_business_manager(db, current_user, business_id)
    return BusinessService(db).update(business_id, changes.model_dump(exclude_unset=True), current_user)


@router.delete("/{business_id}")
def delete_business(
    business_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(admin_user)
):
    """Désactive le business (suppression logique)"""
    BusinessService(db).deactivate(business_id, current_user)
    return {"success": True}


# ---------- GÉRANTS ----------

@router.get("/{business_id}/managers", response_model=List[schemas.ManagerOut])
def get_managers(
    business_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    viewer = ViewerContext.for_user(db, current_user)
    return [
        {
            "business_id": grant.business_id,
            "user_id": grant.user_id,
            "username": viewer.row_name(grant.user.username, grant.user_id, grant.business_id),
            "created_at": grant.created_at,
        }
        for grant in BusinessService(db).managers(business_id)
    ]


@router.post("/{business_id}/managers", response_model=schemas.ManagerOut)
def add_manager(
    business_id: int,
    payload: schemas.ManagerCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(admin_user)
):
    grant = BusinessService(db).add_manager(business_id, payload.user_id, current_user)
    return {
        "business_id": grant.business_id,
        "user_id": grant.user_id,
        "username": grant.user.username,
        "created_at": grant.created_at,
    }


@router.delete("/{business_id}/managers/{user_id}")
def remove_manager(
    business_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(admin_user)
):
    BusinessService(db).remove_manager(business_id, user_id, current_user)
    return {"success": True}
