# venturepool/routes/investments.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional

from venturepool.auth import get_current_user
from venturepool.database import get_db
from venturepool.models import models as db_models
from venturepool.schemas import schemas
from venturepool.services.access import admin_user
from venturepool.services.investments import InvestmentService
from venturepool.services.visibility import ViewerContext

router = APIRouter(prefix="/investments", tags=["investments"])


def investment_row(investment: db_models.Investment, username: str) -> dict:
    return {
        "id": investment.id,
        "user_id": investment.user_id,
        "business_id": investment.business_id,
        "amount": investment.amount,
        "note": investment.note,
        "created_at": investment.created_at,
        "username": username,
        "business_name": investment.business.name,
        "business_icon": investment.business.icon,
    }


@router.get("/", response_model=List[schemas.InvestmentOut])
def get_investments(
    business_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    """Tous les investissements (filtrés par business si spécifié), noms masqués"""
    query = db.query(db_models.Investment).options(
        joinedload(db_models.Investment.user),
        joinedload(db_models.Investment.business)
    )
    if business_id:
        query = query.filter(db_models.Investment.business_id == business_id)
    viewer = ViewerContext.for_user(db, current_user)
    return [
        investment_row(i, viewer.row_name(i.user.username, i.user_id, i.business_id))
        for i in query.order_by(db_models.Investment.created_at.desc(), db_models.Investment.id.desc()).all()
    ]


@router.post("/", response_model=schemas.InvestmentOut)
def create_investment(
    investment: schemas.InvestmentCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(admin_user)
):
    new_investment = InvestmentService(db).create(
        investment.user_id, investment.business_id, investment.amount, investment.note, current_user
    )
    return investment_row(new_investment, new_investment.user.username)


@router.delete("/{investment_id}")
def delete_investment(
    investment_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(admin_user)
):
    InvestmentService(db).delete(investment_id, current_user)
    return {"success": True}
