# venturepool/routes/withdrawals.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional

from venturepool.auth import get_current_user
from venturepool.database import get_db
from venturepool.models import models as db_models
from venturepool.schemas import schemas
from venturepool.services.access import require_business_manager
from venturepool.services.visibility import ViewerContext
from venturepool.services.withdrawals import WithdrawalService

router = APIRouter(prefix="/withdrawals", tags=["withdrawals"])


def withdrawal_row(withdrawal: db_models.Withdrawal, username: str) -> dict:
    return {
        "id": withdrawal.id,
        "user_id": withdrawal.user_id,
        "business_id": withdrawal.business_id,
        "amount": withdrawal.amount,
        "note": withdrawal.note,
        "recorded_by": withdrawal.recorded_by,
        "created_at": withdrawal.created_at,
        "username": username,
        "business_name": withdrawal.business.name,
    }


@router.get("/", response_model=List[schemas.WithdrawalOut])
def get_withdrawals(
    business_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    query = db.query(db_models.Withdrawal).options(
        joinedload(db_models.Withdrawal.user),
        joinedload(db_models.Withdrawal.business)
    )
    if business_id:
        query = query.filter(db_models.Withdrawal.business_id == business_id)
    viewer = ViewerContext.for_user(db, current_user)
    withdrawals = query.order_by(db_models.Withdrawal.created_at.desc(), db_models.Withdrawal.id.desc()).all()
    return [
        withdrawal_row(w, viewer.row_name(w.user.username, w.user_id, w.business_id))
        for w in withdrawals
    ]


@router.post("/", response_model=schemas.WithdrawalOut)
def create_withdrawal(
    withdrawal: schemas.WithdrawalCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    """Retrait sur le solde disponible du bénéficiaire dans ce business"""
    require_business_manager(db, current_user, withdrawal.business_id)
    new_withdrawal = WithdrawalService(db).create(
        withdrawal.user_id, withdrawal.business_id, withdrawal.amount, withdrawal.note, current_user
    )
    return withdrawal_row(new_withdrawal, new_withdrawal.user.username)


@router.delete("/{withdrawal_id}")
def delete_withdrawal(
    withdrawal_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    WithdrawalService(db).delete(withdrawal_id, current_user)
    return {"success": True}
