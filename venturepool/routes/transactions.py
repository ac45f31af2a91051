# venturepool/routes/transactions.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from venturepool.auth import get_current_user
from venturepool.config import TRANSACTIONS_LIMIT
from venturepool.database import get_db
from venturepool.models import models as db_models
from venturepool.schemas import schemas
from venturepool.services.audit import recent_transactions
from venturepool.services.visibility import ViewerContext, mask_subject

router = APIRouter(prefix="/transactions", tags=["transactions"])


def transaction_row(t: db_models.Transaction, viewer: ViewerContext) -> dict:
    username = None
    description = t.description
    if t.user:
        username = viewer.row_name(t.user.username, t.user_id, t.business_id)
        description = mask_subject(description, t.user.username, username)
    return {
        "id": t.id,
        "type": t.type,
        "amount": t.amount,
        "description": description,
        "created_at": t.created_at,
        "business_id": t.business_id,
        "user_id": t.user_id,
        "username": username,
        "business_name": t.business.name if t.business else None,
        "business_icon": t.business.icon if t.business else None,
    }


@router.get("/", response_model=List[schemas.TransactionOut])
def get_transactions(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    """Journal des opérations, les plus récentes d'abord"""
    viewer = ViewerContext.for_user(db, current_user)
    return [transaction_row(t, viewer) for t in recent_transactions(db, TRANSACTIONS_LIMIT)]
