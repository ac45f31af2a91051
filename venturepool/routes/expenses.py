# venturepool/routes/expenses.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional

from venturepool.auth import get_current_user
from venturepool.database import get_db
from venturepool.models import models as db_models
from venturepool.routes.earnings import distributed_row
from venturepool.schemas import schemas
from venturepool.services.access import admin_user, get_business_or_404, require_business_manager
from venturepool.services.distribution import ShareDistributionService, EXPENSE
from venturepool.services.visibility import ViewerContext

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("/", response_model=List[schemas.ExpenseOut])
def get_expenses(
    business_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    query = db.query(db_models.Expense).options(
        joinedload(db_models.Expense.business),
        joinedload(db_models.Expense.recorder),
        joinedload(db_models.Expense.shares).joinedload(db_models.ExpenseShare.user)
    )
    if business_id:
        query = query.filter(db_models.Expense.business_id == business_id)
    viewer = ViewerContext.for_user(db, current_user)
    expenses = query.order_by(db_models.Expense.created_at.desc(), db_models.Expense.id.desc()).all()
    return [distributed_row(e, viewer) for e in expenses]


@router.post("/", response_model=schemas.ExpenseOut)
def create_expense(
    expense: schemas.ExpenseCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    """Enregistre une dépense et la répartit entre les investisseurs actuels"""
    business = get_business_or_404(db, expense.business_id, active_only=True)
    require_business_manager(db, current_user, business.id)
    record = ShareDistributionService(db).record_expense(
        business, expense.total_amount, current_user,
        description=expense.description, note=expense.note
    )
    return distributed_row(record, ViewerContext.for_user(db, current_user))


@router.delete("/{expense_id}")
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(admin_user)
):
    ShareDistributionService(db).delete(EXPENSE, expense_id, current_user)
    return {"success": True}
