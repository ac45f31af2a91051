# venturepool/routes/earnings.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional

from venturepool.auth import get_current_user
from venturepool.database import get_db
from venturepool.models import models as db_models
from venturepool.schemas import schemas
from venturepool.services.access import admin_user, get_business_or_404, require_business_manager
from venturepool.services.distribution import ShareDistributionService, EARNING
from venturepool.services.visibility import ViewerContext

router = APIRouter(prefix="/earnings", tags=["earnings"])


def distributed_row(record, viewer: ViewerContext) -> dict:
    """Gain ou dépense avec ses parts; auteur et investisseurs masqués séparément"""
    recorder = record.recorder
    row = {
        "id": record.id,
        "business_id": record.business_id,
        "business_name": record.business.name,
        "total_amount": record.total_amount,
        "note": record.note,
        "created_at": record.created_at,
        "recorded_by": record.recorded_by,
        "recorded_by_name": viewer.recorder_name(
            recorder.username if recorder else None, record.recorded_by, record.business_id
        ),
        "shares": [
            {
                "user_id": share.user_id,
                "username": viewer.row_name(share.user.username, share.user_id, share.business_id),
                "amount": share.amount,
                "share_percent": share.share_percent,
            }
            for share in sorted(record.shares, key=lambda s: s.user_id)
        ],
    }
    if hasattr(record, "description"):
        row["description"] = record.description
    return row


@router.get("/", response_model=List[schemas.EarningOut])
def get_earnings(
    business_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    query = db.query(db_models.Earning).options(
        joinedload(db_models.Earning.business),
        joinedload(db_models.Earning.recorder),
        joinedload(db_models.Earning.shares).joinedload(db_models.EarningShare.user)
    )
    if business_id:
        query = query.filter(db_models.Earning.business_id == business_id)
    viewer = ViewerContext.for_user(db, current_user)
    earnings = query.order_by(db_models.Earning.created_at.desc(), db_models.Earning.id.desc()).all()
    return [distributed_row(e, viewer) for e in earnings]


@router.post("/", response_model=schemas.EarningOut)
def create_earning(
    earning: schemas.EarningCreate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(get_current_user)
):
    """Enregistre un gain et le répartit entre les investisseurs actuels"""
    business = get_business_or_404(db, earning.business_id, active_only=True)
    require_business_manager(db, current_user, business.id)
    record = ShareDistributionService(db).record_earning(
        business, earning.total_amount, current_user, note=earning.note
    )
    return distributed_row(record, ViewerContext.for_user(db, current_user))


@router.delete("/{earning_id}")
def delete_earning(
    earning_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(admin_user)
):
    ShareDistributionService(db).delete(EARNING, earning_id, current_user)
    return {"success": True}
