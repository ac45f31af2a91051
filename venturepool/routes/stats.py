# venturepool/routes/stats.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from venturepool.auth import get_current_user
from venturepool.database import get_db
from venturepool.models import models
from venturepool.schemas import schemas
from venturepool.services.stats_service import StatsService
from venturepool.services.visibility import ViewerContext

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/", response_model=schemas.PoolStats)
def get_pool_stats(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Totaux du pool, soldes utilisateur x business et classement"""
    service = StatsService(db, ViewerContext.for_user(db, current_user))
    return service.get_pool_stats()
