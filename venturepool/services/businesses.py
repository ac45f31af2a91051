# venturepool/services/businesses.py : business et gérants

import logging

from sqlalchemy.orm import Session

from venturepool.config import DEFAULT_BUSINESS_ICON
from venturepool.errors import ConflictError, NotFoundError
from venturepool.models import models
from venturepool.services.access import get_business_or_404, get_user_or_404
from venturepool.services.audit import record_transaction
from venturepool.services.distribution import to_money

logger = logging.getLogger(__name__)


class BusinessService:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def create(self, name: str, created_by: models.User, description: str = "",
               icon: str = None, monthly_revenue=0) -> models.Business:
        business = models.Business(
            name=name,
            description=description or "",
            icon=icon or DEFAULT_BUSINESS_ICON,
            monthly_revenue=to_money(monthly_revenue),
            total_invested=to_money(0),
        )
        self.db.add(business)
        self.db.flush()
        record_transaction(self.db, "business_created", f"Business \"{name}\" créé",
                           business_id=business.id, user_id=created_by.id)
        self._commit()
        self.db.refresh(business)
        logger.info(f"🏢 Business {name} créé par {created_by.username}")
        return business

    def update(self, business_id: int, changes: dict, updated_by: models.User) -> models.Business:
        """Mise à jour partielle: seuls les champs fournis sont modifiés"""
        business = get_business_or_404(self.db, business_id)
        for key in ("name", "description", "icon"):
            if changes.get(key) is not None:
                setattr(business, key, changes[key])
        if changes.get("monthly_revenue") is not None:
            business.monthly_revenue = to_money(changes["monthly_revenue"])
        record_transaction(self.db, "business_updated", f"Business \"{business.name}\" modifié",
                           business_id=business.id, user_id=updated_by.id)
        self._commit()
        self.db.refresh(business)
        return business

    def deactivate(self, business_id: int, deactivated_by: models.User):
        """Suppression logique: l'historique reste interrogeable"""
        business = get_business_or_404(self.db, business_id)
        business.active = False
        record_transaction(self.db, "business_deactivated", f"Business \"{business.name}\" désactivé",
                           business_id=business.id, user_id=deactivated_by.id)
        self._commit()
        logger.info(f"🏢 Business {business.name} désactivé par {deactivated_by.username}")

    # --- gérants ---

    def managers(self, business_id: int):
        get_business_or_404(self.db, business_id)
        return self.db.query(models.BusinessManager).filter(
            models.BusinessManager.business_id == business_id
        ).order_by(models.BusinessManager.created_at).all()

    def add_manager(self, business_id: int, user_id: int, granted_by: models.User) -> models.BusinessManager:
        business = get_business_or_404(self.db, business_id)
        user = get_user_or_404(self.db, user_id)
        exists = self.db.query(models.BusinessManager).filter(
            models.BusinessManager.business_id == business.id,
            models.BusinessManager.user_id == user.id
        ).first()
        if exists:
            raise ConflictError(f"{user.username} gère déjà {business.name}")

        grant = models.BusinessManager(business_id=business.id, user_id=user.id)
        self.db.add(grant)
        record_transaction(self.db, "manager_added", f"{user.username} devient gérant de {business.name}",
                           business_id=business.id, user_id=user.id)
        self._commit()
        self.db.refresh(grant)
        logger.info(f"🔑 {user.username} gérant de {business.name} (par {granted_by.username})")
        return grant

    def remove_manager(self, business_id: int, user_id: int, revoked_by: models.User):
        grant = self.db.query(models.BusinessManager).filter(
            models.BusinessManager.business_id == business_id,
            models.BusinessManager.user_id == user_id
        ).first()
        if not grant:
            raise NotFoundError("Gérant non trouvé pour ce business")
        username, business_name = grant.user.username, grant.business.name
        self.db.delete(grant)
        record_transaction(self.db, "manager_removed", f"{username} n'est plus gérant de {business_name}",
                           business_id=business_id, user_id=user_id)
        self._commit()
        logger.info(f"🔑 {username} retiré de {business_name} par {revoked_by.username}")
