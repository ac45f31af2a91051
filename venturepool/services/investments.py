# venturepool/services/investments.py

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from venturepool.errors import NotFoundError, ValidationError
from venturepool.models import models
from venturepool.services.access import get_business_or_404, get_user_or_404
from venturepool.services.audit import record_transaction
from venturepool.services.distribution import to_money

logger = logging.getLogger(__name__)


class InvestmentService:
    """
    Investissements et compteur Business.total_invested.
    Le compteur est modifié dans la même transaction que l'investissement.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int, business_id: int, amount: Decimal, note: str,
               recorded_by: models.User) -> models.Investment:
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("Le montant doit être positif", fields=["amount"])
        investor = get_user_or_404(self.db, user_id)
        business = get_business_or_404(self.db, business_id, active_only=True)

        try:
            investment = models.Investment(
                user_id=investor.id, business_id=business.id, amount=amount, note=note or ""
            )
            self.db.add(investment)
            business.total_invested = to_money(business.total_invested) + amount
            record_transaction(
                self.db, "investment",
                f"{investor.username} a investi {amount} dans {business.name}",
                amount=amount, business_id=business.id, user_id=investor.id
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(investment)
        logger.info(f"📈 {investor.username} investit {amount} dans {business.name} "
                    f"(saisi par {recorded_by.username})")
        return investment

    def delete(self, investment_id: int, deleted_by: models.User):
        """
        Supprime l'investissement et retire son montant du total du business,
        sans descendre sous 0. Les parts déjà calculées ne sont pas recalculées.
        """
        investment = self.db.get(models.Investment, investment_id)
        if not investment:
            raise NotFoundError("Investissement non trouvé")
        business = investment.business
        investor = investment.user
        amount = to_money(investment.amount)

        try:
            business.total_invested = max(to_money(business.total_invested) - amount, Decimal("0.00"))
            self.db.delete(investment)
            record_transaction(
                self.db, "investment_deleted",
                f"{investor.username}: investissement de {amount} dans {business.name} supprimé",
                amount=amount, business_id=business.id, user_id=investor.id
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"🗑️ Investissement {investment_id} supprimé par {deleted_by.username}")
