# venturepool/services/withdrawals.py

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from venturepool.errors import InsufficientBalanceError, NotFoundError, ValidationError
from venturepool.models import models
from venturepool.services.access import get_user_or_404, require_withdrawal_delete
from venturepool.services.audit import record_transaction
from venturepool.services.balance import BalanceService
from venturepool.services.distribution import to_money

logger = logging.getLogger(__name__)


class WithdrawalService:
    def __init__(self, db: Session):
        self.db = db
        self.balances = BalanceService(db)

    def create(self, user_id: int, business_id: int, amount: Decimal, note: str,
               recorded_by: models.User) -> models.Withdrawal:
        """
        Vérifie le solde puis insère, dans une seule transaction.
        La ligne du business est verrouillée (SELECT ... FOR UPDATE) pendant le
        contrôle: deux retraits concurrents sur ce business passent l'un après
        l'autre et le second voit le premier.
        """
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("Le montant doit être positif", fields=["amount"])
        recipient = get_user_or_404(self.db, user_id)

        try:
            business = self.db.query(models.Business).filter(
                models.Business.id == business_id,
                models.Business.active.is_(True)
            ).with_for_update().first()
            if not business:
                raise NotFoundError("Business non trouvé")

            available = self.balances.available_balance(recipient.id, business.id)
            if amount > available:
                logger.warning(
                    f"⚠️ Retrait refusé pour {recipient.username} sur {business.name}: "
                    f"{amount} > {available}"
                )
                raise InsufficientBalanceError(available, amount)

            withdrawal = models.Withdrawal(
                user_id=recipient.id, business_id=business.id, amount=amount,
                note=note or "", recorded_by=recorded_by.id
            )
            self.db.add(withdrawal)
            record_transaction(
                self.db, "withdrawal",
                f"{recipient.username} a retiré {amount} de {business.name}",
                amount=amount, business_id=business.id, user_id=recipient.id
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(withdrawal)
        logger.info(f"💸 Retrait de {amount} pour {recipient.username} sur {business.name}")
        return withdrawal

    def delete(self, withdrawal_id: int, deleted_by: models.User):
        withdrawal = self.db.get(models.Withdrawal, withdrawal_id)
        if not withdrawal:
            raise NotFoundError("Retrait non trouvé")
        require_withdrawal_delete(self.db, deleted_by, withdrawal)

        business = withdrawal.business
        recipient = withdrawal.user
        try:
            self.db.delete(withdrawal)
            record_transaction(
                self.db, "withdrawal_deleted",
                f"{recipient.username}: retrait de {withdrawal.amount} sur {business.name} annulé",
                amount=withdrawal.amount, business_id=business.id, user_id=recipient.id
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"🗑️ Retrait {withdrawal_id} supprimé par {deleted_by.username}")
