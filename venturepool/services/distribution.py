# venturepool/services/distribution.py : répartition des gains et dépenses entre investisseurs

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from venturepool.errors import NoInvestorsError, NotFoundError, ValidationError
from venturepool.models import models
from venturepool.services.audit import record_transaction

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

EARNING = "earning"
EXPENSE = "expense"

# type -> (modèle parent, modèle de part, colonne de rattachement)
KINDS = {
    EARNING: (models.Earning, models.EarningShare, "earning_id"),
    EXPENSE: (models.Expense, models.ExpenseShare, "expense_id"),
}


def to_money(value) -> Decimal:
    """Arrondi unique du ledger: demi vers le haut, 2 décimales"""
    if value is None:
        return Decimal("0.00")
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ShareSlice:
    user_id: int
    amount: Decimal
    share_percent: Decimal


def compute_shares(invested: Dict[int, Decimal], total_amount: Decimal) -> List[ShareSlice]:
    """
    Part de chaque investisseur dans `total_amount`, au prorata de `invested`.

    Chaque part est arrondie indépendamment (ROUND_HALF_UP, 2 décimales); la
    somme des parts peut donc s'écarter de `total_amount` d'au plus un centime
    par investisseur. Cet écart n'est pas corrigé.
    Renvoie une liste vide s'il n'y a rien d'investi.
    """
    business_total = sum(invested.values(), Decimal("0"))
    if business_total <= 0:
        return []
    total_amount = Decimal(total_amount)
    slices = []
    for user_id in sorted(invested):
        ratio = Decimal(invested[user_id]) / business_total
        slices.append(ShareSlice(
            user_id=user_id,
            amount=to_money(ratio * total_amount),
            share_percent=to_money(ratio * HUNDRED),
        ))
    return slices


class ShareDistributionService:
    """Enregistre un gain ou une dépense et le répartit en parts figées"""

    def __init__(self, db: Session):
        self.db = db

    def investor_totals(self, business_id: int) -> Dict[int, Decimal]:
        """Montant investi par utilisateur dans ce business, à l'instant présent"""
        rows = self.db.query(
            models.Investment.user_id,
            func.sum(models.Investment.amount).label('total')
        ).filter(
            models.Investment.business_id == business_id
        ).group_by(models.Investment.user_id).all()
        return {r[0]: to_money(r[1]) for r in rows if r[1] and r[1] > 0}

    def distribute(self, business: models.Business, total_amount: Decimal, kind: str,
                   recorded_by: models.User, note: str = "", description: str = ""):
        """
        Crée l'Earning/Expense et une part par investisseur, en une seule transaction.
        Lève NoInvestorsError (sans rien écrire) si le business n'a aucun investissement.
        """
        if kind not in KINDS:
            raise ValueError(f"Type de répartition inconnu: {kind}")
        total_amount = to_money(total_amount)
        if total_amount <= 0:
            raise ValidationError("Le montant doit être positif", fields=["total_amount"])

        slices = compute_shares(self.investor_totals(business.id), total_amount)
        if not slices:
            logger.warning(f"⚠️ Répartition refusée: aucun investisseur dans {business.name}")
            raise NoInvestorsError(business.name)

        parent_model, share_model, parent_fk = KINDS[kind]
        fields = dict(business_id=business.id, total_amount=total_amount,
                      note=note or "", recorded_by=recorded_by.id)
        if kind == EXPENSE:
            fields["description"] = description or ""

        try:
            parent = parent_model(**fields)
            self.db.add(parent)
            self.db.flush()  # id du parent pour les parts

            for s in slices:
                self.db.add(share_model(
                    **{parent_fk: parent.id},
                    user_id=s.user_id,
                    business_id=business.id,
                    amount=s.amount,
                    share_percent=s.share_percent
                ))

            record_transaction(
                self.db, kind, self._describe(kind, business, total_amount, len(slices), description),
                amount=total_amount, business_id=business.id, user_id=recorded_by.id
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(parent)
        logger.info(
            f"💰 {kind} de {total_amount} sur {business.name} réparti entre "
            f"{len(slices)} investisseur(s) par {recorded_by.username}"
        )
        return parent

    def record_earning(self, business, total_amount, recorded_by, note=""):
        return self.distribute(business, total_amount, EARNING, recorded_by, note=note)

    def record_expense(self, business, total_amount, recorded_by, description="", note=""):
        return self.distribute(business, total_amount, EXPENSE, recorded_by,
                               note=note, description=description)

    def delete(self, kind: str, record_id: int, deleted_by: models.User):
        """Suppression définitive du parent et de ses parts"""
        parent_model = KINDS[kind][0]
        parent = self.db.get(parent_model, record_id)
        if not parent:
            raise NotFoundError("Gain non trouvé" if kind == EARNING else "Dépense non trouvée")

        business = parent.business
        try:
            # Les parts partent avec le parent (cascade delete-orphan)
            self.db.delete(parent)
            record_transaction(
                self.db, f"{kind}_deleted",
                f"{'Gain' if kind == EARNING else 'Dépense'} de {parent.total_amount} "
                f"supprimé(e) sur \"{business.name}\"",
                amount=parent.total_amount, business_id=business.id, user_id=deleted_by.id
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"🗑️ {kind} {record_id} supprimé par {deleted_by.username}")

    @staticmethod
    def _describe(kind, business, total_amount, investors, description=""):
        if kind == EARNING:
            return f"Gain de {total_amount} sur \"{business.name}\" réparti entre {investors} investisseur(s)"
        label = f" ({description})" if description else ""
        return f"Dépense de {total_amount} sur \"{business.name}\"{label} répartie entre {investors} investisseur(s)"
