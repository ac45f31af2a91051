# venturepool/services/balance.py : soldes disponibles recalculés à la lecture

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from venturepool.models import models
from venturepool.services.distribution import to_money, HUNDRED

ZERO = Decimal("0.00")


@dataclass
class BalanceFigures:
    """Gagné - part des dépenses - retiré, pour un utilisateur (et un business)"""
    invested: Decimal = ZERO
    earned: Decimal = ZERO
    expenses: Decimal = ZERO
    withdrawn: Decimal = ZERO

    @property
    def available(self) -> Decimal:
        return to_money(self.earned - self.expenses - self.withdrawn)

    @property
    def roi(self) -> Decimal:
        """Rendement: gagné / investi * 100, 0 sans investissement"""
        if self.invested <= 0:
            return ZERO
        return to_money(self.earned / self.invested * HUNDRED)

    def __add__(self, other: "BalanceFigures") -> "BalanceFigures":
        return BalanceFigures(
            invested=self.invested + other.invested,
            earned=self.earned + other.earned,
            expenses=self.expenses + other.expenses,
            withdrawn=self.withdrawn + other.withdrawn,
        )

    def as_dict(self) -> dict:
        return {
            "invested": to_money(self.invested),
            "earned": to_money(self.earned),
            "expenses": to_money(self.expenses),
            "withdrawn": to_money(self.withdrawn),
            "available": self.available,
            "roi": self.roi,
        }


@dataclass
class BusinessPosition:
    """Ligne utilisateur x business des vues agrégées"""
    user_id: int
    business_id: int
    figures: BalanceFigures = field(default_factory=BalanceFigures)


class BalanceService:
    """
    Agrège investissements, parts et retraits directement depuis les tables.
    Aucun solde courant n'est stocké: une part ou un retrait supprimé
    disparaît immédiatement des soldes.
    """

    # (attribut de BalanceFigures, modèle sommé)
    SOURCES = (
        ("invested", models.Investment),
        ("earned", models.EarningShare),
        ("expenses", models.ExpenseShare),
        ("withdrawn", models.Withdrawal),
    )

    def __init__(self, db: Session):
        self.db = db

    def _sum(self, model, user_id: int, business_id: Optional[int] = None) -> Decimal:
        query = self.db.query(
            func.coalesce(func.sum(model.amount), 0)
        ).filter(model.user_id == user_id)
        if business_id is not None:
            query = query.filter(model.business_id == business_id)
        return to_money(query.scalar())

    def user_business_balance(self, user_id: int, business_id: int) -> BalanceFigures:
        """Solde d'un utilisateur dans un business (actif ou non)"""
        return BalanceFigures(**{
            attr: self._sum(model, user_id, business_id) for attr, model in self.SOURCES
        })

    def available_balance(self, user_id: int, business_id: int) -> Decimal:
        figures = BalanceFigures(
            earned=self._sum(models.EarningShare, user_id, business_id),
            expenses=self._sum(models.ExpenseShare, user_id, business_id),
            withdrawn=self._sum(models.Withdrawal, user_id, business_id),
        )
        return figures.available

    def positions(self, user_id: Optional[int] = None) -> List[BusinessPosition]:
        """
        Soldes par (utilisateur, business) sur les business actifs,
        éventuellement restreints à un utilisateur.
        """
        by_key: Dict[Tuple[int, int], BusinessPosition] = {}
        for attr, model in self.SOURCES:
            query = self.db.query(
                model.user_id,
                model.business_id,
                func.sum(model.amount).label('total')
            ).join(
                models.Business, models.Business.id == model.business_id
            ).filter(
                models.Business.active.is_(True)
            )
            if user_id is not None:
                query = query.filter(model.user_id == user_id)
            for uid, bid, total in query.group_by(model.user_id, model.business_id).all():
                position = by_key.setdefault((uid, bid), BusinessPosition(uid, bid))
                setattr(position.figures, attr, to_money(total))
        return [by_key[k] for k in sorted(by_key)]

    def user_totals(self, user_id: Optional[int] = None) -> Dict[int, BalanceFigures]:
        """Soldes cumulés par utilisateur sur tous les business actifs"""
        totals: Dict[int, BalanceFigures] = {}
        for position in self.positions(user_id):
            totals[position.user_id] = totals.get(position.user_id, BalanceFigures()) + position.figures
        return totals

    def user_balance(self, user_id: int) -> BalanceFigures:
        return self.user_totals(user_id).get(user_id, BalanceFigures())

    def business_totals(self) -> Dict[int, Decimal]:
        """Total investi par business, recalculé (pas le compteur dénormalisé)"""
        rows = self.db.query(
            models.Investment.business_id,
            func.sum(models.Investment.amount)
        ).group_by(models.Investment.business_id).all()
        return {bid: to_money(total) for bid, total in rows}
