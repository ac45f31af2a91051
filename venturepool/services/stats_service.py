# venturepool/services/stats_service.py : vues agrégées du pool

from decimal import Decimal
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from venturepool.models import models
from venturepool.services.balance import BalanceService, BalanceFigures
from venturepool.services.distribution import to_money, HUNDRED
from venturepool.services.visibility import ViewerContext


class StatsService:
    """Statistiques du pool (masquées selon le lecteur) et statistiques personnelles"""

    def __init__(self, db: Session, viewer: ViewerContext):
        self.db = db
        self.viewer = viewer
        self.balances = BalanceService(db)

    def _active_businesses(self) -> Dict[int, models.Business]:
        return {
            b.id: b for b in self.db.query(models.Business).filter(models.Business.active.is_(True)).all()
        }

    def _usernames(self) -> Dict[int, str]:
        return dict(self.db.query(models.User.id, models.User.username).all())

    def get_pool_totals(self) -> Dict:
        row = self.db.query(
            func.coalesce(func.sum(models.Investment.amount), 0),
            func.count(func.distinct(models.Investment.user_id)),
            func.count(func.distinct(models.Investment.business_id))
        ).join(
            models.Business, models.Business.id == models.Investment.business_id
        ).filter(models.Business.active.is_(True)).one()
        return {
            "total_pool": to_money(row[0]),
            "total_investors": row[1],
            "total_businesses": row[2],
        }

    def get_monthly_revenue(self) -> Decimal:
        total = self.db.query(
            func.coalesce(func.sum(models.Business.monthly_revenue), 0)
        ).filter(models.Business.active.is_(True)).scalar()
        return to_money(total)

    def get_pool_flow(self, model) -> Decimal:
        """Somme des `total_amount` (gains ou dépenses) sur les business actifs"""
        total = self.db.query(
            func.coalesce(func.sum(model.total_amount), 0)
        ).join(
            models.Business, models.Business.id == model.business_id
        ).filter(models.Business.active.is_(True)).scalar()
        return to_money(total)

    def _position_row(self, position, business, business_total, username, display_name) -> Dict:
        figures = position.figures
        share_percent = (
            to_money(figures.invested / business_total * HUNDRED) if business_total > 0 else to_money(0)
        )
        return {
            "user_id": position.user_id,
            "username": display_name,
            "business_id": business.id,
            "business_name": business.name,
            "icon": business.icon,
            "business_total": business_total,
            "share_percent": share_percent,
            "monthly_estimate": to_money(share_percent / HUNDRED * to_money(business.monthly_revenue)),
            **figures.as_dict(),
        }

    def get_user_shares(self, user_id: int = None) -> List[Dict]:
        """Une ligne par (utilisateur, business actif) avec son solde"""
        businesses = self._active_businesses()
        business_totals = self.balances.business_totals()
        usernames = self._usernames()
        rows = []
        for position in self.balances.positions(user_id):
            business = businesses[position.business_id]
            username = usernames.get(position.user_id, "")
            rows.append(self._position_row(
                position, business, business_totals.get(business.id, to_money(0)), username,
                self.viewer.row_name(username, position.user_id, business.id)
            ))
        rows.sort(key=lambda r: (usernames.get(r["user_id"], ""), r["business_name"]))
        return rows

    def get_user_totals(self) -> List[Dict]:
        """Classement: tous les utilisateurs, cumul sur les business actifs"""
        totals = self.balances.user_totals()
        rows = []
        for user_id, username in self._usernames().items():
            figures = totals.get(user_id, BalanceFigures())
            rows.append({
                "user_id": user_id,
                "username": self.viewer.leaderboard_name(username, user_id),
                "total_invested": to_money(figures.invested),
                "total_earned": to_money(figures.earned),
                "total_expenses": to_money(figures.expenses),
                "total_withdrawn": to_money(figures.withdrawn),
                "available": figures.available,
            })
        rows.sort(key=lambda r: (-r["total_invested"], r["user_id"]))
        return rows

    def get_pool_stats(self) -> Dict:
        return {
            "totals": self.get_pool_totals(),
            "monthly_revenue": self.get_monthly_revenue(),
            "total_earnings": self.get_pool_flow(models.Earning),
            "total_expenses": self.get_pool_flow(models.Expense),
            "user_shares": self.get_user_shares(),
            "user_totals": self.get_user_totals(),
        }

    def get_my_stats(self, user: models.User) -> Dict:
        """Tout ce qui concerne l'utilisateur courant, sans masquage"""
        investments = self.db.query(models.Investment).filter(
            models.Investment.user_id == user.id
        ).order_by(models.Investment.created_at.desc()).all()
        earning_shares = self.db.query(models.EarningShare).filter(
            models.EarningShare.user_id == user.id
        ).order_by(models.EarningShare.created_at.desc()).all()
        expense_shares = self.db.query(models.ExpenseShare).filter(
            models.ExpenseShare.user_id == user.id
        ).order_by(models.ExpenseShare.created_at.desc()).all()
        withdrawals = self.db.query(models.Withdrawal).filter(
            models.Withdrawal.user_id == user.id
        ).order_by(models.Withdrawal.created_at.desc()).all()
        businesses = {b.id: b for b in self.db.query(models.Business).all()}

        return {
            "user": user,
            "investments": [
                {**_columns(i), "username": user.username,
                 "business_name": i.business.name, "business_icon": i.business.icon}
                for i in investments
            ],
            "earning_shares": [self._share_row(s, businesses) for s in earning_shares],
            "expense_shares": [self._share_row(s, businesses) for s in expense_shares],
            "withdrawals": [
                {**_columns(w), "username": user.username, "business_name": w.business.name}
                for w in withdrawals
            ],
            "balances": self.get_user_shares(user.id),
            "totals": self.balances.user_balance(user.id).as_dict(),
        }

    @staticmethod
    def _share_row(share, businesses) -> Dict:
        business = businesses.get(share.business_id)
        parent = share.earning if isinstance(share, models.EarningShare) else share.expense
        return {
            **_columns(share),
            "business_name": business.name if business else None,
            "business_icon": business.icon if business else None,
            "note": parent.note or "",
        }


def _columns(row) -> Dict:
    return {c.name: getattr(row, c.name) for c in row.__table__.columns}
