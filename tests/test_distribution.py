# venturepool/tests/test_distribution.py : répartition des gains et dépenses

from decimal import Decimal

import pytest

from venturepool.errors import NoInvestorsError
from venturepool.models import models
from venturepool.services import distribution
from venturepool.services.businesses import BusinessService
from venturepool.services.distribution import (
    ShareDistributionService, compute_shares, to_money, EARNING, EXPENSE
)
from venturepool.services.investments import InvestmentService


def D(value):
    return Decimal(value)


class TestComputeShares:
    def test_proportional_split(self):
        slices = compute_shares({1: D("1000"), 2: D("3000")}, D("400"))
        assert [(s.user_id, s.amount, s.share_percent) for s in slices] == [
            (1, D("100.00"), D("25.00")),
            (2, D("300.00"), D("75.00")),
        ]

    def test_single_investor_takes_everything(self):
        [only] = compute_shares({4: D("250")}, D("99.99"))
        assert only.share_percent == D("100.00")
        assert only.amount == D("99.99")

    def test_no_investment_yields_nothing(self):
        assert compute_shares({}, D("100")) == []

    def test_rounding_drift_is_bounded(self):
        invested = {1: D("100"), 2: D("100"), 3: D("100")}
        slices = compute_shares(invested, D("100"))
        assert all(s.amount == D("33.33") for s in slices)
        total = sum(s.amount for s in slices)
        percent = sum(s.share_percent for s in slices)
        assert abs(total - D("100")) <= D("0.01") * len(slices)
        assert abs(percent - D("100")) <= D("0.01") * len(slices)

    def test_half_up_rounding(self):
        # 1/8 de 0.20 = 0.025 -> 0.03
        slices = compute_shares({1: D("1"), 2: D("7")}, D("0.20"))
        assert slices[0].amount == D("0.03")
        assert slices[1].amount == D("0.18")
        assert to_money(D("2.675")) == D("2.68")

    def test_uneven_investments_sum_close_to_total(self):
        invested = {1: D("333.33"), 2: D("1234.56"), 3: D("0.01"), 4: D("999")}
        amount = D("1000.01")
        slices = compute_shares(invested, amount)
        assert abs(sum(s.amount for s in slices) - amount) <= D("0.01") * len(slices)
        assert abs(sum(s.share_percent for s in slices) - D("100")) <= D("0.01") * len(slices)


@pytest.fixture
def pool(db_session):
    """Admin, deux membres et un business financé 1000 / 3000"""
    admin = models.User(username="admin", password_hash="x", role="admin")
    alice = models.User(username="alice", password_hash="x")
    bob = models.User(username="bob", password_hash="x")
    db_session.add_all([admin, alice, bob])
    db_session.commit()
    business = BusinessService(db_session).create("Food Truck", admin)
    investments = InvestmentService(db_session)
    investments.create(alice.id, business.id, D("1000"), "", admin)
    investments.create(bob.id, business.id, D("3000"), "", admin)
    return db_session, admin, alice, bob, business


class TestShareDistributionService:
    def test_earning_creates_frozen_shares(self, pool):
        db, admin, alice, bob, business = pool
        earning = ShareDistributionService(db).record_earning(business, D("400"), admin)

        shares = {s.user_id: s for s in earning.shares}
        assert shares[alice.id].amount == D("100.00")
        assert shares[alice.id].share_percent == D("25.00")
        assert shares[bob.id].amount == D("300.00")
        assert shares[bob.id].share_percent == D("75.00")
        assert all(s.business_id == business.id for s in earning.shares)

    def test_expense_is_symmetric(self, pool):
        db, admin, alice, bob, business = pool
        expense = ShareDistributionService(db).record_expense(business, D("200"), admin, description="Essence")
        shares = {s.user_id: s.amount for s in expense.shares}
        assert shares == {alice.id: D("50.00"), bob.id: D("150.00")}
        assert expense.description == "Essence"

    def test_no_investors_creates_nothing(self, db_session):
        admin = models.User(username="admin", password_hash="x", role="admin")
        db_session.add(admin)
        db_session.commit()
        business = BusinessService(db_session).create("Vide", admin)

        service = ShareDistributionService(db_session)
        for kind in (EARNING, EXPENSE):
            with pytest.raises(NoInvestorsError):
                service.distribute(business, D("100"), kind, admin)

        assert db_session.query(models.Earning).count() == 0
        assert db_session.query(models.Expense).count() == 0
        assert db_session.query(models.EarningShare).count() == 0
        assert db_session.query(models.ExpenseShare).count() == 0

    def test_failure_mid_distribution_rolls_back_everything(self, pool, monkeypatch):
        db, admin, alice, bob, business = pool

        def broken_audit(*args, **kwargs):
            raise RuntimeError("store down")

        monkeypatch.setattr(distribution, "record_transaction", broken_audit)
        with pytest.raises(RuntimeError):
            ShareDistributionService(db).record_earning(business, D("400"), admin)

        assert db.query(models.Earning).count() == 0
        assert db.query(models.EarningShare).count() == 0

    def test_later_investment_does_not_change_past_shares(self, pool):
        db, admin, alice, bob, business = pool
        service = ShareDistributionService(db)
        first = service.record_earning(business, D("400"), admin)

        InvestmentService(db).create(alice.id, business.id, D("4000"), "", admin)
        second = service.record_earning(business, D("800"), admin)

        db.expire_all()
        first_shares = {s.user_id: s.amount for s in db.get(models.Earning, first.id).shares}
        second_shares = {s.user_id: s.amount for s in db.get(models.Earning, second.id).shares}
        assert first_shares == {alice.id: D("100.00"), bob.id: D("300.00")}
        # alice 5000 / 8000, bob 3000 / 8000
        assert second_shares == {alice.id: D("500.00"), bob.id: D("300.00")}

    def test_deleted_investment_keeps_historical_shares(self, pool):
        db, admin, alice, bob, business = pool
        earning = ShareDistributionService(db).record_earning(business, D("400"), admin)
        alice_investment = db.query(models.Investment).filter_by(user_id=alice.id).one()

        InvestmentService(db).delete(alice_investment.id, admin)

        db.expire_all()
        shares = {s.user_id: s.amount for s in db.get(models.Earning, earning.id).shares}
        assert shares == {alice.id: D("100.00"), bob.id: D("300.00")}

    def test_delete_removes_shares(self, pool):
        db, admin, alice, bob, business = pool
        service = ShareDistributionService(db)
        earning = service.record_earning(business, D("400"), admin)

        service.delete(EARNING, earning.id, admin)

        assert db.query(models.Earning).count() == 0
        assert db.query(models.EarningShare).count() == 0
        types = [t.type for t in db.query(models.Transaction).all()]
        assert "earning" in types and "earning_deleted" in types

    def test_audit_row_written(self, pool):
        db, admin, alice, bob, business = pool
        ShareDistributionService(db).record_earning(business, D("400"), admin)
        entry = db.query(models.Transaction).filter_by(type="earning").one()
        assert entry.amount == D("400.00")
        assert "Food Truck" in entry.description
        assert entry.business_id == business.id
