# venturepool/schemas/schemas.py

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Optional, List, Annotated
from datetime import datetime
from decimal import Decimal

# Montants strictement positifs, 2 décimales
PositiveMoney = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class TimestampedOut(ORMModel):
    created_at: datetime

    @field_serializer('created_at')
    def serialize_datetime(self, value: datetime) -> str:
        """Sérialise un datetime en chaîne ISO 8601 pour JSON."""
        return value.isoformat()


# ---------- AUTH / USER SCHEMAS ----------
class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1)
    admin_secret: Optional[str] = None


class LoginIn(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserOut(TimestampedOut):
    id: int
    username: str
    role: str


class AuthOut(BaseModel):
    token: str
    user: UserOut


class UserListItem(TimestampedOut):
    id: int
    username: str
    role: str
    total_invested: Decimal


# ---------- BUSINESS SCHEMAS ----------
class BusinessCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = ""
    icon: Optional[str] = None
    monthly_revenue: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)


class BusinessUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = None
    monthly_revenue: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)


class BusinessOut(TimestampedOut):
    id: int
    name: str
    description: Optional[str] = ""
    icon: Optional[str] = None
    monthly_revenue: Decimal
    total_invested: Decimal
    active: bool


class BusinessWithTotals(BusinessOut):
    total_invested_real: Decimal
    investors_count: int = 0
    total_earned: Decimal = Decimal("0.00")
    total_expenses: Decimal = Decimal("0.00")
    total_withdrawn: Decimal = Decimal("0.00")


# ---------- MANAGER SCHEMAS ----------
class ManagerCreate(BaseModel):
    user_id: int


class ManagerOut(TimestampedOut):
    business_id: int
    user_id: int
    username: str


# ---------- INVESTMENT SCHEMAS ----------
class InvestmentCreate(BaseModel):
    user_id: int
    business_id: int
    amount: PositiveMoney
    note: Optional[str] = ""


class InvestmentOut(TimestampedOut):
    id: int
    user_id: int
    business_id: int
    amount: Decimal
    note: Optional[str] = ""
    username: Optional[str] = None
    business_name: Optional[str] = None
    business_icon: Optional[str] = None


# ---------- EARNING / EXPENSE SCHEMAS ----------
class EarningCreate(BaseModel):
    business_id: int
    total_amount: PositiveMoney
    note: Optional[str] = ""


class ExpenseCreate(BaseModel):
    business_id: int
    total_amount: PositiveMoney
    description: Optional[str] = ""
    note: Optional[str] = ""


class ShareOut(ORMModel):
    user_id: int
    username: Optional[str] = None
    amount: Decimal
    share_percent: Decimal


class EarningOut(TimestampedOut):
    id: int
    business_id: int
    business_name: Optional[str] = None
    total_amount: Decimal
    note: Optional[str] = ""
    recorded_by: Optional[int] = None
    recorded_by_name: Optional[str] = None
    shares: List[ShareOut] = []


class ExpenseOut(EarningOut):
    description: Optional[str] = ""


# ---------- WITHDRAWAL SCHEMAS ----------
class WithdrawalCreate(BaseModel):
    user_id: int
    business_id: int
    amount: PositiveMoney
    note: Optional[str] = ""


class WithdrawalOut(TimestampedOut):
    id: int
    user_id: int
    business_id: int
    amount: Decimal
    note: Optional[str] = ""
    recorded_by: Optional[int] = None
    username: Optional[str] = None
    business_name: Optional[str] = None


# ---------- TRANSACTION (AUDIT) SCHEMAS ----------
class TransactionOut(TimestampedOut):
    id: int
    type: str
    amount: Decimal
    description: Optional[str] = None
    business_id: Optional[int] = None
    user_id: Optional[int] = None
    username: Optional[str] = None
    business_name: Optional[str] = None
    business_icon: Optional[str] = None


# ---------- STATS SCHEMAS ----------
class BalanceOut(BaseModel):
    invested: Decimal
    earned: Decimal
    expenses: Decimal
    withdrawn: Decimal
    available: Decimal
    roi: Decimal


class UserBusinessBalance(BalanceOut):
    user_id: int
    username: str
    business_id: int
    business_name: str
    icon: Optional[str] = None
    business_total: Decimal
    share_percent: Decimal
    monthly_estimate: Decimal


class UserTotals(BaseModel):
    user_id: int
    username: str
    total_invested: Decimal
    total_earned: Decimal
    total_expenses: Decimal
    total_withdrawn: Decimal
    available: Decimal


class PoolTotals(BaseModel):
    total_pool: Decimal
    total_investors: int
    total_businesses: int


class PoolStats(BaseModel):
    totals: PoolTotals
    monthly_revenue: Decimal
    total_earnings: Decimal
    total_expenses: Decimal
    user_shares: List[UserBusinessBalance]
    user_totals: List[UserTotals]


class MyShareOut(TimestampedOut):
    id: int
    business_id: int
    business_name: Optional[str] = None
    business_icon: Optional[str] = None
    earning_id: Optional[int] = None
    expense_id: Optional[int] = None
    amount: Decimal
    share_percent: Decimal
    note: str = ""


class MyStats(BaseModel):
    user: UserOut
    investments: List[InvestmentOut]
    earning_shares: List[MyShareOut]
    expense_shares: List[MyShareOut]
    withdrawals: List[WithdrawalOut]
    balances: List[UserBusinessBalance]
    totals: BalanceOut
