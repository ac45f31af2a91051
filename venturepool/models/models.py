# venturepool/models/models.py

from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Boolean, ForeignKey, DateTime, UniqueConstraint
)
from sqlalchemy.orm import relationship
from datetime import datetime
from venturepool.database import Base
from venturepool.config import ROLE_MEMBER, DEFAULT_BUSINESS_ICON

# Montants: 2 décimales, pourcentages: 2 décimales
Money = Numeric(12, 2)
Percent = Numeric(6, 2)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String(10), default=ROLE_MEMBER, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    investments = relationship("Investment", back_populates="user", cascade="all, delete-orphan")
    managed = relationship("BusinessManager", back_populates="user", cascade="all, delete-orphan")


class Business(Base):
    __tablename__ = "businesses"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, default="")
    icon = Column(String(10), default=DEFAULT_BUSINESS_ICON)
    # Champ historique, purement informatif
    monthly_revenue = Column(Money, default=0)
    # Compteur dénormalisé: somme des Investment.amount de ce business
    total_invested = Column(Money, default=0, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    investments = relationship("Investment", back_populates="business", cascade="all, delete-orphan")
    managers = relationship("BusinessManager", back_populates="business", cascade="all, delete-orphan")
    earnings = relationship("Earning", back_populates="business", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="business", cascade="all, delete-orphan")
    withdrawals = relationship("Withdrawal", back_populates="business", cascade="all, delete-orphan")


class Investment(Base):
    __tablename__ = "investments"
    id = Column(Integer, primary_key=True)
    amount = Column(Money, nullable=False)
    note = Column(Text, default="")
    created_at = Column(DateTime, default=datetime.utcnow)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    user = relationship("User", back_populates="investments")
    business = relationship("Business", back_populates="investments")


class BusinessManager(Base):
    __tablename__ = "business_managers"
    __table_args__ = (UniqueConstraint("business_id", "user_id", name="uq_business_manager"),)
    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    business = relationship("Business", back_populates="managers")
    user = relationship("User", back_populates="managed")


class Earning(Base):
    __tablename__ = "earnings"
    id = Column(Integer, primary_key=True)
    total_amount = Column(Money, nullable=False)
    note = Column(Text, default="")
    created_at = Column(DateTime, default=datetime.utcnow)

    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    recorded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    business = relationship("Business", back_populates="earnings")
    recorder = relationship("User")
    shares = relationship("EarningShare", back_populates="earning", cascade="all, delete-orphan")


class EarningShare(Base):
    """Part figée d'un investisseur dans un Earning, calculée à l'enregistrement"""
    __tablename__ = "earning_shares"
    id = Column(Integer, primary_key=True)
    amount = Column(Money, nullable=False)
    share_percent = Column(Percent, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    earning_id = Column(Integer, ForeignKey("earnings.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    earning = relationship("Earning", back_populates="shares")
    user = relationship("User")


class Expense(Base):
    __tablename__ = "expenses"
    id = Column(Integer, primary_key=True)
    total_amount = Column(Money, nullable=False)
    description = Column(Text, default="")
    note = Column(Text, default="")
    created_at = Column(DateTime, default=datetime.utcnow)

    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    recorded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    business = relationship("Business", back_populates="expenses")
    recorder = relationship("User")
    shares = relationship("ExpenseShare", back_populates="expense", cascade="all, delete-orphan")


class ExpenseShare(Base):
    __tablename__ = "expense_shares"
    id = Column(Integer, primary_key=True)
    amount = Column(Money, nullable=False)
    share_percent = Column(Percent, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    expense_id = Column(Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    expense = relationship("Expense", back_populates="shares")
    user = relationship("User")


class Withdrawal(Base):
    __tablename__ = "withdrawals"
    id = Column(Integer, primary_key=True)
    amount = Column(Money, nullable=False)
    note = Column(Text, default="")
    created_at = Column(DateTime, default=datetime.utcnow)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    recorded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    business = relationship("Business", back_populates="withdrawals")
    user = relationship("User", foreign_keys=[user_id])
    recorder = relationship("User", foreign_keys=[recorded_by])


class Transaction(Base):
    """Journal d'audit: une ligne par mutation, jamais modifiée"""
    __tablename__ = "transactions"
    id = Column(Integer, primary_key=True)
    type = Column(String(30), nullable=False)
    amount = Column(Money, nullable=False, default=0)
    description = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="SET NULL"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    business = relationship("Business")
    user = relationship("User")
