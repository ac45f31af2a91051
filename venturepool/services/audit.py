# venturepool/services/audit.py : journal des opérations (table transactions)

from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from venturepool.models import models


def record_transaction(db: Session, type: str, description: str, amount=Decimal("0"),
                       business_id: Optional[int] = None, user_id: Optional[int] = None) -> models.Transaction:
    """
    Ajoute une ligne au journal dans la transaction en cours.
    Pas de commit ici: la ligne part avec la mutation qu'elle décrit.
    Une description qui nomme l'utilisateur `user_id` commence par ce nom
    (voir `mask_subject`).
    """
    entry = models.Transaction(
        type=type,
        amount=amount,
        description=description,
        business_id=business_id,
        user_id=user_id
    )
    db.add(entry)
    return entry


def recent_transactions(db: Session, limit: int):
    return db.query(models.Transaction).options(
        joinedload(models.Transaction.user),
        joinedload(models.Transaction.business)
    ).order_by(
        models.Transaction.created_at.desc(), models.Transaction.id.desc()
    ).limit(limit).all()
