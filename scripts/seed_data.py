# venturepool/scripts/seed_data.py : script pour générer des données de démo

#!/usr/bin/env python
"""Script pour générer un pool de démonstration"""

import sys
import os
from decimal import Decimal
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from venturepool import config
from venturepool.auth import hash_password
from venturepool.database import make_engine, make_session_factory, create_tables
from venturepool.models import models
from venturepool.services.businesses import BusinessService
from venturepool.services.distribution import ShareDistributionService
from venturepool.services.investments import InvestmentService


def generate_demo_data(db):
    """
    Un admin, deux membres, un business, deux investissements et un gain,
    enregistrés par les mêmes services que l'API.
    """
    admin = models.User(username="admin", password_hash=hash_password("admin123"), role=config.ROLE_ADMIN)
    alice = models.User(username="alice", password_hash=hash_password("demo123"))
    bob = models.User(username="bob", password_hash=hash_password("demo123"))
    db.add_all([admin, alice, bob])
    db.commit()

    business = BusinessService(db).create(
        "Food Truck", admin, description="Cuisine de rue", icon="🚚", monthly_revenue=Decimal("1500")
    )
    investments = InvestmentService(db)
    investments.create(alice.id, business.id, Decimal("1000"), "Apport initial", admin)
    investments.create(bob.id, business.id, Decimal("3000"), "Apport initial", admin)
    ShareDistributionService(db).record_earning(business, Decimal("400"), admin, note="Premier mois")

    return {"admin": admin, "members": [alice, bob], "business": business}


if __name__ == "__main__":
    engine = make_engine(config.DATABASE_URL)
    create_tables(engine)
    session = make_session_factory(engine)()
    try:
        generate_demo_data(session)
    finally:
        session.close()
    print("✅ Données de démo générées avec succès!")
    print("👤 Admin: admin / admin123, membres: alice, bob / demo123")
