# venturepool/tests/api_helpers.py : base commune des tests d'API

from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from venturepool.main import app
from venturepool.database import Base, get_db, create_tables

# Base de données de test: SQLite en mémoire, une seule connexion partagée
SQLALCHEMY_DATABASE_URL = "sqlite://"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db

client = TestClient(app)

ADMIN_SECRET = "admin123"


def money(value) -> Decimal:
    """Les montants sortent en chaîne JSON ("100.00")"""
    return Decimal(str(value))


class ApiTestCase:
    """Crée les tables avant chaque test, et un admin prêt à l'emploi"""

    def setup_method(self):
        create_tables(engine)
        self.admin = self._register("admin", "Admin123!", admin_secret=ADMIN_SECRET)
        self.admin_headers = self._headers(self.admin["token"])

    def teardown_method(self):
        Base.metadata.drop_all(bind=engine)

    def _register(self, username, password="password123", admin_secret=None):
        payload = {"username": username, "password": password}
        if admin_secret:
            payload["admin_secret"] = admin_secret
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    def _member(self, username):
        """Inscrit un membre et renvoie (id, headers)"""
        data = self._register(username)
        return data["user"]["id"], self._headers(data["token"])

    @staticmethod
    def _headers(token):
        return {"Authorization": f"Bearer {token}"}

    def _create_business(self, name="Food Truck", **fields):
        response = client.post("/api/businesses/", json={"name": name, **fields}, headers=self.admin_headers)
        assert response.status_code == 200, response.text
        return response.json()["id"]

    def _invest(self, user_id, business_id, amount, note=""):
        response = client.post("/api/investments/", json={
            "user_id": user_id, "business_id": business_id, "amount": amount, "note": note
        }, headers=self.admin_headers)
        assert response.status_code == 200, response.text
        return response.json()

    def _earn(self, business_id, total_amount, headers=None):
        return client.post("/api/earnings/", json={
            "business_id": business_id, "total_amount": total_amount
        }, headers=headers or self.admin_headers)

    def _spend(self, business_id, total_amount, description="", headers=None):
        return client.post("/api/expenses/", json={
            "business_id": business_id, "total_amount": total_amount, "description": description
        }, headers=headers or self.admin_headers)

    def _withdraw(self, user_id, business_id, amount, headers=None):
        return client.post("/api/withdrawals/", json={
            "user_id": user_id, "business_id": business_id, "amount": amount
        }, headers=headers or self.admin_headers)

    def _grant_manager(self, business_id, user_id):
        response = client.post(f"/api/businesses/{business_id}/managers", json={"user_id": user_id},
                               headers=self.admin_headers)
        assert response.status_code == 200, response.text
        return response.json()

    def _balance(self, user_id, business_id):
        """Ligne user x business de /api/stats (vue admin)"""
        stats = client.get("/api/stats/", headers=self.admin_headers).json()
        for row in stats["user_shares"]:
            if row["user_id"] == user_id and row["business_id"] == business_id:
                return row
        return None
