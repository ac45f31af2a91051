# venturepool/tests/test_masking.py : masquage appliqué à chaque liste

from api_helpers import ApiTestCase, client


class TestMasking(ApiTestCase):
    def setup_method(self):
        super().setup_method()
        self.alice_id, self.alice_headers = self._member("alice")
        self.bob_id, self.bob_headers = self._member("bob")
        self.carla_id, self.carla_headers = self._member("carla")
        self.truck = self._create_business("Food Truck")
        self.kiosk = self._create_business("Kiosque")
        self._invest(self.alice_id, self.truck, 1000)
        self._invest(self.bob_id, self.truck, 3000)
        self._invest(self.carla_id, self.kiosk, 500)
        # carla gère le food truck sans y avoir investi
        self._grant_manager(self.truck, self.carla_id)

    def _names(self, rows, key="username"):
        return {row["user_id"]: row[key] for row in rows}

    def test_user_listing(self):
        rows = client.get("/api/users/", headers=self.alice_headers).json()
        names = {row["id"]: row["username"] for row in rows}
        assert names[self.alice_id] == "alice"
        assert names[self.bob_id] == "B***"
        assert names[self.carla_id] == "C****"
        assert names[self.admin["user"]["id"]] == "A****"
        # tri par total investi
        assert rows[0]["id"] == self.bob_id

    def test_user_listing_for_manager(self):
        rows = client.get("/api/users/", headers=self.carla_headers).json()
        names = {row["id"]: row["username"] for row in rows}
        assert names[self.alice_id] == "alice"
        assert names[self.bob_id] == "bob"
        assert names[self.admin["user"]["id"]] == "A****"

    def test_user_listing_for_admin(self):
        rows = client.get("/api/users/", headers=self.admin_headers).json()
        assert {row["username"] for row in rows} == {"admin", "alice", "bob", "carla"}

    def test_visible_users(self):
        member = client.get("/api/me/users", headers=self.alice_headers).json()
        assert [u["username"] for u in member] == ["alice"]
        manager = client.get("/api/me/users", headers=self.carla_headers).json()
        assert {u["username"] for u in manager} == {"alice", "bob", "carla"}

    def test_investment_listing(self):
        rows = client.get("/api/investments/", headers=self.alice_headers).json()
        names = self._names(rows)
        assert names[self.alice_id] == "alice"
        assert names[self.bob_id] == "B***"
        assert names[self.carla_id] == "C****"
        assert all(row["business_name"] for row in rows)

        manager_view = self._names(client.get("/api/investments/", headers=self.carla_headers).json())
        assert manager_view[self.bob_id] == "bob"

    def test_investment_listing_filtered(self):
        rows = client.get(f"/api/investments/?business_id={self.kiosk}", headers=self.admin_headers).json()
        assert [row["username"] for row in rows] == ["carla"]

    def test_withdrawal_listing(self):
        self._earn(self.truck, 400)
        self._withdraw(self.bob_id, self.truck, 20)
        rows = client.get("/api/withdrawals/", headers=self.alice_headers).json()
        assert [row["username"] for row in rows] == ["B***"]
        rows = client.get("/api/withdrawals/", headers=self.bob_headers).json()
        assert [row["username"] for row in rows] == ["bob"]
        rows = client.get("/api/withdrawals/", headers=self.carla_headers).json()
        assert [row["username"] for row in rows] == ["bob"]

    def test_earning_recorder_and_shares(self):
        self._earn(self.truck, 400, headers=self.carla_headers)

        [for_alice] = client.get("/api/earnings/", headers=self.alice_headers).json()
        assert for_alice["recorded_by_name"] == "C****"
        assert self._names(for_alice["shares"]) == {self.alice_id: "alice", self.bob_id: "B***"}

        [for_carla] = client.get("/api/earnings/", headers=self.carla_headers).json()
        assert for_carla["recorded_by_name"] == "carla"
        assert self._names(for_carla["shares"]) == {self.alice_id: "alice", self.bob_id: "bob"}

    def test_expense_recorder_visible_to_manager(self):
        self._spend(self.truck, 100)
        [for_carla] = client.get("/api/expenses/", headers=self.carla_headers).json()
        assert for_carla["recorded_by_name"] == "admin"
        [for_bob] = client.get("/api/expenses/", headers=self.bob_headers).json()
        assert for_bob["recorded_by_name"] == "A****"

    def test_transaction_listing(self):
        rows = client.get("/api/transactions/", headers=self.alice_headers).json()
        investments = [row for row in rows if row["type"] == "investment"]
        names = self._names(investments)
        assert names[self.alice_id] == "alice"
        assert names[self.bob_id] == "B***"
        for row in investments:
            if row["user_id"] == self.bob_id:
                assert "bob" not in row["description"]
                assert "B***" in row["description"]

    def test_stats_masking(self):
        self._earn(self.truck, 400)
        stats = client.get("/api/stats/", headers=self.alice_headers).json()
        shares = {(r["user_id"], r["business_id"]): r["username"] for r in stats["user_shares"]}
        assert shares[(self.alice_id, self.truck)] == "alice"
        assert shares[(self.bob_id, self.truck)] == "B***"
        leaderboard = {r["user_id"]: r["username"] for r in stats["user_totals"]}
        assert leaderboard[self.alice_id] == "alice"
        assert leaderboard[self.carla_id] == "C****"

        manager = client.get("/api/stats/", headers=self.carla_headers).json()
        shares = {(r["user_id"], r["business_id"]): r["username"] for r in manager["user_shares"]}
        assert shares[(self.bob_id, self.truck)] == "bob"
        # le classement global ne profite pas de la gérance
        leaderboard = {r["user_id"]: r["username"] for r in manager["user_totals"]}
        assert leaderboard[self.bob_id] == "B***"

    def test_transaction_description_masks_subject_only(self):
        an_id, _ = self._member("an")
        banane = self._create_business("Banane")
        investment = self._invest(an_id, banane, 1000)
        client.delete(f"/api/investments/{investment['id']}", headers=self.admin_headers)

        rows = client.get("/api/transactions/", headers=self.alice_headers).json()
        mine = [row for row in rows if row["user_id"] == an_id]
        assert {row["type"] for row in mine} == {"investment", "investment_deleted"}
        for row in mine:
            assert row["username"] == "A***"
            assert row["description"].startswith("A***")
            assert "dans Banane" in row["description"]
