import os
import random

from locust import HttpUser, between, task

# Run against a server with AUTH_MODE=mock, or point these at a real account
EMAIL = os.getenv("LOCUST_EMAIL", "")
PASSWORD = os.getenv("LOCUST_PASSWORD", "")
CLINIC_ID = os.getenv("LOCUST_CLINIC_ID", "11111111-1111-4111-8111-111111111111")


class ApiUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.headers = {}
        if EMAIL:
            r = self.client.post("/api/auth/token", json={"email": EMAIL, "password": PASSWORD})
            if r.status_code == 200:
                self.headers = {"Authorization": f"Bearer {r.json()['access_token']}"}
        r = self.client.get("/api/products", headers=self.headers)
        self.products = r.json() if r.status_code == 200 else []

    @task(3)
    def create_order(self):
        if not self.products:
            return
        picked = random.sample(self.products, k=min(3, len(self.products)))
        items = [
            {"productId": p["id"], "name": p["name"], "quantity": random.randint(1, 10), "price": p["price"]}
            for p in picked
        ]
        self.client.post("/api/orders", json={"clinicId": CLINIC_ID, "items": items}, headers=self.headers)

    @task(1)
    def list_orders(self):
        self.client.get("/api/orders", params={"limit": 20}, headers=self.headers)

    @task(1)
    def recent_orders(self):
        self.client.get("/api/dashboard/recent-orders", headers=self.headers)
