from locust import HttpUser, task, between
import random

from pizzeria.auth import create_access_token


class StorefrontUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Each simulated customer gets its own identity token
        uid = f"load_{random.randint(1, 1_000_000)}"
        token = create_access_token(uid, {"email": f"{uid}@example.com"})
        self.headers = {"Authorization": f"Bearer {token}"}
        self.toppings = [t["id"] for t in self.client.get("/api/ingredients/toppings").json()]
        self.bases = [b["id"] for b in self.client.get("/api/ingredients/bases").json()]
        self.sauces = [s["id"] for s in self.client.get("/api/ingredients/sauces").json()]
        self.cheeses = [c["id"] for c in self.client.get("/api/ingredients/cheeses").json()]

    def _custom_item(self):
        return {
            "isCustom": True,
            "pizzaBaseId": random.choice(self.bases),
            "sauceId": random.choice(self.sauces),
            "cheeseId": random.choice(self.cheeses),
            "toppings": random.sample(self.toppings, k=min(3, len(self.toppings))),
            "quantity": random.randint(1, 2),
        }

    @task(3)
    def place_order(self):
        if not (self.bases and self.sauces and self.cheeses):
            return
        item = self._custom_item()
        quote = self.client.post("/api/pricing/quote", json={"items": [item]}).json()
        item["itemPrice"] = quote["lines"][0]["unitPrice"]
        self.client.post(
            "/api/orders",
            json={"deliveryAddress": "221B Baker Street, London", "items": [item], "totalAmount": quote["total"]},
            headers=self.headers,
        )

    @task(1)
    def list_orders(self):
        self.client.get("/api/orders/user", headers=self.headers)
