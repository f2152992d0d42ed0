"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags capacity   # Contend for one activity/date
  locust -f locustfile.py --tags catalogue  # Cached listing throughput
  locust -f locustfile.py --tags edge       # Bad input
  locust -f locustfile.py                   # All tests
"""

import random
import string
from datetime import date, timedelta

from locust import HttpUser, task, between, tag

PASSWORD = "loadtest-password"
ACTIVITY_IDS = []
CAPACITY_ACTIVITY_ID = None
CAPACITY_DATE = (date.today() + timedelta(days=30)).isoformat()


def random_email():
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=10))
    return f"load_{suffix}@test.com"


def register_and_login(client) -> dict:
    email = random_email()
    client.post("/api/v1/auth/register", json={
        "email": email,
        "password": PASSWORD,
        "first_name": "Load",
        "last_name": "Tester",
    })
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    if resp.status_code != 200:
        return {}
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def create_activity(client, headers, max_participants: int, title: str):
    vendor = client.post("/api/v1/vendors/", json={
        "business_name": f"Load Vendor {random.randint(1, 100000)}",
        "description": "Load test vendor",
        "contact_email": "vendor@test.com",
        "contact_phone": "+966500000000",
        "city": "Riyadh",
    }, headers=headers)
    if vendor.status_code != 201:
        return None
    resp = client.post("/api/v1/activities/", json={
        "vendor_id": vendor.json()["id"],
        "title": title,
        "description": "Load test activity",
        "short_description": "Load test",
        "category": "outdoor",
        "city": "Riyadh",
        "base_price": 150,
        "max_participants": max_participants,
    }, headers=headers)
    return resp.json()["id"] if resp.status_code == 201 else None


class CapacityUser(HttpUser):
    """
    TEST 1: Capacity - many users fight for 10 places on one date

    Run: locust -f locustfile.py --tags capacity -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT SUM(participants_total) FROM bookings
      WHERE activity_id = X AND booking_date = D AND status NOT IN ('cancelled', 'refunded');
    Should be <= 10
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        global CAPACITY_ACTIVITY_ID
        self.headers = register_and_login(self.client)
        if self.headers and not CAPACITY_ACTIVITY_ID:
            CAPACITY_ACTIVITY_ID = create_activity(
                self.client, self.headers, 10, "Capacity Test Dive",
            )

    @tag("capacity")
    @task
    def book_limited_places(self):
        if not CAPACITY_ACTIVITY_ID or not self.headers:
            return

        with self.client.post("/api/v1/bookings/",
            json={
                "activity_id": CAPACITY_ACTIVITY_ID,
                "booking_date": CAPACITY_DATE,
                "participants_total": 1,
            },
            headers=self.headers,
            catch_response=True
        ) as resp:
            if resp.status_code in (201, 400, 409):
                resp.success()  # 400 = full, 409 = admission busy
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class CatalogueUser(HttpUser):
    """
    TEST 2: Catalogue throughput - cache effectiveness

    Run with and without Redis and compare latency percentiles.
    """
    wait_time = between(0.1, 0.5)

    @tag("catalogue", "read")
    @task(10)
    def list_activities(self):
        page = random.randint(1, 5)
        resp = self.client.get(f"/api/v1/activities/?page={page}&page_size=12",
            name="/api/v1/activities/ [cached]")
        if resp.status_code == 200:
            for activity in resp.json().get("activities", []):
                if activity["id"] not in ACTIVITY_IDS:
                    ACTIVITY_IDS.append(activity["id"])

    @tag("catalogue", "read")
    @task(3)
    def availability(self):
        if ACTIVITY_IDS:
            self.client.get(
                f"/api/v1/activities/{random.choice(ACTIVITY_IDS)}/availability?date={CAPACITY_DATE}",
                name="/api/v1/activities/{id}/availability",
            )

    @tag("catalogue")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - bad input must produce 4xx, never 5xx
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register_and_login(self.client)

    def _expect(self, json_body, allowed, headers=None, data=None):
        with self.client.post("/api/v1/bookings/",
            json=json_body,
            data=data,
            headers=self.headers if headers is None else headers,
            catch_response=True
        ) as resp:
            if resp.status_code in allowed:
                resp.success()
            else:
                resp.failure(f"Expected {allowed}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_activity(self):
        self._expect({"activity_id": 999999, "booking_date": CAPACITY_DATE, "participants_total": 1},
                     (404,))

    @tag("edge")
    @task
    def zero_participants(self):
        self._expect({"activity_id": 1, "booking_date": CAPACITY_DATE, "participants_total": 0},
                     (422,))

    @tag("edge")
    @task
    def past_date(self):
        self._expect({"activity_id": 1, "booking_date": "2020-01-01", "participants_total": 1},
                     (400, 404))

    @tag("edge")
    @task
    def malformed_json(self):
        self._expect(None, (400, 422), data="not json at all")

    @tag("edge")
    @task
    def missing_auth(self):
        self._expect({"activity_id": 1, "booking_date": CAPACITY_DATE, "participants_total": 1},
                     (401,), headers={})


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload - mostly browsing, some bookings
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = register_and_login(self.client)

    @task(50)
    def browse(self):
        resp = self.client.get("/api/v1/activities/?page=1&page_size=12")
        if resp.status_code == 200:
            for activity in resp.json().get("activities", []):
                if activity["id"] not in ACTIVITY_IDS:
                    ACTIVITY_IDS.append(activity["id"])

    @task(20)
    def view_activity(self):
        if ACTIVITY_IDS:
            self.client.get(f"/api/v1/activities/{random.choice(ACTIVITY_IDS)}",
                name="/api/v1/activities/{id}")

    @task(10)
    def book(self):
        if ACTIVITY_IDS and self.headers:
            day = date.today() + timedelta(days=random.randint(2, 60))
            self.client.post("/api/v1/bookings/",
                json={
                    "activity_id": random.choice(ACTIVITY_IDS),
                    "booking_date": day.isoformat(),
                    "participants_total": random.randint(1, 3),
                },
                headers=self.headers,
                name="/api/v1/bookings/")

    @task(2)
    def publish_activity(self):
        if self.headers:
            activity_id = create_activity(
                self.client, self.headers, random.randint(5, 50),
                f"Activity {random.randint(1, 10000)}",
            )
            if activity_id:
                ACTIVITY_IDS.append(activity_id)
