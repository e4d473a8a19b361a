"""Locust load tests for the Sinapse regulation service.

Target: a regional NIR with ~20 ICUs polling the queue while care teams
open and signal transfer requests.

Usage:
    CARE_TEAM_TOKEN=... NIR_TOKEN=... locust -f locustfile.py --headless -u 10 -r 2 -t 5m --csv results
"""

import os
import random
import uuid

from locust import HttpUser, between, task

SUPPORT_TYPES = [
    "NEUROLOGIA", "CARDIOLOGIA", "CRONICOS", "TORACICA",
    "ONCOLOGIA", "NEFROLOGIA", "OUTROS",
]


class CareTeamUser(HttpUser):
    """Simulates plantonistas opening and signalling regulation requests."""

    host = "http://localhost:8080"
    wait_time = between(2, 8)

    def on_start(self):
        self.client.headers["Authorization"] = f"Bearer {os.environ.get('CARE_TEAM_TOKEN', '')}"
        self.patient_id = f"pat-{uuid.uuid4().hex[:8]}"
        self.regulation_ids: list[str] = []

    @task(3)
    def add_regulation(self):
        response = self.client.post(
            f"/api/patients/{self.patient_id}/regulations",
            json={"support_type": random.choice(SUPPORT_TYPES)},
            name="/api/patients/[id]/regulations",
            timeout=5,
        )
        if response.status_code == 201:
            self.regulation_ids.append(response.json()["regulation"]["id"])

    @task(5)
    def list_regulations(self):
        self.client.get(
            f"/api/patients/{self.patient_id}/regulations",
            name="/api/patients/[id]/regulations [list]",
        )

    @task(1)
    def request_cancellation(self):
        if not self.regulation_ids:
            return
        self.client.post(
            f"/api/regulations/{random.choice(self.regulation_ids)}/cancel-request",
            json={"reason": "Load test cancellation"},
            name="/api/regulations/[id]/cancel-request",
        )

    @task(1)
    def health_check(self):
        self.client.get("/health", name="/health")


class NIRUser(HttpUser):
    """Simulates NIR coordinators working the regulation queue."""

    host = "http://localhost:8080"
    wait_time = between(5, 15)

    def on_start(self):
        self.client.headers["Authorization"] = f"Bearer {os.environ.get('NIR_TOKEN', '')}"

    @task(5)
    def view_queue(self):
        response = self.client.get("/api/nir/regulations", name="/api/nir/regulations")
        if response.status_code != 200:
            return
        items = [
            item for item in response.json()["items"]
            if item["regulation"]["status"] == "aguardando_regulacao"
        ]
        if items:
            regulation_id = random.choice(items)["regulation"]["id"]
            self.client.post(
                f"/api/nir/regulations/{regulation_id}/status",
                json={"status": "regulado"},
                name="/api/nir/regulations/[id]/status",
            )

    @task(1)
    def regulation_config(self):
        self.client.get("/api/regulation/config", name="/api/regulation/config")
