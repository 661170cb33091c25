from locust import HttpUser, between, task
import os
import uuid

USERNAME = os.environ.get("ARTOO_USERNAME", "demo")
PASSWORD = os.environ.get("ARTOO_PASSWORD", "demo")
PREFIX = os.environ.get("ARTOO_LOAD_PREFIX", "load/")


class ResiliencyUser(HttpUser):
    wait_time = between(0.5, 2.0)

    def on_start(self):
        self.token = None
        self.keys = []
        resp = self.client.post("/api/auth/login", json={"username": USERNAME, "password": PASSWORD})
        if resp.status_code == 200:
            self.token = resp.json().get("token")

    def _auth_headers(self, extra=None):
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if extra:
            headers.update(extra)
        return headers

    @task(3)
    def list_files(self):
        self.client.get("/api/files", params={"path": PREFIX}, name="/api/files?path")

    @task(2)
    def download_recent(self):
        if not self.keys:
            return
        key = self.keys[-1]
        self.client.get(f"/api/download/{key}", name="/api/download/*")

    @task(1)
    def upload_small_file(self):
        key = f"{PREFIX}{uuid.uuid4().hex}.bin"
        resp = self.client.post(
            f"/api/files/{key}",
            data=os.urandom(64 * 1024),
            headers=self._auth_headers({"Content-Type": "application/octet-stream"}),
            name="/api/files/* [upload]",
        )
        if resp.status_code == 201:
            self.keys.append(key)
            del self.keys[:-20]

    @task(1)
    def health(self):
        self.client.get("/health")
