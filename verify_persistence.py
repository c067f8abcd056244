import time
import subprocess
import httpx
import sys
import os
import signal
from datetime import datetime, timedelta, timezone

from jose import jwt

from courier.app.core.config import settings

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"

PARCEL = {
    "pickup_address": "Kenyatta Avenue, Nairobi",
    "destination_address": "Moi Avenue, Mombasa",
    "pickup_lat": -1.2921,
    "pickup_lng": 36.8219,
    "destination_lat": -4.0435,
    "destination_lng": 39.6682,
    "weight_category": "large",
}


def make_headers(user_id=9001):
    # Tokens normally come from the auth service; sign one with the shared secret
    token = jwt.encode(
        {"sub": "persist_owner", "user_id": user_id, "exp": datetime.now(timezone.utc) + timedelta(minutes=10)},
        settings.secret_key,
        algorithm=settings.algorithm,
    )
    return {"Authorization": f"Bearer {token}"}


def start_server(echo=False):
    env = {**os.environ, "DB_ECHO": "True"} if echo else None
    return subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "courier.app.main:app", "--host", "127.0.0.1", "--port", "8000"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=env,
    )


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for i in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.ConnectError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def run_verification():
    headers = make_headers()

    # 1. Start Server (First Run)
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = start_server(echo=True)

    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stdout:", server_logs[0].decode())
            print("Server Stderr:", server_logs[1].decode())
            raise Exception("Server start failed")

        # 2. Quote and create a parcel
        print("\n--- [Step 2] Creating Parcel (Persistence Test) ---")
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/parcels/quote", json=PARCEL, headers=headers)
        resp.raise_for_status()
        offered = resp.json()
        print(f"Quote: {offered}")

        resp = httpx.post(
            f"{BASE_URL}{API_PREFIX}/parcels",
            json={**PARCEL, "quote_amount": offered["quote_amount"], "duration_minutes": offered["duration_minutes"]},
            headers=headers,
        )
        if resp.status_code != 201:
            print(f"❌ Parcel Creation Failed: {resp.status_code} {resp.text}")
            raise Exception("Parcel creation failed")
        parcel_id = resp.json()["id"]
        print(f"✅ Parcel {parcel_id} Created")

        resp = httpx.post(
            f"{BASE_URL}{API_PREFIX}/parcels/{parcel_id}/events", json={"event": "dispatch"}, headers=headers
        )
        resp.raise_for_status()
        print("✅ Parcel Dispatched")

    finally:
        print("\n--- [Step 3] Stopping Server ---")
        proc.send_signal(signal.SIGTERM)
        proc.wait()

    time.sleep(2)  # Wait for port release

    # 3. Restart Server
    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = start_server()

    try:
        if not wait_for_server():
            raise Exception("Server restart failed")

        print("\n--- [Step 5] Fetching Parcel (Post-Restart) ---")
        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/parcels/{parcel_id}", headers=headers)

        if resp.status_code == 200 and resp.json()["status"] == "in_transit":
            print("✅ Parcel Persisted With Its Status")
            print(resp.json())
        else:
            print(f"❌ Fetch Failed (Persistence Issue?): {resp.status_code} {resp.text}")
            raise Exception("Parcel missing after restart")

        print("\n--- [Step 6] Verifying Dashboard ---")
        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/analytics/dashboard", headers=headers)
        if resp.status_code == 200:
            print("✅ Dashboard Available")
            print(resp.json())
        else:
            print(f"❌ Dashboard Failed: {resp.status_code}")

    finally:
        print("\n--- [Step 7] Stopping Server ---")
        proc2.send_signal(signal.SIGTERM)
        proc2.wait()


if __name__ == "__main__":
    run_verification()
