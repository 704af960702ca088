import os
from typing import Any, Dict, Optional

import requests


class SupabaseDB:
    def __init__(self, supabase_url: str, service_role_key: str, timeout: float = 30):
        self.base = supabase_url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.h = {
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
            "Content-Type": "application/json",
        }

    def _debug(self, r: requests.Response) -> None:
        # print before raise_for_status so 4xx bodies are not lost
        if os.getenv("DEBUG_SUPABASE") == "1":
            print("SUPABASE_URL:", r.url)
            print("SUPABASE_STATUS:", r.status_code)
            print("SUPABASE_TEXT:", r.text)

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        url = f"{self.base}/profiles"
        params = {"id": f"eq.{user_id}", "select": "*"}
        r = requests.get(url, headers=self.h, params=params, timeout=self.timeout)
        self._debug(r)
        r.raise_for_status()
        rows = r.json()
        return rows[0] if rows else None

    def insert_scan(self, record: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base}/scans"
        headers = dict(self.h, Prefer="return=representation")
        r = requests.post(url, headers=headers, json=record, timeout=self.timeout)
        self._debug(r)
        r.raise_for_status()
        rows = r.json()
        if isinstance(rows, list):
            return rows[0] if rows else {}
        return rows or {}
