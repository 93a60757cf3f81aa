# backend/client/api_client.py
from datetime import date
from typing import Any, Dict, List, Optional

import httpx


class ApiError(Exception):
    """A non-2xx answer; ``message`` is what the server said, verbatim."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class FinanzasClient:
    """
    Thin JSON client for the /api endpoints.

    ``http`` can be any httpx.Client, including FastAPI's TestClient, so the
    same code talks to a deployed server or to an app in-process.
    """

    def __init__(self, http: httpx.Client, token: Optional[str] = None):
        self.http = http
        self.token = token

    @classmethod
    def connect(cls, base_url: str, token: Optional[str] = None) -> "FinanzasClient":
        return cls(httpx.Client(base_url=base_url), token=token)

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, fallback: str, **kwargs) -> Any:
        response = self.http.request(method, path, headers=self._headers(), **kwargs)
        if response.is_success:
            return response.json()
        try:
            message = response.json().get("message") or fallback
        except ValueError:
            message = fallback
        raise ApiError(response.status_code, message)

    # ---------- auth ----------
    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/sign-in/email", "Failed to sign in",
                             json={"email": email, "password": password})
        self.token = data["token"]
        return data

    def sign_out(self) -> None:
        self._request("POST", "/api/auth/sign-out", "Failed to sign out")
        self.token = None

    # ---------- resources ----------
    def list_transactions(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/transactions", "Failed to fetch transactions")

    def create_transaction(self, concepto: str, monto: float, fecha) -> Dict[str, Any]:
        body = {"concepto": concepto, "monto": monto, "fecha": str(fecha)}
        return self._request("POST", "/api/transactions", "Failed to create transaction", json=body)

    def list_users(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/users", "Failed to fetch users")

    def update_user(self, user_id: str, name: str, role: str) -> Dict[str, Any]:
        body = {"id": user_id, "name": name, "role": role}
        return self._request("PUT", "/api/users", "Failed to update user", json=body)

    def get_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/api/profile", "Failed to fetch profile")

    def update_profile(self, name: str, email: str) -> Dict[str, Any]:
        return self._request("PUT", "/api/profile", "Failed to update profile",
                             json={"name": name, "email": email})

    def get_report(self, desde: Optional[date] = None, hasta: Optional[date] = None) -> Dict[str, Any]:
        params = {}
        if desde is not None:
            params["desde"] = desde.isoformat()
        if hasta is not None:
            params["hasta"] = hasta.isoformat()
        return self._request("GET", "/api/reports", "Failed to fetch report", params=params)
