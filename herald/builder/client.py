from typing import Any, Dict, Optional

import httpx

from herald.shared.logging import get_logger

logger = get_logger("builder.client")


class ApiError(Exception):
    def __init__(self, status: int, message: str, body: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.body = body or {}


class ProfileApiClient:
    """
    Thin JSON client for the profile API used by the builder.

    ``http`` is any ``httpx.Client`` with the API origin as ``base_url``
    (a ``fastapi.testclient.TestClient`` works too). Non-2xx answers and
    transport failures raise ``ApiError``; nothing is retried.
    """

    def __init__(self, http: httpx.Client, access_token: Optional[str] = None):
        self.http = http
        self.access_token = access_token

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        try:
            resp = self.http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {type(e).__name__}")
            raise ApiError(0, f"Network error: {type(e).__name__}") from e
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code >= 400:
            message = data.get("error") if isinstance(data, dict) else None
            raise ApiError(resp.status_code, message or resp.reason_phrase or "Request failed", data if isinstance(data, dict) else None)
        return data

    # Drafts
    def get_draft(self) -> Dict[str, Any]:
        return self._request("GET", "/api/profiles/draft")

    def save_draft(self, content: Dict[str, Any], tier: Optional[str], slug: Optional[str] = None, *, auto_save: bool = False) -> Dict[str, Any]:
        body = {
            "content": content,
            "tier": tier,
            "slug": slug,
            "auto_save": auto_save,
            "manual_save": not auto_save,
        }
        return self._request("POST", "/api/profiles/draft", json=body)

    def delete_draft(self) -> Dict[str, Any]:
        return self._request("DELETE", "/api/profiles/draft")

    # Publication
    def publish(self, slug: str) -> Dict[str, Any]:
        return self._request("POST", "/api/profiles/publish", json={"slug": slug})

    def publish_status(self, slug: str) -> Dict[str, Any]:
        return self._request("GET", "/api/profiles/publish", params={"slug": slug})

    # AI
    def polish_bio(self, bio: str, tone: str = "professional", tier: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"bio": bio, "tone": tone}
        if tier:
            body["tier"] = tier
        return self._request("POST", "/api/ai/polish-bio", json=body)

    def polish_status(self) -> Dict[str, Any]:
        return self._request("GET", "/api/ai/polish-bio")

    # Payment
    def create_order(self, profile_id: str, tier: str) -> Dict[str, Any]:
        return self._request("POST", "/api/payment/create-order", json={"profileId": profile_id, "tier": tier})

    def verify_payment(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/api/payment/verify", json=payload)
