"""CJ Dropshipping API v2 connector.

Auth: POST {base}/authentication/getAccessToken with {email, apiKey}
      -> {code: 200, data: {accessToken, accessTokenExpiryDate}}
Every other call sends the token in the "CJ-Access-Token" header and gets
back the same {code, message, data} envelope.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import httpx

from ..config import settings
from ..exceptions import AuthenticationFailed, UpstreamRequestFailed
from ..utils import parse_price, safe_int, utcnow
from .base import (
    DEFAULT_PROCESSING_DAYS,
    DEFAULT_STOCK_QUANTITY,
    SupplierClient,
    estimate_shipping_cost,
)

log = logging.getLogger(__name__)


def _parse_expiry(value) -> datetime | None:
    """CJ sends an ISO timestamp; tolerate epoch seconds/millis too."""
    if isinstance(value, (int, float)):
        ts = value / 1000 if value > 1e12 else value
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    if isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
    return None


class CJDropshippingClient(SupplierClient):
    """CJ Dropshipping REST API — bearer token with expiry."""

    code = "cj"
    display_name = "CJ Dropshipping"

    AUTH_PATH = "/authentication/getAccessToken"
    SEARCH_PATH = "/product/list"
    DETAIL_PATH = "/product/query"
    CLAIM_PATH = "/product/addToMyProduct"
    CATEGORY_PATH = "/product/getCategory"

    def __init__(
        self,
        api_key: str,
        email: str,
        base_url: str | None = None,
        timeout: float | None = None,
        auth_timeout: float | None = None,
        expiry_skew: timedelta | None = None,
        clock=utcnow,
    ):
        super().__init__(timeout=timeout or settings.supplier_http_timeout)
        self.api_key = api_key
        self.email = email
        self.base_url = (base_url or settings.cj_base_url).rstrip("/")
        self.auth_timeout = auth_timeout or settings.supplier_auth_timeout
        self.expiry_skew = (
            expiry_skew
            if expiry_skew is not None
            else timedelta(seconds=settings.token_expiry_skew_seconds)
        )
        self._clock = clock
        self._token: str | None = None
        self._token_expires_at: datetime | None = None
        self._auth_lock = asyncio.Lock()
        self.auth_count = 0

    # ── Token lifecycle ─────────────────────────────────────────────

    def _token_is_valid(self) -> bool:
        if not self._token or not self._token_expires_at:
            return False
        return self._clock() < self._token_expires_at - self.expiry_skew

    async def _ensure_authenticated(self) -> str:
        if self._token_is_valid():
            return self._token
        # Concurrent callers wait here; only the first one exchanges credentials
        async with self._auth_lock:
            if not self._token_is_valid():
                await self._authenticate()
        return self._token

    async def _authenticate(self) -> None:
        from ..http_client import http

        try:
            r = await http.post(
                f"{self.base_url}{self.AUTH_PATH}",
                json={"email": self.email, "apiKey": self.api_key},
                headers={"Content-Type": "application/json"},
                timeout=self.auth_timeout,
            )
        except httpx.HTTPError as e:
            raise AuthenticationFailed(f"CJ authentication failed: {e}") from e

        try:
            body = r.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            raise AuthenticationFailed("CJ authentication failed: unexpected response shape")
        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise AuthenticationFailed("CJ authentication failed: token payload is not an object")
        if r.status_code != 200 or body.get("code") != 200 or not data.get("accessToken"):
            reason = body.get("message") or r.reason_phrase or f"HTTP {r.status_code}"
            raise AuthenticationFailed(f"CJ authentication failed: {reason}")

        self.auth_count += 1
        self._token = data["accessToken"]
        expires_at = _parse_expiry(data.get("accessTokenExpiryDate"))
        if expires_at is None:
            log.warning("CJ: token expiry missing or unreadable, assuming default TTL")
            expires_at = self._clock() + timedelta(hours=settings.default_token_ttl_hours)
        self._token_expires_at = expires_at
        log.info(f"CJ: authenticated, token valid until {expires_at.isoformat()}")

    # ── Transport ───────────────────────────────────────────────────

    async def _request(self, method: str, path: str, action: str, **kwargs) -> dict:
        """Send an authenticated request and return the decoded envelope."""
        from ..http_client import http

        token = await self._ensure_authenticated()
        url = f"{self.base_url}{path}"
        try:
            r = await http.request(
                method, url, headers={"CJ-Access-Token": token}, timeout=self.timeout, **kwargs
            )
            if r.status_code == 401:
                self._token = None
                token = await self._ensure_authenticated()
                r = await http.request(
                    method, url, headers={"CJ-Access-Token": token}, timeout=self.timeout, **kwargs
                )
        except httpx.HTTPError as e:
            raise UpstreamRequestFailed(f"CJ {action} failed: {e}") from e

        try:
            body = r.json()
        except ValueError as e:
            raise UpstreamRequestFailed(f"CJ {action} failed: non-JSON response") from e
        if not isinstance(body, dict):
            raise UpstreamRequestFailed(f"CJ {action} failed: unexpected response shape")
        body["_http_status"] = r.status_code
        body.setdefault("_reason", r.reason_phrase)
        return body

    @staticmethod
    def _ok(body: dict) -> bool:
        return body.get("_http_status") == 200 and body.get("code") == 200

    def _data(self, body: dict, action: str):
        if not self._ok(body):
            reason = body.get("message") or body.get("_reason") or f"HTTP {body.get('_http_status')}"
            raise UpstreamRequestFailed(f"CJ {action} failed: {reason}")
        return body.get("data")

    # ── Capabilities ────────────────────────────────────────────────

    async def search_products(
        self,
        keyword: str | None = None,
        category_id: str | None = None,
        page_num: int = 1,
        page_size: int = 20,
    ):
        params = {"pageNum": page_num, "pageSize": page_size}
        if category_id:
            params["categoryId"] = category_id
        if keyword:
            params["productNameEn"] = keyword
        body = await self._request("GET", self.SEARCH_PATH, "product search", params=params)
        data = self._data(body, "product search")
        if data is None:
            data = []
        if not isinstance(data, (dict, list)):
            raise UpstreamRequestFailed("CJ product search failed: unexpected result shape")
        count = len(data.get("list") or []) if isinstance(data, dict) else len(data)
        log.info(f"CJ: search '{keyword or ''}' page {page_num} -> {count} results")
        return data

    async def get_product_details(self, external_id: str) -> dict:
        body = await self._request(
            "GET", self.DETAIL_PATH, "product details", params={"pid": external_id}
        )
        data = self._data(body, "product details")
        if not isinstance(data, dict):
            raise UpstreamRequestFailed(f"CJ product details failed: no product {external_id}")
        return data

    async def add_to_supplier_account(self, external_id: str) -> bool:
        body = await self._request(
            "POST", self.CLAIM_PATH, "add product", json={"productId": external_id}
        )
        if self._ok(body):
            return True
        # A product claimed earlier counts as claimed
        if "already" in str(body.get("message") or "").lower():
            log.info(f"CJ: product {external_id} already in account")
            return True
        self._data(body, "add product")
        return True

    async def get_categories(self) -> list:
        body = await self._request("GET", self.CATEGORY_PATH, "get categories")
        return self._data(body, "get categories") or []

    def import_transform(self, raw: dict) -> dict:
        name = raw.get("productNameEn") or raw.get("productName") or raw.get("name") or "Imported Product"
        price = parse_price(raw.get("sellPrice")) or 0.0

        images = raw.get("productImageSet") or raw.get("productImages") or []
        image = raw.get("productImage") or (images[0] if isinstance(images, list) and images else "")

        weight = parse_price(raw.get("packWeight")) or parse_price(raw.get("productWeight"))
        stock = self.stock_fields(raw)["stock_quantity"]

        return {
            "name": name,
            "description": raw.get("description") or name,
            "price": round(price, 2),
            "image": image,
            "category": raw.get("categoryName") or "General",
            "in_stock": price > 0,
            "source": self.code,
            "external_id": str(raw.get("pid") or ""),
            "sku": raw.get("productSku"),
            "supplier_price": price,
            "shipping_cost": estimate_shipping_cost(weight),
            "processing_time": safe_int(raw.get("processingTime")) or DEFAULT_PROCESSING_DAYS,
            "stock_quantity": stock if stock is not None else DEFAULT_STOCK_QUANTITY,
            "last_synced_at": utcnow(),
        }

    def stock_fields(self, raw: dict) -> dict:
        variants = raw.get("variants") or []
        first = variants[0] if isinstance(variants, list) and variants else {}
        stock = safe_int(first.get("inventory")) if isinstance(first, dict) else None
        return {
            "stock_quantity": stock,
            "supplier_price": parse_price(raw.get("sellPrice")),
        }
