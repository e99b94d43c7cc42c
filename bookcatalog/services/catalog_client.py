"""
Catalog service client

The remote bookstore backend owns persistence. This module is the only
place that talks to it; the editors depend on the ``CatalogService``
protocol so tests can hand them an in-memory fake.
"""
from typing import Any, Dict, List, Optional, Protocol

import httpx

from bookcatalog.core.config import settings
from bookcatalog.core.exceptions import ExternalServiceError, NotFoundError
from bookcatalog.core.logging import log
from bookcatalog.schemas.product_edit import SaveProductCommand


class CatalogService(Protocol):
    """What the editors need from the catalog backend"""

    async def get_edit_model(self, product_id: str) -> Dict[str, Any]:
        ...

    async def get_creation_model(self) -> Dict[str, Any]:
        ...

    async def save_product(self, command: SaveProductCommand) -> Dict[str, Any]:
        ...

    async def get_categories(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        ...

    async def update_category(self, category_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...


def _error_message(body: Any, fallback: str) -> str:
    """Pull a readable message out of the service's error shapes"""
    if not isinstance(body, dict):
        return fallback

    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        return ", ".join(str(error) for error in errors)
    if isinstance(errors, dict) and errors:
        messages = []
        for value in errors.values():
            messages.extend(value if isinstance(value, list) else [value])
        if messages:
            return ", ".join(str(message) for message in messages)
    return body.get("message") or body.get("title") or fallback


class HttpCatalogService:
    """
    httpx implementation of the catalog service.

    Responses come wrapped as ``{isSucceeded, message, errors, data}``.
    There is no retry here; a failed call surfaces as ExternalServiceError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.catalog_api_url).rstrip("/")
        token = token or settings.catalog_api_token
        self.client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.catalog_api_timeout,
            headers={"Authorization": f"Bearer {token}"} if token else {},
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "HttpCatalogService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            log.error(f"Catalog service request failed: {method} {url}: {e}")
            raise ExternalServiceError(f"Catalog service request failed: {e}", url=url)

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}

        if response.status_code == 404:
            raise NotFoundError(_error_message(body, f"{url} not found"), url=url)
        if response.status_code >= 400:
            message = _error_message(body, f"Catalog service returned {response.status_code}")
            log.warning(f"Catalog service error {response.status_code} on {method} {url}: {message}")
            raise ExternalServiceError(message, url=url, status=response.status_code)

        if isinstance(body, dict) and body.get("isSucceeded") is False:
            raise ExternalServiceError(_error_message(body, "Catalog service rejected the request"), url=url)
        return body

    @staticmethod
    def _data(body: Any) -> Any:
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    async def get_edit_model(self, product_id: str) -> Dict[str, Any]:
        """Product plus the categories, authors and publishers to edit it with"""
        body = await self._request("GET", f"/product/edit/{product_id.strip()}")
        return self._data(body) or {}

    async def get_creation_model(self) -> Dict[str, Any]:
        body = await self._request("GET", "/product/creation-model")
        return self._data(body) or {}

    async def save_product(self, command: SaveProductCommand) -> Dict[str, Any]:
        data, files = command.to_form_fields()
        log.info("Saving product", product_id=command.product_id, media_ops=len(command.media))
        # httpx only builds a multipart body when files are present
        body = await self._request("PUT", "/product/save", data=dict(data), files=files or None)
        return body if isinstance(body, dict) else {}

    async def get_categories(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        body = await self._request(
            "GET", "/category", params={"includeInactive": "true" if include_inactive else "false"}
        )
        data = self._data(body)
        return data if isinstance(data, list) else []

    async def update_category(self, category_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = await self._request("PUT", f"/category/{category_id}", json=payload)
        return body if isinstance(body, dict) else {}
