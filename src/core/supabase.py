from __future__ import annotations

from threading import Lock
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import httpx
from pydantic_core import to_jsonable_python

from src.core.config import get_settings

IN_FILTER_CHUNK_SIZE = 100
SCAN_PAGE_SIZE = 1000


def chunk_values(values: List[Any], size: int = IN_FILTER_CHUNK_SIZE) -> List[List[Any]]:
    return [values[start : start + size] for start in range(0, len(values), size)]


class SupabaseClient:
    _shared_client: httpx.Client | None = None
    _client_lock: Lock = Lock()

    def __init__(self) -> None:
        settings = get_settings()
        self.base_url = settings.supabase_url.rstrip("/") + "/rest/v1"
        self.api_key = settings.supabase_service_role_key or settings.supabase_anon_key
        if not self.api_key:
            raise ValueError("Supabase API key is required")
        self._client = self._get_shared_client()

    @classmethod
    def _get_shared_client(cls) -> httpx.Client:
        if cls._shared_client is not None:
            return cls._shared_client
        with cls._client_lock:
            if cls._shared_client is None:
                cls._shared_client = httpx.Client(
                    timeout=30.0,
                    limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
                )
        return cls._shared_client

    def _headers(self, prefer: Optional[str] = None, with_body: bool = False) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    @staticmethod
    def _rows(response: httpx.Response) -> List[Dict[str, Any]]:
        if not response.content:
            return []
        data = response.json()
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return [data]
        return []

    def select(
        self,
        table: str,
        select: str,
        filters: Optional[List[Tuple[str, str]]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order: Optional[str] = None,
        count: bool | str = False,
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        params: List[Tuple[str, str]] = [("select", select)]
        if filters:
            params.extend(filters)
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset is not None:
            params.append(("offset", str(offset)))
        if order:
            params.append(("order", order))

        prefer = None
        if count:
            prefer = "count=exact" if count is True else f"count={count}"

        url = f"{self.base_url}/{table}?{urlencode(params, doseq=True)}"
        response = self._client.get(url, headers=self._headers(prefer))
        response.raise_for_status()
        total_count = None
        if count and "content-range" in response.headers:
            content_range = response.headers["content-range"]
            if "/" in content_range:
                tail = content_range.split("/")[-1]
                total_count = int(tail) if tail.isdigit() else None
        return response.json(), total_count

    def select_all(
        self,
        table: str,
        select: str,
        filters: Optional[List[Tuple[str, str]]] = None,
        order: Optional[str] = None,
        page_size: int = SCAN_PAGE_SIZE,
    ) -> List[Dict[str, Any]]:
        """Read every matching row, one offset page at a time until a short page."""
        rows: List[Dict[str, Any]] = []
        offset = 0
        while True:
            batch, _ = self.select(
                table=table,
                select=select,
                filters=filters,
                limit=page_size,
                offset=offset,
                order=order,
            )
            rows.extend(batch)
            if len(batch) < page_size:
                return rows
            offset += page_size

    def insert(self, table: str, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        response = self._client.post(
            f"{self.base_url}/{table}",
            headers=self._headers("return=representation", with_body=True),
            json=to_jsonable_python(payload),
        )
        response.raise_for_status()
        return self._rows(response)

    def update(
        self,
        table: str,
        payload: Dict[str, Any],
        filters: List[Tuple[str, str]],
    ) -> List[Dict[str, Any]]:
        if not filters:
            raise ValueError("Refusing to update without filters")
        url = f"{self.base_url}/{table}?{urlencode(filters, doseq=True)}"
        response = self._client.patch(
            url,
            headers=self._headers("return=representation", with_body=True),
            json=to_jsonable_python(payload),
        )
        response.raise_for_status()
        return self._rows(response)

    def delete(self, table: str, filters: List[Tuple[str, str]]) -> List[Dict[str, Any]]:
        if not filters:
            raise ValueError("Refusing to delete without filters")
        url = f"{self.base_url}/{table}?{urlencode(filters, doseq=True)}"
        response = self._client.delete(url, headers=self._headers("return=representation"))
        response.raise_for_status()
        return self._rows(response)
