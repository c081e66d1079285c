from __future__ import annotations
import httpx
from typing import Any, Dict, List, Optional
from .errors import BackendError
from .settings import settings


class SupabaseClient:
	"""Thin REST client for the hosted backend (PostgREST tables + auth).

	Requests carry the signed-in user's access token so the backend's row level
	security decides what the caller may read and write.
	"""

	def __init__(
		self,
		base_url: Optional[str] = None,
		anon_key: Optional[str] = None,
		*,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.base_url = (base_url or settings.supabase_url or "").rstrip("/")
		self.anon_key = anon_key or settings.supabase_anon_key
		if not self.base_url or not self.anon_key:
			raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be configured")
		self._client = httpx.AsyncClient(
			base_url=self.base_url,
			timeout=settings.http_timeout_seconds,
			transport=transport,
		)

	def _headers(self, access_token: Optional[str]) -> Dict[str, str]:
		return {
			"apikey": self.anon_key,
			"Authorization": f"Bearer {access_token or self.anon_key}",
			"Content-Type": "application/json",
		}

	async def _request(self, method: str, path: str, *, access_token: Optional[str], **kwargs: Any) -> httpx.Response:
		headers = {**self._headers(access_token), **kwargs.pop("headers", {})}
		try:
			r = await self._client.request(method, path, headers=headers, **kwargs)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			response = http_err.response
			raise BackendError(
				f"Hosted backend returned {response.status_code} for {method} {path}",
				status_code=response.status_code,
				detail=_error_message(response),
			) from http_err
		except httpx.RequestError as net_err:
			raise BackendError(f"Hosted backend unreachable: {net_err}", status_code=502) from net_err
		return r

	async def insert(self, table: str, row: Dict[str, Any], *, access_token: Optional[str] = None) -> Dict[str, Any]:
		r = await self._request(
			"POST",
			f"/rest/v1/{table}",
			access_token=access_token,
			json=row,
			headers={"Prefer": "return=representation"},
		)
		data = r.json()
		if isinstance(data, list):
			if not data:
				raise BackendError(f"Insert into {table} returned no rows")
			return data[0]
		return data

	async def select(
		self,
		table: str,
		*,
		filters: Optional[Dict[str, Any]] = None,
		order: Optional[str] = None,
		limit: Optional[int] = None,
		access_token: Optional[str] = None,
	) -> List[Dict[str, Any]]:
		params: Dict[str, Any] = {"select": "*"}
		for column, value in (filters or {}).items():
			params[column] = f"eq.{value}"
		if order:
			params["order"] = order
		if limit is not None:
			params["limit"] = int(limit)
		r = await self._request("GET", f"/rest/v1/{table}", access_token=access_token, params=params)
		data = r.json()
		if not isinstance(data, list):
			raise BackendError(f"Unexpected response from {table}: {r.text}")
		return data

	async def aclose(self) -> None:
		await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
	try:
		data = response.json()
	except ValueError:
		return response.text or response.reason_phrase
	if isinstance(data, dict):
		for key in ("message", "msg", "error_description", "error"):
			if data.get(key):
				return str(data[key])
	return response.text
