"""Netlify API client.

Only the four calls the publish flow needs: create a site, create a
content-addressed deploy, upload a required file, delete a site. Idempotent
calls retry transient failures with exponential backoff; site creation does
not, since a lost response may already have created the site.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from negosyo.config import settings
from negosyo.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class HostingError(UpstreamError):
    def __init__(self, detail: str, *, status_code: int | None = None, body: str = "", timeout: bool = False):
        self.upstream_status = status_code
        self.body = body
        super().__init__("hosting", detail, timeout=timeout)

    @property
    def is_name_collision(self) -> bool:
        if self.upstream_status != 422:
            return False
        lowered = self.body.lower()
        return any(word in lowered for word in ("subdomain", "name", "unique"))

    @property
    def is_not_found(self) -> bool:
        return self.upstream_status == 404


@dataclass(frozen=True)
class SiteInfo:
    id: str
    name: str
    url: str


@dataclass(frozen=True)
class DeployInfo:
    id: str
    required: tuple[str, ...]


def _site_from(data: dict) -> SiteInfo:
    url = data.get("ssl_url") or data.get("url") or ""
    if url.startswith("http://"):
        url = "https://" + url[len("http://"):]
    return SiteInfo(id=str(data.get("id", "")), name=str(data.get("name", "")), url=url)


class HostingClient:
    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        team_slug: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = settings.netlify_api_token if token is None else token
        self.base_url = (base_url or settings.netlify_api_url).rstrip("/")
        self.team_slug = settings.netlify_team_slug if team_slug is None else team_slug
        self.timeout = timeout or settings.hosting_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self.token:
            raise HostingError("Netlify API token is not configured")
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self.token}"},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, *, retry: bool = True, **kwargs) -> httpx.Response:
        attempts = settings.hosting_max_retries + 1 if retry else 1
        last_error: HostingError | None = None
        async with self._client() as client:
            for attempt in range(attempts):
                if attempt:
                    await asyncio.sleep(settings.hosting_retry_backoff_seconds * 2 ** (attempt - 1))
                try:
                    resp = await client.request(method, path, **kwargs)
                except httpx.TimeoutException:
                    last_error = HostingError(f"{method} {path} timed out", timeout=True)
                    continue
                except httpx.HTTPError as e:
                    last_error = HostingError(f"{method} {path} failed: {e}")
                    continue
                if resp.status_code >= 500:
                    last_error = HostingError(
                        f"{method} {path} returned {resp.status_code}",
                        status_code=resp.status_code,
                        body=resp.text,
                    )
                    continue
                if resp.status_code >= 400:
                    raise HostingError(
                        f"{method} {path} returned {resp.status_code}",
                        status_code=resp.status_code,
                        body=resp.text,
                    )
                return resp
        logger.warning("Hosting call gave up after %d attempt(s): %s", attempts, last_error.detail)
        raise last_error

    async def create_site(self, name: str) -> SiteInfo:
        path = f"/accounts/{self.team_slug}/sites" if self.team_slug else "/sites"
        resp = await self._request("POST", path, json={"name": name}, retry=False)
        site = _site_from(resp.json())
        logger.info("Created hosting site %s (%s)", site.name, site.id)
        return site

    async def get_site(self, site_id: str) -> SiteInfo:
        resp = await self._request("GET", f"/sites/{site_id}")
        return _site_from(resp.json())

    async def create_deploy(self, site_id: str, files: dict[str, str]) -> DeployInfo:
        """Announce a deploy by path -> sha1; the host answers which hashes it lacks."""
        resp = await self._request("POST", f"/sites/{site_id}/deploys", json={"files": files})
        data = resp.json()
        return DeployInfo(id=str(data.get("id", "")), required=tuple(data.get("required") or ()))

    async def upload_file(self, deploy_id: str, path: str, body: bytes) -> None:
        await self._request(
            "PUT",
            f"/deploys/{deploy_id}/files/{path.lstrip('/')}",
            content=body,
            headers={"Content-Type": "application/octet-stream"},
        )

    async def delete_site(self, site_id: str) -> bool:
        """Delete a site. Returns False when the host says it is already gone."""
        try:
            await self._request("DELETE", f"/sites/{site_id}")
        except HostingError as e:
            if e.is_not_found:
                return False
            raise
        return True


def get_hosting_client() -> HostingClient:
    return HostingClient()
