from __future__ import annotations

import logging
from typing import Any, Final, Optional

import requests

from simple_autoscaler.config import HTTP_TIMEOUT_SEC
from simple_autoscaler.core.utilization_aggregator import build_snapshot
from simple_autoscaler.domain.app_snapshot import AppSnapshot, InstanceSample
from simple_autoscaler.domain.errors import FetchError, ScaleError
from simple_autoscaler.domain.platform_client import PlatformClient

logger = logging.getLogger(__name__)


class CloudFoundryClient(PlatformClient):
    _APPS_PATH: Final[str] = "/v2/apps"
    _STARTED: Final[str] = "STARTED"

    def __init__(
            self,
            base_url: str,
            access_token: str = "",
            timeout: float = HTTP_TIMEOUT_SEC,
            verify_ssl: bool = True,
            session: Optional[requests.Session] = None,
    ) -> None:
        self.base = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.verify = verify_ssl
        if access_token:
            self.session.headers["Authorization"] = f"bearer {access_token}"

    # ─────────────────────────── fetch ────────────────────────────
    def _get(self, path: str) -> dict[str, Any]:
        try:
            r = self.session.get(f"{self.base}{path}", timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"GET {path} failed: {exc}") from exc

        try:
            data = r.json()
        except ValueError as exc:
            raise FetchError(f"GET {path}: response is not JSON") from exc
        if not isinstance(data, dict):
            raise FetchError(f"GET {path}: unexpected response {data!r}")
        return data

    def _list_apps(self) -> list[dict[str, Any]]:
        resources: list[dict[str, Any]] = []
        next_url: Optional[str] = self._APPS_PATH
        while next_url:
            page = self._get(next_url)
            try:
                resources.extend(page["resources"])
            except (KeyError, TypeError) as exc:
                raise FetchError(f"Invalid app list page: {page}") from exc
            next_url = page.get("next_url")
        return resources

    def _name_of(self, path: str, cache: dict[str, tuple[str, str]]) -> tuple[str, str]:
        """Returns (name, parent organization url) of a space or org, cached per fetch."""
        if path not in cache:
            entity = self._get(path).get("entity") or {}
            try:
                cache[path] = (entity["name"], entity.get("organization_url", ""))
            except (KeyError, TypeError, AttributeError) as exc:
                raise FetchError(f"Invalid response for {path}: {entity!r}") from exc
        return cache[path]

    def _fetch_stats(self, guid: str) -> dict[str, InstanceSample]:
        data = self._get(f"{self._APPS_PATH}/{guid}/stats")
        samples = {}
        try:
            for idx, instance in data.items():
                stats = instance.get("stats") or {}
                usage = stats.get("usage") or {}
                samples[idx] = InstanceSample(
                    state=instance.get("state", ""),
                    cpu=float(usage.get("cpu", 0.0)),
                    mem=int(usage.get("mem", 0)),
                    mem_quota=int(stats.get("mem_quota", 0)),
                )
        except (AttributeError, TypeError, ValueError) as exc:
            raise FetchError(f"Invalid stats for app {guid}: {data}") from exc
        return samples

    def fetch_apps(self) -> dict[str, AppSnapshot]:
        cache: dict[str, tuple[str, str]] = {}
        apps: dict[str, AppSnapshot] = {}

        for resource in self._list_apps():
            try:
                guid = resource["metadata"]["guid"]
                entity = resource["entity"]
                name = entity["name"]
                space_url = entity["space_url"]
                state = entity.get("state", "")
                desired = int(entity.get("instances", 0))
            except (KeyError, TypeError, ValueError) as exc:
                raise FetchError(f"Invalid app resource: {resource}") from exc

            space, org_url = self._name_of(space_url, cache)
            if not org_url or not isinstance(org_url, str):
                raise FetchError(f"Space {space_url} has no organization")
            org, _ = self._name_of(org_url, cache)

            started = state == self._STARTED
            samples = self._fetch_stats(guid) if started else None
            apps[guid] = build_snapshot(guid, name, space, org, started, desired, samples)

        logger.info(f"Fetched {len(apps)} apps from {self.base}")
        return apps

    # ─────────────────────────── scale ────────────────────────────
    def scale(self, app: AppSnapshot, desired: int) -> None:
        path = f"{self._APPS_PATH}/{app.guid}"
        try:
            r = self.session.put(
                f"{self.base}{path}",
                params={"async": "true"},
                json={"instances": desired},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ScaleError(f"sending scaling request: {exc}") from exc

        if r.status_code != 201:
            raise ScaleError(f"scaling request rejected: {r.status_code} {r.text}", status_code=r.status_code)
