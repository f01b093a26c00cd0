"""REST client for the version-control and build services.

Implements the ``GitClient`` and ``BuildClient`` protocols used by the core
over plain HTTPS with httpx.  Only the three calls refsync needs are
covered:

- ``GET  {collection}/{project}/_apis/git/repositories/{repo}/refs``
- ``POST {collection}/{project}/_apis/git/repositories/{repo}/refs``
- ``GET  {collection}/{project}/_apis/build/builds/{build_id}``

Every call is attempted exactly once.  Transport failures and non-2xx
responses raise ``DevOpsApiError``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import httpx

from refsync.config import RefSyncSettings
from refsync.models.artifacts import Build
from refsync.models.refs import GitRef, RefUpdateOutcome, RefUpdateRequest

logger = logging.getLogger(__name__)


class DevOpsApiError(RuntimeError):
    """Raised when a REST call fails at the transport or HTTP level."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@runtime_checkable
class GitClient(Protocol):
    """Ref listing and ref updates for one repository at a time."""

    def get_refs(self, repository_id: str) -> list[GitRef] | None:
        ...

    def update_refs(
        self, requests: Sequence[RefUpdateRequest], repository_id: str
    ) -> list[RefUpdateOutcome] | None:
        ...


@runtime_checkable
class BuildClient(Protocol):
    """Build record lookup."""

    def get_build(self, build_id: int) -> Build | None:
        ...


class DevOpsClient:
    """httpx-backed implementation of ``GitClient`` and ``BuildClient``.

    Parameters
    ----------
    base_url:
        Collection URL, e.g. ``https://dev.azure.com/contoso``.
    access_token:
        OAuth or personal access token, sent as basic auth with an empty user.
    project:
        Project name or id.  Required for build lookups; optional for git
        calls because repository ids are globally unique.
    api_version:
        Value of the ``api-version`` query parameter.
    timeout:
        Per-request timeout in seconds.
    transport:
        Optional httpx transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        *,
        project: str = "",
        api_version: str = "6.0",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._project = project.strip("/")
        self._api_version = api_version
        self._client = httpx.Client(
            base_url=base_url.rstrip("/") + "/",
            auth=("", access_token),
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: RefSyncSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> DevOpsClient:
        """Build a client from validated settings."""
        settings.require_connection()
        return cls(
            settings.api_base_url,
            settings.access_token,
            project=settings.project,
            api_version=settings.api_version,
            timeout=settings.request_timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> DevOpsClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # GitClient
    # ------------------------------------------------------------------

    def get_refs(self, repository_id: str) -> list[GitRef] | None:
        data = self._request("GET", self._refs_path(repository_id))
        items = self._values(data)
        if items is None:
            return None
        return [GitRef.model_validate(item) for item in items]

    def update_refs(
        self, requests: Sequence[RefUpdateRequest], repository_id: str
    ) -> list[RefUpdateOutcome] | None:
        body = [r.model_dump(by_alias=True) for r in requests]
        data = self._request("POST", self._refs_path(repository_id), json=body)
        items = self._values(data)
        if items is None:
            return None
        return [RefUpdateOutcome.model_validate(item) for item in items]

    # ------------------------------------------------------------------
    # BuildClient
    # ------------------------------------------------------------------

    def get_build(self, build_id: int) -> Build | None:
        data = self._request("GET", self._path(f"_apis/build/builds/{build_id}"))
        if not data:
            return None
        return Build.model_validate(data)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _path(self, api_path: str) -> str:
        if self._project:
            return f"{self._project}/{api_path}"
        return api_path

    def _refs_path(self, repository_id: str) -> str:
        return self._path(f"_apis/git/repositories/{repository_id}/refs")

    @staticmethod
    def _values(data: Any) -> list[dict[str, Any]] | None:
        if data is None:
            return None
        if isinstance(data, list):
            return data
        return data.get("value")

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        logger.debug("%s %s", method, path)
        try:
            resp = self._client.request(
                method, path, params={"api-version": self._api_version}, **kwargs
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DevOpsApiError(
                f"{method} {path} failed with HTTP {exc.response.status_code}: "
                f"{exc.response.text[:200]}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            raise DevOpsApiError(f"{method} {path} failed: {exc}") from exc

        if not resp.content:
            return None
        return resp.json()
