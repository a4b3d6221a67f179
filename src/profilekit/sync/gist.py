"""
Gist client -- the remote JSON document stores.

    GET   /gists/{id}   ->  {"files": {name: {"content": ...}}}
    PATCH /gists/{id}   <-  {"files": {name: {"content": ...} | null}}

A ``null`` file value in a PATCH deletes that file. Reads of a public
gist work without a token; writes, and any access to a secret gist,
need one.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from ..errors import MalformedRemote, RemoteError, RemoteUnreachable

logger = logging.getLogger("profilekit.sync.gist")

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


class GistClient:
    """Thin synchronous wrapper over the gist REST API.

    Every request carries an explicit timeout. Transport failures map to
    ``RemoteUnreachable``, non-2xx answers to ``RemoteError``.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "Content-Type": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        url: str,
        data: Optional[dict] = None,
    ) -> requests.Response:
        try:
            resp = self._session.request(
                method, url, headers=self._headers(), json=data, timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise RemoteUnreachable(f"{method} {url}: {exc}") from exc
        except requests.RequestException as exc:
            raise RemoteError(f"{method} {url}: {exc}") from exc

        if resp.status_code >= 400:
            raise RemoteError(
                f"{method} {url}: {resp.status_code} {resp.text[:200]}",
                status_code=resp.status_code,
            )
        return resp

    def _api_call(
        self,
        method: str,
        endpoint: str,
        data: Optional[dict] = None,
    ) -> dict[str, Any]:
        resp = self._request(method, f"{self.api_url}{endpoint}", data=data)
        try:
            body = resp.json()
        except ValueError as exc:
            raise MalformedRemote(f"{method} {endpoint}: response is not JSON") from exc
        if not isinstance(body, dict):
            raise MalformedRemote(f"{method} {endpoint}: expected a JSON object")
        return body

    def get_files(self, gist_id: str) -> dict[str, str]:
        """Fetch every file of a gist.

        Files the API reports as truncated are fetched in full from
        their ``raw_url``.

        Args:
            gist_id: Gist identifier.

        Returns:
            dict: Logical name -> content.

        Raises:
            MalformedRemote: If the document has no ``files`` mapping.
        """
        body = self._api_call("GET", f"/gists/{gist_id}")
        files = body.get("files")
        if not isinstance(files, dict):
            raise MalformedRemote(f"Gist {gist_id} has no 'files' mapping")

        contents: dict[str, str] = {}
        for name, meta in files.items():
            if not isinstance(meta, dict):
                raise MalformedRemote(f"Gist {gist_id}: file {name!r} is not an object")
            content = meta.get("content") or ""
            if meta.get("truncated") and meta.get("raw_url"):
                logger.info("Fetching truncated file %s from raw_url", name)
                content = self._request("GET", meta["raw_url"]).text
            contents[name] = content
        return contents

    def list_files(self, gist_id: str) -> set[str]:
        """Names of the files currently in a gist."""
        body = self._api_call("GET", f"/gists/{gist_id}")
        files = body.get("files")
        if not isinstance(files, dict):
            raise MalformedRemote(f"Gist {gist_id} has no 'files' mapping")
        return set(files)

    def update_files(self, gist_id: str, files: dict[str, Optional[dict[str, str]]]) -> None:
        """Apply content updates and deletions in one PATCH.

        Args:
            gist_id: Gist identifier.
            files: Logical name -> ``{"content": ...}``, or None to delete.
        """
        self._api_call("PATCH", f"/gists/{gist_id}", data={"files": files})
        logger.info("Updated gist %s (%d file(s))", gist_id, len(files))
