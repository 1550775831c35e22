"""Azure DevOps work-item target."""

from __future__ import annotations

import base64
import json
import logging
from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx

from archsync.contracts.exceptions import AuthenticationError, ProviderConnectionError, ProviderError
from archsync.contracts.hierarchy import ItemType
from archsync.contracts.patch import PatchOperation, patch_document
from archsync.contracts.target import CreatedItem, WorkItemTarget
from archsync.targets.azure_devops._retrying_transport import RetryingTransport

_LOG = logging.getLogger(__name__)

API_VERSION = "7.1"
DEFAULT_BASE_URL = "https://dev.azure.com"
JSON_PATCH_CONTENT_TYPE = "application/json-patch+json"

_ALL_ITEMS_WIQL = "SELECT [System.Id] FROM WorkItems WHERE [System.TeamProject] = '{project}'"


def encode_pat(token: str) -> str:
    """Basic-auth credential for a PAT (empty user name)."""
    return base64.b64encode(f":{token}".encode()).decode("ascii")


def _segment(value: str) -> str:
    return quote(value, safe="")


class AzureDevOpsTarget(WorkItemTarget):
    """Creates, queries and deletes work items through the Azure DevOps REST API.

    Use as an async context manager; the HTTP client only exists inside it.
    """

    def __init__(
        self,
        *,
        organization: str,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        max_retries: int = 0,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._organization = organization
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._max_retries = max_retries
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def organization(self) -> str:
        return self._organization

    async def __aenter__(self) -> AzureDevOpsTarget:
        self._open_transport()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _open_transport(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/{_segment(self._organization)}/",
            headers={"Authorization": f"Basic {encode_pat(self._token)}", "Accept": "application/json"},
            transport=RetryingTransport(transport=self._transport, max_retries=self._max_retries),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            timeout=httpx.Timeout(self._timeout),
        )

    def work_item_url(self, item_id: str) -> str:
        return f"{self._base_url}/{self._organization}/_apis/wit/workitems/{item_id}"

    async def create_item(self, project: str, item_type: ItemType, patch: list[PatchOperation]) -> CreatedItem:
        type_segment = quote(f"${item_type.work_item_type}", safe="$")
        payload = await self._request(
            "POST",
            f"{_segment(project)}/_apis/wit/workitems/{type_segment}",
            content=json.dumps(patch_document(patch)),
            headers={"Content-Type": JSON_PATCH_CONTENT_TYPE},
        )
        item_id = payload.get("id")
        if item_id is None:
            raise ProviderError("Azure DevOps create response missing work item id")
        html_link = ((payload.get("_links") or {}).get("html") or {}).get("href")
        url = payload.get("url") or html_link or self.work_item_url(str(item_id))
        _LOG.debug("Created %s %s in %s", item_type.work_item_type, item_id, project)
        return CreatedItem(id=str(item_id), url=url)

    async def query_item_ids(self, project: str) -> list[int]:
        wiql = _ALL_ITEMS_WIQL.format(project=project.replace("'", "''"))
        payload = await self._request("POST", f"{_segment(project)}/_apis/wit/wiql", json_body={"query": wiql})
        return [int(item["id"]) for item in payload.get("workItems", []) if "id" in item]

    async def delete_items(self, project: str, ids: list[int], *, permanent: bool = True) -> None:
        if not ids:
            return
        await self._request(
            "POST",
            f"{_segment(project)}/_apis/wit/workitemsdelete",
            json_body={"ids": ids, "destroy": permanent},
        )

    async def get_process_template_name(self, project: str) -> str | None:
        payload = await self._request(
            "GET",
            f"_apis/projects/{_segment(project)}",
            params={"includeCapabilities": "true"},
        )
        template = payload.get("capabilities", {}).get("processTemplate", {})
        name = template.get("templateName")
        if name:
            return str(name)
        type_id = template.get("templateTypeId")
        if not type_id:
            return None
        processes = await self._request("GET", "_apis/work/processes")
        for process in processes.get("value", []):
            if type_id in (process.get("typeId"), process.get("id")):
                return process.get("name")
        return None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        content: str | None = None,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        if self._client is None:
            raise ProviderError("Target is not initialized. Use 'async with'.")
        try:
            response = await self._client.request(
                method,
                path,
                json=json_body,
                content=content,
                params={"api-version": API_VERSION, **(params or {})},
                headers=headers,
            )
        except httpx.TransportError as exc:
            raise ProviderConnectionError(f"Azure DevOps request failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Azure DevOps rejected the credentials ({response.status_code}); verify the PAT token",
                status_code=response.status_code,
            )
        if response.is_error:
            raise ProviderError(
                f"Azure DevOps {method} {path} failed ({response.status_code}): {self._error_message(response)}",
                status_code=response.status_code,
            )
        if "text/html" in response.headers.get("content-type", ""):
            raise AuthenticationError(
                "Azure DevOps returned HTML instead of JSON; the PAT token is likely invalid or expired",
                status_code=response.status_code,
            )
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(f"Azure DevOps returned invalid JSON for {method} {path}") from exc
        return payload if isinstance(payload, dict) else {"value": payload}

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text[:500]
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        return response.text[:500]
