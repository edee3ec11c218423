"""Asynchronous HTTP client for the Atlas Command API."""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Dict, Mapping, Optional, Sequence, Union
from urllib.parse import quote

import aiohttp

from . import constants
from .components import (
    ComponentsInput,
    ObjectReferenceItem,
    components_to_record,
    validate_entity_components,
)
from .config import ClientConfig
from .errors import AtlasClientError, AtlasHTTPError
from .models import ChangedSinceResponse, ObjectContent

LOGGER = logging.getLogger(__name__)

JsonRecord = Dict[str, Any]
ReferenceInput = Union[ObjectReferenceItem, Mapping[str, Optional[str]]]


class AtlasCommandHttpClient:
    """Typed request builder for entities, tasks, objects and queries.

    Every call is a single request/response round trip. Pass ``session`` to
    route requests through a caller-owned :class:`aiohttp.ClientSession`;
    otherwise the client opens its own on first use and closes it in
    :meth:`aclose`. ``timeout`` (seconds) bounds every request, including
    those sent through an injected session.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = constants.DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if not base_url:
            raise ValueError("base_url cannot be empty")

        self.base_url = base_url[:-1] if base_url.endswith("/") else base_url
        self.token = token
        self.timeout = timeout
        self._timeout = aiohttp.ClientTimeout(total=timeout)

        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    @classmethod
    def from_config(
        cls, config: ClientConfig, *, session: Optional[aiohttp.ClientSession] = None
    ) -> "AtlasCommandHttpClient":
        return cls(
            config.base_url,
            token=config.token,
            session=session,
            timeout=config.timeout_seconds,
        )

    async def __aenter__(self) -> "AtlasCommandHttpClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the session if this client created it."""

        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------
    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        headers.update(self._multipart_headers())
        return headers

    def _multipart_headers(self) -> Dict[str, str]:
        # aiohttp sets the multipart Content-Type (with boundary) itself
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[JsonRecord] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        session = await self._ensure_session()
        url = self._url(path)
        LOGGER.debug("%s %s", method, url)

        async with session.request(
            method,
            url,
            headers=self._headers(),
            params=_query_params(params) if params else None,
            json=body,
            timeout=self._timeout,
        ) as response:
            await _raise_for_status(response, method, url)
            if response.status == 204:
                return None
            return await response.json(content_type=None)

    async def _multipart_request(self, path: str, form: aiohttp.FormData) -> Any:
        session = await self._ensure_session()
        url = self._url(path)
        LOGGER.debug("POST %s (multipart)", url)

        async with session.post(
            url, data=form, headers=self._multipart_headers(), timeout=self._timeout
        ) as response:
            await _raise_for_status(response, "POST", url)
            if response.status == 204:
                return None
            return await response.json(content_type=None)

    async def _fetch_content(self, path: str, *, as_text: bool) -> ObjectContent:
        session = await self._ensure_session()
        url = self._url(path)
        LOGGER.debug("GET %s", url)

        async with session.get(
            url, headers=self._headers(), timeout=self._timeout
        ) as response:
            await _raise_for_status(response, "GET", url)
            data: Union[bytes, str] = (
                await response.text() if as_text else await response.read()
            )
            return ObjectContent(
                data=data,
                content_type=response.headers.get("Content-Type") or None,
                content_length=_parse_content_length(
                    response.headers.get("Content-Length")
                ),
            )

    # ------------------------------------------------------------------
    # Service
    # ------------------------------------------------------------------
    async def get_root(self) -> Any:
        return await self._request("GET", "/")

    async def get_health(self) -> Any:
        return await self._request("GET", "/health")

    async def get_readiness(self) -> Any:
        return await self._request("GET", "/readiness")

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------
    async def list_entities(self, limit: int = 100, offset: int = 0) -> Any:
        return await self._request(
            "GET", "/entities", params={"limit": limit, "offset": offset}
        )

    async def get_entity(self, entity_id: str) -> Any:
        return await self._request("GET", f"/entities/{_segment(entity_id)}")

    async def get_entity_by_alias(self, alias: str) -> Any:
        return await self._request("GET", f"/entities/alias/{_segment(alias)}")

    async def create_entity(
        self,
        entity_id: str,
        entity_type: str,
        alias: str,
        subtype: str,
        components: Optional[ComponentsInput] = None,
    ) -> Any:
        """Create an entity.

        Component names are validated before anything is sent; an unknown
        name raises :class:`UnknownComponentKeyError` without a request.
        """

        payload: JsonRecord = {
            "entity_id": entity_id,
            "entity_type": entity_type,
            "alias": alias,
            "subtype": subtype,
        }
        if components is not None:
            validate_entity_components(components)
            payload["components"] = components_to_record(components)
        return await self._request("POST", "/entities", payload)

    async def update_entity(
        self,
        entity_id: str,
        components: Optional[ComponentsInput] = None,
        *,
        subtype: Optional[str] = None,
    ) -> Any:
        if components is None and subtype is None:
            raise ValueError(
                "AtlasCommandHttpClient.update_entity requires a components payload or subtype."
            )
        payload: JsonRecord = {}
        if components is not None:
            validate_entity_components(components)
            payload["components"] = components_to_record(components)
        if subtype is not None:
            payload["subtype"] = subtype
        return await self._request(
            "PATCH", f"/entities/{_segment(entity_id)}", payload
        )

    async def delete_entity(self, entity_id: str) -> Any:
        return await self._request("DELETE", f"/entities/{_segment(entity_id)}")

    async def update_entity_telemetry(
        self,
        entity_id: str,
        *,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        altitude_m: Optional[float] = None,
        speed_m_s: Optional[float] = None,
        heading_deg: Optional[float] = None,
    ) -> Any:
        payload = _drop_none(
            {
                "latitude": latitude,
                "longitude": longitude,
                "altitude_m": altitude_m,
                "speed_m_s": speed_m_s,
                "heading_deg": heading_deg,
            }
        )
        return await self._request(
            "PATCH", f"/entities/{_segment(entity_id)}/telemetry", payload
        )

    async def checkin_entity(
        self,
        entity_id: str,
        *,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        altitude_m: Optional[float] = None,
        speed_m_s: Optional[float] = None,
        heading_deg: Optional[float] = None,
        status: Optional[str] = None,
        status_filter: str = constants.DEFAULT_CHECKIN_STATUS_FILTER,
        limit: int = 10,
        since: Optional[str] = None,
        fields: Optional[str] = None,
    ) -> Any:
        """Report telemetry and fetch the entity's outstanding tasks in one call."""

        payload = _drop_none(
            {
                "latitude": latitude,
                "longitude": longitude,
                "altitude_m": altitude_m,
                "speed_m_s": speed_m_s,
                "heading_deg": heading_deg,
                "status": status,
            }
        )
        params = {
            "status_filter": status_filter,
            "limit": limit,
            "since": since,
            "fields": fields,
        }
        return await self._request(
            "POST", f"/entities/{_segment(entity_id)}/checkin", payload, params
        )

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------
    async def list_tasks(
        self, limit: int = 25, status: Optional[str] = None, offset: int = 0
    ) -> Any:
        return await self._request(
            "GET", "/tasks", params={"limit": limit, "status": status, "offset": offset}
        )

    async def get_task(self, task_id: str) -> Any:
        return await self._request("GET", f"/tasks/{_segment(task_id)}")

    async def create_task(
        self,
        task_id: str,
        components: Optional[ComponentsInput] = None,
        *,
        status: Optional[str] = constants.DEFAULT_TASK_STATUS,
        entity_id: Optional[str] = None,
        extra: Optional[JsonRecord] = None,
    ) -> Any:
        payload: JsonRecord = {
            "task_id": task_id,
            "status": status or constants.DEFAULT_TASK_STATUS,
        }
        if entity_id is not None:
            payload["entity_id"] = entity_id
        if components is not None:
            payload["components"] = components_to_record(components)
        if extra is not None:
            payload["extra"] = extra
        return await self._request("POST", "/tasks", payload)

    async def update_task(
        self,
        task_id: str,
        components: Optional[ComponentsInput] = None,
        *,
        status: Optional[str] = None,
        entity_id: Optional[str] = None,
        extra: Optional[JsonRecord] = None,
    ) -> Any:
        if components is None and status is None and entity_id is None and extra is None:
            raise ValueError(
                "AtlasCommandHttpClient.update_task requires a components payload or options."
            )
        payload: JsonRecord = {}
        if components is not None:
            payload["components"] = components_to_record(components)
        if status is not None:
            payload["status"] = status
        if entity_id is not None:
            payload["entity_id"] = entity_id
        if extra is not None:
            payload["extra"] = extra
        return await self._request("PATCH", f"/tasks/{_segment(task_id)}", payload)

    async def delete_task(self, task_id: str) -> Any:
        return await self._request("DELETE", f"/tasks/{_segment(task_id)}")

    async def get_tasks_by_entity(
        self,
        entity_id: str,
        limit: int = 25,
        status: Optional[str] = None,
        offset: int = 0,
    ) -> Any:
        return await self._request(
            "GET",
            f"/entities/{_segment(entity_id)}/tasks",
            params={"limit": limit, "status": status, "offset": offset},
        )

    async def acknowledge_task(self, task_id: str) -> Any:
        return await self._request(
            "POST", f"/tasks/{_segment(task_id)}/acknowledge", {}
        )

    async def start_task(self, task_id: str) -> Any:
        return await self.acknowledge_task(task_id)

    async def complete_task(
        self, task_id: str, result: Optional[JsonRecord] = None
    ) -> Any:
        payload: JsonRecord = {}
        if result is not None:
            payload["result"] = result
        return await self._request(
            "POST", f"/tasks/{_segment(task_id)}/complete", payload
        )

    async def transition_task_status(
        self,
        task_id: str,
        status: str,
        *,
        validate: bool = True,
        extra: Optional[JsonRecord] = None,
    ) -> Any:
        payload: JsonRecord = {"status": status, "validate": validate}
        if extra is not None:
            payload["extra"] = extra
        return await self._request(
            "POST", f"/tasks/{_segment(task_id)}/status", payload
        )

    async def fail_task(
        self,
        task_id: str,
        error_message: Optional[str] = None,
        error_details: Optional[JsonRecord] = None,
    ) -> Any:
        payload = _drop_none(
            {"error_message": error_message, "error_details": error_details}
        )
        return await self._request("POST", f"/tasks/{_segment(task_id)}/fail", payload)

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------
    async def download_object(self, object_id: str) -> ObjectContent:
        """Fetch an object's raw bytes along with its content headers."""

        return await self._fetch_content(
            f"/objects/{_segment(object_id)}/download", as_text=False
        )

    async def view_object(self, object_id: str) -> ObjectContent:
        """Fetch an object's body decoded as text."""

        return await self._fetch_content(
            f"/objects/{_segment(object_id)}/view", as_text=True
        )

    async def list_objects(
        self,
        limit: int = 100,
        offset: int = 0,
        content_type: Optional[str] = None,
        object_type: Optional[str] = None,
    ) -> Any:
        return await self._request(
            "GET",
            "/objects",
            params={
                "limit": limit,
                "offset": offset,
                "content_type": content_type,
                "type": object_type,
            },
        )

    async def get_object(self, object_id: str) -> Any:
        return await self._request("GET", f"/objects/{_segment(object_id)}")

    async def create_object(
        self,
        file: Union[bytes, BinaryIO],
        object_id: str,
        *,
        content_type: Optional[str] = None,
        filename: str = "upload.bin",
        usage_hint: Optional[str] = None,
        referenced_by: Optional[Sequence[ReferenceInput]] = None,
    ) -> Any:
        """Upload a file and attach it to entities or tasks.

        The upload is a multipart POST; each entry of ``referenced_by`` is then
        linked through :meth:`add_object_reference` using the ``object_id``
        the server returned.
        """

        if not content_type:
            raise ValueError("AtlasCommandHttpClient.create_object requires a content type.")

        form = aiohttp.FormData()
        form.add_field("object_id", object_id)
        form.add_field("file", file, filename=filename, content_type=content_type)
        if usage_hint:
            form.add_field("usage_hint", usage_hint)

        stored = await self._multipart_request("/objects/upload", form)

        if referenced_by:
            stored_object_id = stored.get("object_id") if isinstance(stored, dict) else None
            if stored_object_id is None:
                raise AtlasClientError(
                    "AtlasCommandHttpClient.create_object expected the upload response "
                    "to include an object_id before attaching references."
                )
            for reference in referenced_by:
                item = _reference_dict(reference)
                await self.add_object_reference(
                    stored_object_id, item.get("entity_id"), item.get("task_id")
                )

        return stored

    async def create_object_metadata(
        self,
        object_id: str,
        *,
        path: Optional[str] = None,
        bucket: Optional[str] = None,
        size_bytes: Optional[int] = None,
        content_type: Optional[str] = None,
        object_type: Optional[str] = None,
        usage_hints: Optional[Sequence[str]] = None,
        referenced_by: Optional[Sequence[ReferenceInput]] = None,
        extra: Optional[JsonRecord] = None,
    ) -> Any:
        payload = _drop_none(
            {
                "object_id": object_id,
                "path": path,
                "bucket": bucket,
                "size_bytes": size_bytes,
                "content_type": content_type,
                "type": object_type,
                "usage_hints": list(usage_hints) if usage_hints is not None else None,
                "referenced_by": _references(referenced_by),
                "extra": extra,
            }
        )
        return await self._request("POST", "/objects", payload)

    async def update_object(
        self,
        object_id: str,
        usage_hints: Optional[Sequence[str]] = None,
        referenced_by: Optional[Sequence[ReferenceInput]] = None,
    ) -> Any:
        if usage_hints is None and referenced_by is None:
            raise ValueError(
                "AtlasCommandHttpClient.update_object requires usage_hints or referenced_by to make an update."
            )
        payload: JsonRecord = {}
        if usage_hints is not None:
            payload["usage_hints"] = list(usage_hints)
        if referenced_by is not None:
            payload["referenced_by"] = _references(referenced_by)
        return await self._request("PATCH", f"/objects/{_segment(object_id)}", payload)

    async def delete_object(self, object_id: str) -> Any:
        return await self._request("DELETE", f"/objects/{_segment(object_id)}")

    async def get_objects_by_entity(
        self, entity_id: str, limit: int = 50, offset: int = 0
    ) -> Any:
        return await self._request(
            "GET",
            f"/entities/{_segment(entity_id)}/objects",
            params={"limit": limit, "offset": offset},
        )

    async def get_objects_by_task(
        self, task_id: str, limit: int = 50, offset: int = 0
    ) -> Any:
        return await self._request(
            "GET",
            f"/tasks/{_segment(task_id)}/objects",
            params={"limit": limit, "offset": offset},
        )

    async def add_object_reference(
        self,
        object_id: str,
        entity_id: Optional[str] = None,
        task_id: Optional[str] = None,
    ) -> Any:
        payload = _drop_none({"entity_id": entity_id, "task_id": task_id})
        return await self._request(
            "POST", f"/objects/{_segment(object_id)}/references", payload
        )

    async def remove_object_reference(
        self,
        object_id: str,
        entity_id: Optional[str] = None,
        task_id: Optional[str] = None,
    ) -> Any:
        payload = _drop_none({"entity_id": entity_id, "task_id": task_id})
        return await self._request(
            "DELETE", f"/objects/{_segment(object_id)}/references", payload
        )

    async def find_orphaned_objects(self, limit: int = 100) -> Any:
        return await self._request("GET", "/objects/orphaned", params={"limit": limit})

    async def get_object_references(self, object_id: str) -> Any:
        return await self._request(
            "GET", f"/objects/{_segment(object_id)}/references/info"
        )

    async def validate_object_references(self, object_id: str) -> Any:
        return await self._request(
            "GET", f"/objects/{_segment(object_id)}/references/validate"
        )

    async def cleanup_object_references(self, object_id: str) -> Any:
        return await self._request(
            "POST", f"/objects/{_segment(object_id)}/references/cleanup", {}
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    async def get_changed_since(
        self, since: str, limit_per_type: Optional[int] = None
    ) -> ChangedSinceResponse:
        """Return records created, updated or deleted after ``since`` (ISO 8601)."""

        data = await self._request(
            "GET",
            "/queries/changed-since",
            params={"since": since, "limit_per_type": limit_per_type},
        )
        return ChangedSinceResponse.from_dict(data or {})

    async def get_full_dataset(
        self,
        *,
        entity_limit: Optional[int] = None,
        task_limit: Optional[int] = None,
        object_limit: Optional[int] = None,
    ) -> Any:
        return await self._request(
            "GET",
            "/queries/full",
            params={
                "entity_limit": entity_limit,
                "task_limit": task_limit,
                "object_limit": object_limit,
            },
        )


async def _raise_for_status(
    response: aiohttp.ClientResponse, method: str, url: str
) -> None:
    if 200 <= response.status < 300:
        return
    detail = await response.text()
    LOGGER.warning(
        "Atlas Command %s %s failed with status %d: %s",
        method,
        url,
        response.status,
        detail.strip(),
    )
    raise AtlasHTTPError(response.status, detail)


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _query_params(params: Mapping[str, Any]) -> Dict[str, str]:
    query: Dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        else:
            query[key] = str(value)
    return query


def _drop_none(payload: Mapping[str, Any]) -> JsonRecord:
    return {key: value for key, value in payload.items() if value is not None}


def _reference_dict(reference: ReferenceInput) -> Dict[str, str]:
    if isinstance(reference, ObjectReferenceItem):
        return _drop_none(reference.to_dict())
    return _drop_none(reference)


def _references(
    references: Optional[Sequence[ReferenceInput]],
) -> Optional[list[Dict[str, str]]]:
    if references is None:
        return None
    return [_reference_dict(reference) for reference in references]


def _parse_content_length(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None
