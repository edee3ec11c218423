"""Records returned by the Atlas Command API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass(slots=True)
class Entity:
    """An asset, track or geofeature.

    ``type``, ``subtype`` and ``alias`` are promoted columns; everything else
    lives in the ``json`` document.
    """

    entity_id: str
    type: str
    subtype: Optional[str] = None
    alias: Optional[str] = None
    json: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def components(self) -> Dict[str, Any]:
        return dict(self.json.get("components") or {})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Entity":
        return cls(
            entity_id=str(data["entity_id"]),
            type=str(data.get("type", "")),
            subtype=data.get("subtype"),
            alias=data.get("alias"),
            json=dict(data.get("json") or {}),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass(slots=True)
class Task:
    task_id: str
    status: str
    entity_id: Optional[str] = None
    json: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def components(self) -> Dict[str, Any]:
        return dict(self.json.get("components") or {})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Task":
        return cls(
            task_id=str(data["task_id"]),
            status=str(data.get("status", "")),
            entity_id=data.get("entity_id"),
            json=dict(data.get("json") or {}),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass(slots=True)
class StoredObject:
    object_id: str
    path: Optional[str] = None
    content_type: Optional[str] = None
    type: Optional[str] = None
    json: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StoredObject":
        return cls(
            object_id=str(data["object_id"]),
            path=data.get("path"),
            content_type=data.get("content_type"),
            type=data.get("type"),
            json=dict(data.get("json") or {}),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass(slots=True)
class DeletedRecord:
    """Tombstone for an entity, task or object removed since a checkpoint."""

    record_id: str
    deleted_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], id_key: str) -> "DeletedRecord":
        return cls(record_id=str(data[id_key]), deleted_at=data.get("deleted_at"))


@dataclass(slots=True)
class ChangedSinceResponse:
    entities: List[Entity] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    objects: List[StoredObject] = field(default_factory=list)
    deleted_entities: List[DeletedRecord] = field(default_factory=list)
    deleted_tasks: List[DeletedRecord] = field(default_factory=list)
    deleted_objects: List[DeletedRecord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChangedSinceResponse":
        """Parse the ``/queries/changed-since`` payload; missing lists are empty."""

        return cls(
            entities=[Entity.from_dict(item) for item in data.get("entities") or []],
            tasks=[Task.from_dict(item) for item in data.get("tasks") or []],
            objects=[
                StoredObject.from_dict(item) for item in data.get("objects") or []
            ],
            deleted_entities=[
                DeletedRecord.from_dict(item, "entity_id")
                for item in data.get("deleted_entities") or []
            ],
            deleted_tasks=[
                DeletedRecord.from_dict(item, "task_id")
                for item in data.get("deleted_tasks") or []
            ],
            deleted_objects=[
                DeletedRecord.from_dict(item, "object_id")
                for item in data.get("deleted_objects") or []
            ],
        )


@dataclass(slots=True)
class ObjectContent:
    """Body and headers of a downloaded or viewed object."""

    data: bytes | str
    content_type: Optional[str] = None
    content_length: Optional[int] = None
