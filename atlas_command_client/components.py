"""Typed component payloads for Atlas Command entities, tasks and objects.

Components are named data fragments attached to an entity or task
(``telemetry``, ``health``, ...). Entity component names form a closed set;
anything else must carry the ``custom_`` prefix. Before a payload is sent the
names are checked with :func:`validate_entity_components` and the values are
cleaned with :func:`components_to_record`, which drops ``None`` fields from
mappings while leaving list slots untouched so coordinate arrays keep their
indices.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Literal, Mapping, Optional, Union

from .errors import ComponentValidationError, UnknownComponentKeyError

CUSTOM_COMPONENT_PREFIX = "custom_"

KNOWN_ENTITY_COMPONENTS: frozenset[str] = frozenset(
    {
        "telemetry",
        "geometry",
        "task_catalog",
        "media_refs",
        "mil_view",
        "health",
        "sensor_refs",
        "communications",
        "task_queue",
        "status",
        "heartbeat",
    }
)


class _Component:
    """Mixin turning a component dataclass into a plain JSON-like mapping.

    Unset fields are emitted as ``None``; :func:`strip_nulls` removes them.
    A ``custom`` field, when present, is merged into the top level.
    """

    __slots__ = ()

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        custom: Mapping[str, Any] = {}
        for item in dataclasses.fields(self):
            value = getattr(self, item.name)
            if item.name == "custom":
                custom = value or {}
                continue
            payload[item.name] = _plain(value)
        for key, value in custom.items():
            payload[key] = _plain(value)
        return payload


def _plain(value: Any) -> Any:
    if isinstance(value, _Component):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    return value


# ----------------------------------------------------------------------
# Entity components
# ----------------------------------------------------------------------
@dataclass(slots=True)
class TelemetryComponent(_Component):
    """Position and motion data for entities."""

    latitude: Optional[float] = None  # degrees, WGS84
    longitude: Optional[float] = None
    altitude_m: Optional[float] = None
    speed_m_s: Optional[float] = None
    heading_deg: Optional[float] = None  # 0=N, 90=E


class _Geometry(_Component):
    __slots__ = ()

    shape: ClassVar[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.shape, **_Component.to_dict(self)}


@dataclass(slots=True)
class PointGeometry(_Geometry):
    shape: ClassVar[str] = "point"

    point_lat: float
    point_lng: float


@dataclass(slots=True)
class CircleGeometry(_Geometry):
    shape: ClassVar[str] = "circle"

    point_lat: float
    point_lng: float
    radius_m: float


@dataclass(slots=True)
class PolygonGeometry(_Geometry):
    shape: ClassVar[str] = "polygon"

    polygon: List[List[float]]  # [lat, lng] pairs


@dataclass(slots=True)
class LineGeometry(_Geometry):
    shape: ClassVar[str] = "line"

    line: List[List[float]]  # [lat, lng] pairs


@dataclass(slots=True)
class GeoJSONGeometry(_Component):
    """GeoJSON-like geometry accepted for backwards compatibility."""

    type: Literal["Point", "LineString", "Polygon"]
    coordinates: List[Any]


Geometry = Union[
    PointGeometry, CircleGeometry, PolygonGeometry, LineGeometry, GeoJSONGeometry
]

_GEOJSON_TYPES = frozenset({"Point", "LineString", "Polygon"})


def geometry_from_dict(data: Mapping[str, Any]) -> Geometry:
    """Build a typed geometry from a mapping.

    The ``type`` key selects the variant. Without it the shape is inferred
    from the fields present: ``radius_m`` makes a circle, ``point_lat`` a
    point, and ``polygon``/``line`` their namesakes. GeoJSON shapes always
    need an explicit type.
    """

    shape = data.get("type")
    if shape in _GEOJSON_TYPES:
        if "coordinates" not in data:
            raise ComponentValidationError(
                f"{shape} geometry is missing 'coordinates'"
            )
        try:
            coordinates = list(data["coordinates"])
        except TypeError as exc:
            raise ComponentValidationError(
                f"{shape} geometry has malformed coordinates: {exc}"
            ) from exc
        return GeoJSONGeometry(type=shape, coordinates=coordinates)

    if shape is None:
        shape = _infer_geometry_shape(data)

    try:
        if shape == "point":
            return PointGeometry(
                point_lat=data["point_lat"], point_lng=data["point_lng"]
            )
        if shape == "circle":
            return CircleGeometry(
                point_lat=data["point_lat"],
                point_lng=data["point_lng"],
                radius_m=data["radius_m"],
            )
        if shape == "polygon":
            return PolygonGeometry(polygon=[list(pair) for pair in data["polygon"]])
        if shape == "line":
            return LineGeometry(line=[list(pair) for pair in data["line"]])
    except KeyError as exc:
        raise ComponentValidationError(
            f"{shape} geometry is missing '{exc.args[0]}'"
        ) from exc
    except TypeError as exc:
        raise ComponentValidationError(
            f"{shape} geometry has malformed coordinates: {exc}"
        ) from exc

    raise ComponentValidationError(f"Unsupported geometry type: {shape!r}")


def _infer_geometry_shape(data: Mapping[str, Any]) -> str:
    if "coordinates" in data:
        raise ComponentValidationError(
            "GeoJSON geometry requires an explicit type of Point, LineString or Polygon"
        )
    if "radius_m" in data:
        return "circle"
    if "point_lat" in data:
        return "point"
    if "polygon" in data:
        return "polygon"
    if "line" in data:
        return "line"
    raise ComponentValidationError("Cannot infer geometry shape from fields")


@dataclass(slots=True)
class TaskCatalogComponent(_Component):
    supported_tasks: List[str] = field(default_factory=list)


@dataclass(slots=True)
class MediaRefItem(_Component):
    object_id: str
    role: Literal["camera_feed", "thumbnail", "heatmap_data"]


@dataclass(slots=True)
class MilViewComponent(_Component):
    """Tactical classification of an entity."""

    classification: Literal["friendly", "hostile", "neutral", "unknown", "civilian"]
    last_seen: Optional[str] = None  # ISO 8601


@dataclass(slots=True)
class HealthComponent(_Component):
    battery_percent: Optional[float] = None


@dataclass(slots=True)
class SensorRefItem(_Component):
    """A sensor mounted on an entity, with field of view and orientation in degrees."""

    sensor_id: str
    type: str
    vertical_fov: Optional[float] = None
    horizontal_fov: Optional[float] = None
    vertical_orientation: Optional[float] = None
    horizontal_orientation: Optional[float] = None


@dataclass(slots=True)
class CommunicationsComponent(_Component):
    link_state: Literal["connected", "disconnected", "degraded", "unknown"]


@dataclass(slots=True)
class TaskQueueComponent(_Component):
    current_task_id: Optional[str] = None
    queued_task_ids: List[str] = field(default_factory=list)


@dataclass(slots=True)
class StatusComponent(_Component):
    value: str
    last_update: Optional[str] = None  # RFC 3339


@dataclass(slots=True)
class HeartbeatComponent(_Component):
    last_seen: str  # RFC 3339


@dataclass(slots=True)
class EntityComponents(_Component):
    """All first-party entity components plus ``custom_`` extensions.

    Keys in ``custom`` are merged into the payload as-is and checked by
    :func:`validate_entity_components` when the request is built.
    """

    telemetry: Optional[TelemetryComponent] = None
    geometry: Optional[Geometry] = None
    task_catalog: Optional[TaskCatalogComponent] = None
    media_refs: Optional[List[MediaRefItem]] = None
    mil_view: Optional[MilViewComponent] = None
    health: Optional[HealthComponent] = None
    sensor_refs: Optional[List[SensorRefItem]] = None
    communications: Optional[CommunicationsComponent] = None
    task_queue: Optional[TaskQueueComponent] = None
    status: Optional[StatusComponent] = None
    heartbeat: Optional[HeartbeatComponent] = None
    custom: Dict[str, Any] = field(default_factory=dict)


# ----------------------------------------------------------------------
# Task components
# ----------------------------------------------------------------------
@dataclass(slots=True)
class CommandComponent(_Component):
    type: str


@dataclass(slots=True)
class TaskParametersComponent(_Component):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude_m: Optional[float] = None
    custom: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class TaskProgressComponent(_Component):
    percent: Optional[float] = None
    updated_at: Optional[str] = None
    status_detail: Optional[str] = None


@dataclass(slots=True)
class TaskComponents(_Component):
    command: Optional[CommandComponent] = None
    parameters: Optional[TaskParametersComponent] = None
    progress: Optional[TaskProgressComponent] = None
    custom: Dict[str, Any] = field(default_factory=dict)


# ----------------------------------------------------------------------
# Object metadata
# ----------------------------------------------------------------------
@dataclass(slots=True)
class ObjectReferenceItem(_Component):
    entity_id: Optional[str] = None
    task_id: Optional[str] = None


@dataclass(slots=True)
class ObjectMetadata(_Component):
    bucket: Optional[str] = None
    size_bytes: Optional[int] = None
    usage_hints: Optional[List[str]] = None
    referenced_by: Optional[List[ObjectReferenceItem]] = None
    checksum: Optional[str] = None
    expiry_time: Optional[str] = None  # ISO 8601
    custom: Dict[str, Any] = field(default_factory=dict)


ComponentsInput = Union[EntityComponents, TaskComponents, Mapping[str, Any]]


# ----------------------------------------------------------------------
# Validation and normalization
# ----------------------------------------------------------------------
def validate_entity_components(components: ComponentsInput) -> None:
    """Reject component names that are neither known nor ``custom_``-prefixed.

    Only top-level keys are inspected. The first offending key, in iteration
    order, is reported through :class:`UnknownComponentKeyError`.
    """

    mapping = components.to_dict() if isinstance(components, _Component) else components
    for key in mapping:
        if key in KNOWN_ENTITY_COMPONENTS or key.startswith(CUSTOM_COMPONENT_PREFIX):
            continue
        raise UnknownComponentKeyError(key, CUSTOM_COMPONENT_PREFIX)


def strip_nulls(value: Any) -> Any:
    """Recursively drop ``None`` fields from mappings.

    Lists keep their length: ``None`` items stay in place and the rest are
    stripped recursively. Returns ``None`` when ``value`` itself is ``None``.
    Cyclic structures are not supported.
    """

    if value is None:
        return None
    if isinstance(value, _Component):
        value = value.to_dict()
    if isinstance(value, (list, tuple)):
        return [item if item is None else strip_nulls(item) for item in value]
    if isinstance(value, Mapping):
        nested: Dict[str, Any] = {}
        for key, inner in value.items():
            if inner is None:
                continue
            stripped = strip_nulls(inner)
            if stripped is not None:
                nested[key] = stripped
        return nested
    return value


def components_to_record(
    components: Optional[ComponentsInput],
) -> Optional[Dict[str, Any]]:
    """Convert typed or plain components into a JSON-ready dict.

    Returns ``None`` for ``None`` and a (possibly empty) dict otherwise. Does
    not validate component names.
    """

    if components is None:
        return None
    return strip_nulls(components)
