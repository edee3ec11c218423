"""Typed asyncio client for the Atlas Command entity, task and object API."""

from .client import AtlasCommandHttpClient, JsonRecord
from .components import (
    CUSTOM_COMPONENT_PREFIX,
    KNOWN_ENTITY_COMPONENTS,
    CircleGeometry,
    CommandComponent,
    CommunicationsComponent,
    EntityComponents,
    GeoJSONGeometry,
    Geometry,
    HealthComponent,
    HeartbeatComponent,
    LineGeometry,
    MediaRefItem,
    MilViewComponent,
    ObjectMetadata,
    ObjectReferenceItem,
    PointGeometry,
    PolygonGeometry,
    SensorRefItem,
    StatusComponent,
    TaskCatalogComponent,
    TaskComponents,
    TaskParametersComponent,
    TaskProgressComponent,
    TaskQueueComponent,
    TelemetryComponent,
    components_to_record,
    geometry_from_dict,
    strip_nulls,
    validate_entity_components,
)
from .config import AtlasConfig, ClientConfig, load_config
from .errors import (
    AtlasClientError,
    AtlasHTTPError,
    ComponentValidationError,
    UnknownComponentKeyError,
)
from .models import (
    ChangedSinceResponse,
    DeletedRecord,
    Entity,
    ObjectContent,
    StoredObject,
    Task,
)

__all__ = [
    "AtlasClientError",
    "AtlasCommandHttpClient",
    "AtlasConfig",
    "AtlasHTTPError",
    "CUSTOM_COMPONENT_PREFIX",
    "ChangedSinceResponse",
    "CircleGeometry",
    "ClientConfig",
    "CommandComponent",
    "CommunicationsComponent",
    "ComponentValidationError",
    "DeletedRecord",
    "Entity",
    "EntityComponents",
    "GeoJSONGeometry",
    "Geometry",
    "HealthComponent",
    "HeartbeatComponent",
    "JsonRecord",
    "KNOWN_ENTITY_COMPONENTS",
    "LineGeometry",
    "MediaRefItem",
    "MilViewComponent",
    "ObjectContent",
    "ObjectMetadata",
    "ObjectReferenceItem",
    "PointGeometry",
    "PolygonGeometry",
    "SensorRefItem",
    "StatusComponent",
    "StoredObject",
    "Task",
    "TaskCatalogComponent",
    "TaskComponents",
    "TaskParametersComponent",
    "TaskProgressComponent",
    "TaskQueueComponent",
    "TelemetryComponent",
    "UnknownComponentKeyError",
    "components_to_record",
    "geometry_from_dict",
    "load_config",
    "strip_nulls",
    "validate_entity_components",
]
