"""Tests for response record parsing."""

from atlas_command_client.models import (
    ChangedSinceResponse,
    Entity,
    StoredObject,
    Task,
)


def test_entity_from_dict_promoted_fields() -> None:
    entity = Entity.from_dict(
        {
            "entity_id": "asset-1",
            "type": "asset",
            "subtype": "drone",
            "alias": "Hawk",
            "json": {"components": {"telemetry": {"latitude": 1.0}}},
            "created_at": "2025-01-01T00:00:00Z",
            "unexpected": "ignored",
        }
    )

    assert entity.entity_id == "asset-1"
    assert entity.type == "asset"
    assert entity.subtype == "drone"
    assert entity.alias == "Hawk"
    assert entity.components == {"telemetry": {"latitude": 1.0}}
    assert entity.created_at == "2025-01-01T00:00:00Z"
    assert entity.updated_at is None


def test_components_default_to_empty() -> None:
    assert Entity.from_dict({"entity_id": "e1", "type": "track"}).components == {}
    assert Task.from_dict({"task_id": "t1", "status": "pending"}).components == {}


def test_task_and_object_from_dict() -> None:
    task = Task.from_dict(
        {"task_id": "t1", "status": "acknowledged", "entity_id": "asset-1"}
    )
    stored = StoredObject.from_dict(
        {"object_id": "obj-1", "content_type": "image/png", "type": "image"}
    )

    assert task.status == "acknowledged"
    assert task.entity_id == "asset-1"
    assert stored.content_type == "image/png"
    assert stored.type == "image"
    assert stored.json == {}


def test_changed_since_handles_missing_and_null_lists() -> None:
    response = ChangedSinceResponse.from_dict(
        {
            "tasks": None,
            "objects": [{"object_id": "obj-1"}],
            "deleted_entities": [{"entity_id": "e9"}],
            "deleted_objects": [{"object_id": "obj-2", "deleted_at": "2025-02-01T00:00:00Z"}],
        }
    )

    assert response.entities == []
    assert response.tasks == []
    assert response.objects[0].object_id == "obj-1"
    assert response.deleted_entities[0].record_id == "e9"
    assert response.deleted_entities[0].deleted_at is None
    assert response.deleted_objects[0].deleted_at == "2025-02-01T00:00:00Z"
