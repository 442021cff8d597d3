"""
Loader module for roadmap payloads.

Builds a PlanGraph from the roadmap API's "full" payload: a mapping with an
``epics`` list, each Epic carrying nested ``features`` and each Feature nested
``tasks``. An optional top-level ``features`` list holds Features that arrived
outside any Epic.
"""

from typing import Any, Dict, List, Mapping

from .models import Epic, Feature, PlanGraph, Task


class PlanLoadError(Exception):
    """Raised when a roadmap payload is structurally unusable."""

    pass


def plan_from_dict(payload: Mapping[str, Any]) -> PlanGraph:
    """
    Build a PlanGraph from a roadmap payload.

    Missing optional fields fall back to the model defaults; unknown fields
    are ignored.

    Args:
        payload: Mapping with an "epics" list and an optional "features" list.

    Returns:
        PlanGraph with Epics in payload order.

    Raises:
        PlanLoadError: If the payload, a list, or an item is malformed.
    """
    if not isinstance(payload, Mapping):
        raise PlanLoadError(
            f"Expected a mapping, got {type(payload).__name__}"
        )

    epics = [
        _load_epic(item, f"epics[{i}]")
        for i, item in enumerate(_list_at(payload, "epics", "epics"))
    ]
    unassigned = [
        _load_feature(item, f"features[{i}]", None)
        for i, item in enumerate(_list_at(payload, "features", "features"))
    ]
    return PlanGraph(epics=epics, unassigned_features=unassigned)


def _list_at(data: Mapping[str, Any], key: str, path: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise PlanLoadError(f"{path}: expected a list, got {type(value).__name__}")
    return value


def _require_item(data: Any, path: str) -> Dict[str, Any]:
    if not isinstance(data, Mapping):
        raise PlanLoadError(f"{path}: expected a mapping, got {type(data).__name__}")
    if data.get("id") in (None, ""):
        raise PlanLoadError(f"{path}: missing 'id'")
    return dict(data)


def _int(value: Any, path: str) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        raise PlanLoadError(f"{path}: expected an integer, got {value!r}") from None


def _load_task(data: Any, path: str, feature_id: str) -> Task:
    item = _require_item(data, path)
    return Task(
        id=str(item["id"]),
        feature_id=item.get("feature_id") or feature_id,
        title=item.get("title") or "",
        status=item.get("status") or "todo",
        priority=item.get("priority") or "medium",
        position=_int(item.get("position"), f"{path}.position"),
    )


def _load_feature(data: Any, path: str, epic_id) -> Feature:
    item = _require_item(data, path)
    feature_id = str(item["id"])
    tasks = [
        _load_task(task, f"{path}.tasks[{i}]", feature_id)
        for i, task in enumerate(_list_at(item, "tasks", f"{path}.tasks"))
    ]
    return Feature(
        id=feature_id,
        epic_id=item.get("epic_id") or epic_id,
        title=item.get("title") or "",
        description=item.get("description"),
        status=item.get("status") or "not_started",
        position=_int(item.get("position"), f"{path}.position"),
        is_deliverable=bool(item.get("is_deliverable", False)),
        estimated_hours=item.get("estimated_hours"),
        actual_hours=item.get("actual_hours"),
        progress=item.get("progress"),
        tasks=tasks,
    )


def _load_epic(data: Any, path: str) -> Epic:
    item = _require_item(data, path)
    epic_id = str(item["id"])
    features = [
        _load_feature(feature, f"{path}.features[{i}]", epic_id)
        for i, feature in enumerate(_list_at(item, "features", f"{path}.features"))
    ]
    return Epic(
        id=epic_id,
        title=item.get("title") or "",
        description=item.get("description"),
        priority=item.get("priority") or "medium",
        status=item.get("status") or "backlog",
        position=_int(item.get("position"), f"{path}.position"),
        color=item.get("color"),
        tags=list(item.get("tags") or []),
        labels=list(item.get("labels") or []),
        estimated_hours=item.get("estimated_hours"),
        actual_hours=item.get("actual_hours"),
        features=features,
    )
