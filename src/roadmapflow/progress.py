"""Feature progress derived from Task statuses."""

from typing import Optional, Sequence

from .models import Feature, Task
from .sizing import js_round

TASK_STATUS_PROGRESS_WEIGHT = {
    "todo": 0,
    "in_progress": 50,
    "in_review": 80,
    "done": 100,
    "blocked": 0,
}


def calculate_feature_progress(tasks: Optional[Sequence[Task]]) -> int:
    """Mean task weight (0-100), rounded half up; 0 without tasks."""
    if not tasks:
        return 0
    total = sum(
        TASK_STATUS_PROGRESS_WEIGHT.get(getattr(t.status, "value", t.status), 0)
        for t in tasks
    )
    return js_round(total / len(tasks))


def completed_task_count(tasks: Optional[Sequence[Task]]) -> int:
    return sum(1 for task in tasks or () if task.status == "done")


def effective_progress(feature: Feature) -> int:
    """Externally supplied progress when present, else task-derived."""
    if feature.progress is not None:
        return feature.progress
    return calculate_feature_progress(feature.tasks)
