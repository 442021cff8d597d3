"""Pytest configuration and shared fixtures for roadmapflow tests."""

import pytest

from roadmapflow import Epic, Feature, PlanGraph, RoadmapLayoutEngine, Task


def _tasks(feature_id, statuses):
    """Tasks with ids t0, t1, ... and the given statuses."""
    return [
        Task(id=f"t{i}", feature_id=feature_id, status=status)
        for i, status in enumerate(statuses)
    ]


@pytest.fixture
def engine():
    """Default RoadmapLayoutEngine instance."""
    return RoadmapLayoutEngine()


@pytest.fixture
def empty_plan():
    return PlanGraph()


@pytest.fixture
def single_epic_plan():
    """One Epic, no description, no Features."""
    return PlanGraph(epics=[Epic(id="e1", title="Discovery")])


@pytest.fixture
def two_feature_plan():
    """One Epic with two undescribed Features."""
    return PlanGraph(
        epics=[
            Epic(
                id="e1",
                features=[
                    Feature(id="f1", epic_id="e1", status="in_progress"),
                    Feature(id="f2", epic_id="e1", status="completed"),
                ],
            )
        ]
    )


@pytest.fixture
def roadmap_plan():
    """Three Epics, out of position order, with mixed content."""
    return PlanGraph(
        epics=[
            Epic(
                id="build",
                position=2,
                description="x" * 400,
                features=[
                    Feature(
                        id="api",
                        epic_id="build",
                        description="y" * 300,
                        status="blocked",
                        tasks=_tasks("api", ["done", "todo", "blocked"]),
                    ),
                    Feature(id="ui", epic_id="build", status="in_review"),
                    Feature(
                        id="sync",
                        epic_id="build",
                        description="z" * 1000,
                        tasks=_tasks("sync", ["in_progress"] * 12),
                    ),
                ],
            ),
            Epic(
                id="discover",
                position=0,
                features=[Feature(id="research", epic_id="discover")],
            ),
            Epic(id="launch", position=5),
        ]
    )


@pytest.fixture
def make_tasks():
    """Factory for Tasks with ids t0, t1, ... and the given statuses."""
    return _tasks
