"""
Integration tests for the full layout pipeline.

These tests run plans end to end through RoadmapLayoutEngine and check the
documented scenarios plus the layout invariants (determinism, height clamp,
sibling spacing, viewport containment, connector count) on a spread of
generated plans.
"""

import random

import pytest

from roadmapflow import (
    Epic,
    Feature,
    NodeKind,
    PlanGraph,
    RoadmapLayoutEngine,
    Task,
    ViewportBoundsCalculator,
    compute_layout,
    plan_from_dict,
    validate_layout,
)
from roadmapflow.sizing import height_range

FEATURE_STATUSES = [
    "not_started",
    "in_progress",
    "in_review",
    "completed",
    "blocked",
]
TASK_STATUSES = ["todo", "in_progress", "in_review", "done", "blocked"]


def generated_plan(seed):
    """
    A plan with random sizes, orders and task counts for a given seed.

    Some Features name another Epic or a missing one, some arrive
    unassigned, and some seeds repeat an Epic id.
    """
    rng = random.Random(seed)
    epic_ids = [f"e{e}" for e in range(rng.randint(0, 6))]
    owner_choices = epic_ids + ["ghost"]
    epics = []
    for epic_id in epic_ids:
        features = []
        for f in range(rng.randint(0, 7)):
            feature_id = f"{epic_id}-f{f}"
            owner = epic_id
            if rng.random() < 0.15:
                owner = rng.choice(owner_choices)
            features.append(_generated_feature(rng, feature_id, owner))
        epics.append(
            Epic(
                id=epic_id,
                position=rng.randint(-3, 10),
                description=rng.choice([None, "", "e" * rng.randint(0, 2500)]),
                features=features,
            )
        )
    if epic_ids and rng.random() < 0.3:
        duplicate_id = rng.choice(epic_ids)
        epics.append(
            Epic(
                id=duplicate_id,
                position=rng.randint(-3, 10),
                features=[
                    _generated_feature(rng, f"dup-f{f}", None)
                    for f in range(rng.randint(0, 3))
                ],
            )
        )
    unassigned = [
        _generated_feature(rng, f"u{f}", rng.choice(owner_choices))
        for f in range(rng.randint(0, 3))
    ]
    return PlanGraph(epics=epics, unassigned_features=unassigned)


def _generated_feature(rng, feature_id, epic_id):
    tasks = [
        Task(
            id=f"t{t}",
            feature_id=feature_id,
            status=rng.choice(TASK_STATUSES),
        )
        for t in range(rng.randint(0, 70))
    ]
    return Feature(
        id=feature_id,
        epic_id=epic_id,
        description="d" * rng.randint(0, 1500),
        status=rng.choice(FEATURE_STATUSES),
        tasks=tasks,
    )


def owned_feature_count(plan):
    """Features whose owning Epic exists in the plan."""
    epic_ids = {epic.id for epic in plan.epics}
    owners = [f.epic_id or epic.id for epic in plan.epics for f in epic.features]
    owners.extend(f.epic_id for f in plan.unassigned_features)
    return sum(1 for owner in owners if owner in epic_ids)


def has_duplicate_epics(plan):
    return len({epic.id for epic in plan.epics}) < len(plan.epics)


SEEDS = list(range(25))


class TestScenarios:
    """End-to-end scenarios."""

    def test_single_epic_without_features(self, engine, single_epic_plan):
        result = engine.layout(single_epic_plan)

        (epic,) = result.nodes
        assert epic.kind == NodeKind.EPIC
        assert (epic.x, epic.y, epic.height) == (100, 100, 220)
        assert result.connectors == ()

    def test_next_group_starts_at_cursor(self, engine):
        plan = PlanGraph(epics=[Epic(id="a", position=0), Epic(id="b", position=1)])
        result = engine.layout(plan)
        # 100 + 220 + max(40, round(220 * 0.15))
        assert result.get_node("b").y == 360

    def test_two_base_features(self, engine, two_feature_plan):
        result = engine.layout(two_feature_plan)

        epic = result.get_node("e1")
        f1, f2 = result.features()
        assert f2.y - (f1.y + f1.height) == 59
        assert (f2.y + f2.height) - f1.y == 339
        # the Epic is centered on the Feature stack
        assert epic.y + epic.height / 2 == f1.y + 339 / 2

    def test_empty_plan(self, engine, empty_plan):
        result = engine.layout(empty_plan)

        assert result.nodes == ()
        assert result.connectors == ()
        assert result.viewport_bounds == ((-1000, -400), (2400, 800))
        assert result.as_dict() == {
            "positionedNodes": [],
            "connectors": [],
            "viewportBounds": [[-1000, -400], [2400, 800]],
        }

    def test_orphan_feature_is_placed(self, engine):
        plan = PlanGraph(
            epics=[
                Epic(
                    id="e1",
                    features=[
                        Feature(id="lost", epic_id="deleted", description="x" * 900)
                    ],
                )
            ]
        )
        result = engine.layout(plan)

        orphan = result.get_node("lost")
        assert orphan is not None
        assert orphan.orphan is True
        assert orphan.height == 140
        assert orphan.x == 660
        assert orphan.y == 360

    def test_only_orphans(self, engine):
        plan = PlanGraph(unassigned_features=[Feature(id="o1"), Feature(id="o2")])
        result = engine.layout(plan)

        assert [n.id for n in result.nodes] == ["o1", "o2"]
        assert result.nodes[0].y == 100
        assert result.connectors == ()

    def test_dense_feature_padding(self, engine):
        tasks = [Task(id=f"t{i}", feature_id="f1") for i in range(65)]
        plan = PlanGraph(
            epics=[Epic(id="e1", features=[Feature(id="f1", tasks=tasks)])]
        )
        result = engine.layout(plan)

        max_x = max(node.x for node in result.nodes)
        assert result.viewport_bounds[1][0] == max_x + 520 + 2600
        assert len(result.task_markers()) == 9


class TestRoadmapPlan:
    """Exact geometry for the shared three-Epic plan."""

    def test_epics_follow_position(self, engine, roadmap_plan):
        result = engine.layout(roadmap_plan)
        assert [n.id for n in result.epics()] == ["discover", "build", "launch"]

    def test_geometry(self, engine, roadmap_plan):
        result = engine.layout(roadmap_plan)
        geometry = {
            n.id: (n.x, n.y, n.height)
            for n in result.nodes
            if n.kind != NodeKind.TASK_MARKER
        }
        assert geometry == {
            "discover": (100, 100, 220),
            "research": (660, 140, 140),
            "build": (100, 637, 300),
            "api": (660, 360, 220),
            "ui": (660, 667, 140),
            "sync": (660, 894, 320),
            "launch": (100, 1342, 220),
        }

    def test_connectors(self, engine, roadmap_plan):
        result = engine.layout(roadmap_plan)
        assert [c.id for c in result.connectors] == [
            "epic-feature-discover-research",
            "epic-feature-build-api",
            "epic-feature-build-ui",
            "epic-feature-build-sync",
            "epic-chain-discover-build",
            "epic-chain-build-launch",
        ]
        colors = {c.target_id: c.color for c in result.connectors}
        assert colors["api"] == "#ef4444"
        assert colors["ui"] == "#a855f7"
        assert colors["research"] == "#9ca3af"

    def test_markers(self, engine, roadmap_plan):
        result = engine.layout(roadmap_plan)
        markers = result.task_markers()

        assert len(markers) == 12
        sync_markers = [m for m in markers if m.parent_id == "sync"]
        assert len(sync_markers) == 9
        # 894 + 320 / 2 - 112 / 2
        assert sync_markers[0].y == 998
        assert max(m.x for m in sync_markers) == 1576

    def test_viewport(self, engine, roadmap_plan):
        result = engine.layout(roadmap_plan)
        assert result.viewport_bounds == ((-300, -140), (3096, 2062))

    def test_validates_cleanly(self, engine, roadmap_plan):
        assert validate_layout(engine.layout(roadmap_plan)) == []


class TestInvariants:
    """Layout invariants over generated plans."""

    @pytest.mark.parametrize("seed", SEEDS)
    def test_deterministic(self, seed):
        first = compute_layout(generated_plan(seed))
        second = compute_layout(generated_plan(seed))
        assert first == second
        assert first.as_dict() == second.as_dict()

    @pytest.mark.parametrize("seed", SEEDS)
    def test_heights_clamped(self, seed):
        result = compute_layout(generated_plan(seed))
        for node in result.epics() + result.features():
            base, maximum = height_range(node.kind)
            assert base <= node.height <= maximum

    @pytest.mark.parametrize("seed", SEEDS)
    def test_siblings_do_not_overlap(self, seed):
        result = compute_layout(generated_plan(seed))
        by_parent = {}
        for node in result.features():
            by_parent.setdefault(node.parent_id, []).append(node)
        for siblings in by_parent.values():
            for upper, lower in zip(siblings, siblings[1:]):
                assert lower.y >= upper.y + upper.height

    @pytest.mark.parametrize("seed", SEEDS)
    def test_viewport_contains_nodes(self, seed):
        result = compute_layout(generated_plan(seed))
        for node in result.nodes:
            assert ViewportBoundsCalculator.contains(result.viewport_bounds, node)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_connector_count(self, seed):
        plan = generated_plan(seed)
        result = compute_layout(plan)
        expected = owned_feature_count(plan) + max(0, len(plan.epics) - 1)
        assert len(result.connectors) == expected

    @pytest.mark.parametrize("seed", SEEDS)
    def test_every_feature_positioned(self, seed):
        plan = generated_plan(seed)
        result = compute_layout(plan)
        features = result.features()
        orphans = [n for n in features if n.orphan]

        assert len(features) == len(plan.all_features())
        assert len(orphans) == len(features) - owned_feature_count(plan)
        assert all(n.parent_id is None for n in orphans)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_no_validation_issues(self, seed):
        plan = generated_plan(seed)
        issues = validate_layout(compute_layout(plan))
        if has_duplicate_epics(plan):
            # a repeated Epic id closes a loop in the Epic chain
            assert {issue.code for issue in issues} == {"chain_cycle"}
        else:
            assert issues == []

    def test_generated_plans_cover_fallbacks(self):
        plans = [generated_plan(seed) for seed in SEEDS]
        assert any(has_duplicate_epics(plan) for plan in plans)
        assert any(plan.unassigned_features for plan in plans)
        assert any(
            owned_feature_count(plan) < len(plan.all_features()) for plan in plans
        )

    def test_groups_do_not_overlap(self):
        result = compute_layout(generated_plan(7))
        epics = result.epics()
        for upper, lower in zip(epics, epics[1:]):
            assert lower.y >= upper.y + upper.height


class TestLoadedPayload:
    """Plans built from API payloads."""

    def test_payload_round_through_engine(self, engine):
        payload = {
            "epics": [
                {
                    "id": "e2",
                    "position": 1,
                    "features": [{"id": "f2", "status": "completed"}],
                },
                {
                    "id": "e1",
                    "position": 0,
                    "features": [
                        {
                            "id": "f1",
                            "status": "in_progress",
                            "tasks": [{"id": "t1", "status": "done"}],
                        }
                    ],
                },
            ],
            "features": [{"id": "stray", "epic_id": "e9"}],
        }
        result = engine.layout(plan_from_dict(payload))

        assert [n.id for n in result.epics()] == ["e1", "e2"]
        assert result.get_node("stray").orphan is True
        assert [c.id for c in result.connectors] == [
            "epic-feature-e1-f1",
            "epic-feature-e2-f2",
            "epic-chain-e1-e2",
        ]
        assert result.connectors[0].animated is True
        assert result.task_markers()[0].status == "done"
