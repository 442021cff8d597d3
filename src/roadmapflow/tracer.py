"""
Debug tracing for the layout pipeline.

When debug mode is enabled, the engine records a snapshot of each pipeline
stage. This is useful for understanding why a node ended up where it did and
for writing targeted tests against intermediate results.

Usage:
    >>> engine = RoadmapLayoutEngine()
    >>> result = engine.layout(plan, debug=True)
    >>> trace = engine.get_trace()
    >>> print(trace.summary())

Stages, in order:
1. groups_placed - Epic groups positioned
2. orphans_placed - fallback placement of unresolved Features
3. connectors_built - Feature and Epic chain connectors
4. markers_synthesized - task markers for the minimap
5. viewport_computed - pan/zoom clamp rectangle
6. validated - invariant check results
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PipelineStage:
    """
    Snapshot of state at a pipeline stage.

    Attributes:
        name: Name of this pipeline stage.
        data: Dictionary of relevant data at this stage.
    """

    name: str
    data: Dict[str, Any]

    def __str__(self) -> str:
        lines = [f"=== Stage: {self.name} ==="]
        for key, value in self.data.items():
            # Truncate long values
            str_val = str(value)
            if len(str_val) > 100:
                str_val = str_val[:100] + "..."
            lines.append(f"  {key}: {str_val}")
        return "\n".join(lines)


@dataclass
class LayoutTrace:
    """
    Complete trace of one layout run.

    Attributes:
        stages: Pipeline stages with their data.
        fingerprint: Fingerprint of the plan that was laid out.
    """

    stages: List[PipelineStage] = field(default_factory=list)
    fingerprint: str = ""

    def add_stage(self, name: str, data: Dict[str, Any]) -> None:
        self.stages.append(PipelineStage(name, data.copy()))

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        """Get a specific pipeline stage by name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def stage_names(self) -> List[str]:
        return [stage.name for stage in self.stages]

    def summary(self) -> str:
        """Human-readable overview of the trace."""
        lines = [
            "=" * 60,
            "LAYOUT TRACE SUMMARY",
            "=" * 60,
            "",
            f"Plan fingerprint: {self.fingerprint[:12] or '-'}",
            f"Pipeline stages: {len(self.stages)}",
        ]
        for stage in self.stages:
            counts = ", ".join(
                f"{key}={value}"
                for key, value in stage.data.items()
                if isinstance(value, (int, float))
            )
            lines.append(f"  {stage.name}: {counts}" if counts else f"  {stage.name}")
        return "\n".join(lines)

    def dump(self) -> str:
        """Summary followed by the full data of every stage."""
        lines = [self.summary(), "", "PIPELINE STAGES:", "-" * 40]
        for stage in self.stages:
            lines.append(str(stage))
            lines.append("")
        return "\n".join(lines)
