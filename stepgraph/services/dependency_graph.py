"""Read-only dependency queries over a recipe's steps.

Every query reads the store at call time; nothing is cached between calls.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field

from .step_store import StepStore


@dataclass(frozen=True)
class GraphView:
    """Snapshot of one recipe's edges, both directions, sorted ascending."""
    dependents: dict[int, tuple[int, ...]] = field(default_factory=dict)
    dependencies: dict[int, tuple[int, ...]] = field(default_factory=dict)

    def dependents_of(self, step_num: int) -> tuple[int, ...]:
        return self.dependents.get(step_num, ())

    def dependencies_of(self, step_num: int) -> tuple[int, ...]:
        return self.dependencies.get(step_num, ())


def build_graph_view(edges) -> GraphView:
    dependents: dict[int, set[int]] = defaultdict(set)
    dependencies: dict[int, set[int]] = defaultdict(set)
    for edge in edges:
        dependents[edge.output_step_num].add(edge.input_step_num)
        dependencies[edge.input_step_num].add(edge.output_step_num)
    return GraphView(
        dependents={k: tuple(sorted(v)) for k, v in dependents.items()},
        dependencies={k: tuple(sorted(v)) for k, v in dependencies.items()},
    )


class DependencyGraph:
    def __init__(self, store: StepStore):
        self.store = store

    def snapshot(self, recipe_id: str) -> GraphView:
        return build_graph_view(self.store.list_edges(recipe_id))

    def dependents_of(self, recipe_id: str, step_num: int) -> tuple[int, ...]:
        """Steps that consume `step_num`'s output."""
        return self.snapshot(recipe_id).dependents_of(step_num)

    def dependencies_of(self, recipe_id: str, step_num: int) -> tuple[int, ...]:
        """Steps whose output `step_num` consumes."""
        return self.snapshot(recipe_id).dependencies_of(step_num)
