from stepgraph.services.dependency_graph import DependencyGraph, build_graph_view
from tests.fakes import FakeEdge


def test_dependents_and_dependencies_sorted(store):
    store.seed("r1", [1, 2, 3, 4], edges=[(1, 4), (1, 2), (3, 4), (2, 4), (1, 3)])
    graph = DependencyGraph(store)

    assert graph.dependents_of("r1", 1) == (2, 3, 4)
    assert graph.dependents_of("r1", 4) == ()
    assert graph.dependencies_of("r1", 4) == (1, 2, 3)
    assert graph.dependencies_of("r1", 1) == ()


def test_queries_read_through_to_store(store):
    store.seed("r1", [1, 2, 3], edges=[(1, 2)])
    graph = DependencyGraph(store)
    assert graph.dependents_of("r1", 1) == (2,)

    store.edges.append(FakeEdge("r1", 1, 3))

    assert graph.dependents_of("r1", 1) == (2, 3)


def test_queries_scoped_to_recipe(store):
    store.seed("r1", [1, 2], edges=[(1, 2)])
    store.seed("r2", [1, 2, 3], edges=[(1, 3)])
    graph = DependencyGraph(store)

    assert graph.dependents_of("r1", 1) == (2,)
    assert graph.dependents_of("r2", 1) == (3,)
    assert graph.dependencies_of("r2", 2) == ()


def test_graph_view_from_edges():
    view = build_graph_view([FakeEdge("r1", 1, 3), FakeEdge("r1", 2, 3), FakeEdge("r1", 1, 2)])

    assert view.dependents == {1: (2, 3), 2: (3,)}
    assert view.dependencies == {2: (1,), 3: (1, 2)}
    assert view.dependents_of(3) == ()
