import networkx as nx
import pytest

from network_viz.core.errors import RouteInterfaceError, UnreachableDestinationError
from network_viz.core.routing_algorithms import (
    build_edge_list,
    calculate_preferred_path,
    compute_known_routes,
)
from network_viz.core.simulator import NetworkSimulator
from network_viz.scenario.loader import Scenario, demo_scenario


def create_square_topology():
    """Four nodes on a square with two equally long paths from 0 to 3."""
    scenario = Scenario(
        nodes=[(0, 0, True), (100, 0, False), (0, 100, False), (100, 100, True)],
        cable_connections=[(0, 1), (0, 2), (1, 3), (2, 3)],
    )
    sim = NetworkSimulator()
    scenario.build(sim)
    return sim


def path_weight(path, edges):
    """Total weight along a path, using the lightest edge between each hop pair."""
    return sum(min(w for s, t, w in edges if s == a and t == b) for a, b in zip(path, path[1:]))


def test_edge_weights_are_truncated_distances():
    sim = NetworkSimulator()
    a = sim.add_router_node((0, 0))
    b = sim.add_router_node((10, 10))
    sim.create_interface(a, "0-1")
    sim.create_interface(b, "1-0")
    sim.connect_cable((a, "0-1"), (b, "1-0"))

    positions = {n: sim.get_node(n).position for n in (a, b)}
    assert build_edge_list(sim.links.values(), positions) == [(0, 1, 14), (1, 0, 14)]


def test_preferred_path_simple_chain():
    edges = [(0, 1, 5), (1, 0, 5), (1, 2, 5), (2, 1, 5)]
    assert calculate_preferred_path(0, 2, edges) == [0, 1, 2]
    assert calculate_preferred_path(2, 0, edges) == [2, 1, 0]
    assert calculate_preferred_path(1, 1, edges) == [1]


def test_preferred_path_takes_lighter_detour():
    edges = [(0, 2, 50), (0, 1, 10), (1, 2, 10)]
    assert calculate_preferred_path(0, 2, edges) == [0, 1, 2]


def test_preferred_path_unreachable():
    assert calculate_preferred_path(0, 2, [(0, 1, 1), (1, 0, 1)]) is None


def test_ties_keep_earlier_discovered_predecessor():
    sim = create_square_topology()
    assert sim.get_node(0).known_routes[3] == "0-1"
    assert sim.get_node(3).known_routes[0] == "3-1"
    assert sim.get_node(1).known_routes[2] == "1-0"


def test_tie_order_follows_sorted_frontier():
    # 2 and 1 both settle at distance 4 via different predecessors; the
    # frontier order after sorting decides, not insertion order alone.
    edges = [(0, 1, 10), (0, 2, 4), (0, 3, 1), (3, 1, 3), (1, 4, 1), (2, 4, 1)]
    assert calculate_preferred_path(0, 4, edges) == [0, 2, 4]


def test_compute_known_routes_reports_unreachable_pairs():
    routes, unreachable = compute_known_routes([0, 1, 2], [(0, 1, 3), (1, 0, 3)])
    assert routes == {0: {1: 1}, 1: {0: 0}, 2: {}}
    assert sorted(unreachable) == [(0, 2), (1, 2), (2, 0), (2, 1)]


def test_routes_follow_shortest_paths_on_demo_topology():
    sim = NetworkSimulator()
    demo_scenario().build(sim)

    edges = build_edge_list(
        sim.links.values(), {n: node.position for n, node in sim.nodes.items()}
    )
    lengths = dict(nx.all_pairs_dijkstra_path_length(sim.graph, weight="weight"))

    for source, node in sim.nodes.items():
        assert set(node.known_routes) == set(sim.nodes.keys()) - {source}
        for destination, interface_id in node.known_routes.items():
            assert interface_id in node.interfaces
            next_hop = int(interface_id.split("-")[1])
            via = sim.graph[source][next_hop]["weight"] + lengths[next_hop][destination]
            assert via == lengths[source][destination]

            path = calculate_preferred_path(source, destination, edges)
            assert path[1] == next_hop
            assert path_weight(path, edges) == lengths[source][destination]


def test_unreachable_destination_is_a_setup_error():
    scenario = Scenario(nodes=[(0, 0, True), (50, 0, True), (300, 300, True)], cable_connections=[(0, 1)])
    sim = NetworkSimulator()
    with pytest.raises(UnreachableDestinationError) as excinfo:
        scenario.build(sim)
    assert (0, 2) in excinfo.value.pairs
    assert sim.get_node(0).known_routes == {}
    assert sim.routes_stale


def test_partitioned_topology_can_be_allowed():
    scenario = Scenario(nodes=[(0, 0, True), (50, 0, True), (300, 300, True)], cable_connections=[(0, 1)])
    sim = NetworkSimulator()
    scenario.build(sim, allow_unreachable=True)
    assert sim.get_node(0).known_routes == {1: "0-1"}
    assert sim.get_node(2).known_routes == {}
    assert not sim.routes_stale


def test_interfaces_must_follow_naming_convention():
    sim = NetworkSimulator()
    a = sim.add_router_node((0, 0))
    b = sim.add_router_node((40, 0))
    sim.create_interface(a, "eth0")
    sim.create_interface(b, "eth0")
    sim.connect_cable((a, "eth0"), (b, "eth0"))

    with pytest.raises(RouteInterfaceError):
        sim.calculate_routes()


def test_route_interface_must_be_connected():
    sim = NetworkSimulator()
    a = sim.add_router_node((0, 0))
    b = sim.add_router_node((40, 0))
    sim.create_interface(a, "0-1")
    sim.create_interface(a, "x")
    sim.create_interface(b, "1-0")
    sim.connect_cable((a, "x"), (b, "1-0"))

    with pytest.raises(RouteInterfaceError) as excinfo:
        sim.calculate_routes()
    assert excinfo.value.node_id == a
    assert excinfo.value.interface_id == "0-1"
    assert "not connected" in str(excinfo.value)


def test_route_interface_must_lead_to_next_hop():
    sim = NetworkSimulator()
    a = sim.add_router_node((0, 0))
    b = sim.add_router_node((40, 0))
    c = sim.add_router_node((0, 40))
    sim.create_interface(a, "0-1")
    sim.create_interface(a, "0-2")
    sim.create_interface(b, "1-0")
    sim.create_interface(c, "2-0")
    # names swapped on node 0: "0-1" reaches node 2 and "0-2" reaches node 1
    sim.connect_cable((a, "0-1"), (c, "2-0"))
    sim.connect_cable((a, "0-2"), (b, "1-0"))

    with pytest.raises(RouteInterfaceError) as excinfo:
        sim.calculate_routes()
    assert excinfo.value.node_id == a
    assert "does not lead to node" in str(excinfo.value)


def test_recalculation_replaces_routes():
    sim = create_square_topology()
    assert sim.get_node(0).known_routes[3] == "0-1"

    e = sim.add_router_node((50, 50))
    for node in (0, 3):
        sim.create_interface(node, f"{node}-{e}")
        sim.create_interface(e, f"{e}-{node}")
        sim.connect_cable((node, f"{node}-{e}"), (e, f"{e}-{node}"))
    assert sim.routes_stale

    sim.calculate_routes()
    assert sim.get_node(0).known_routes[3] == "0-4"
    assert sim.get_node(4).known_routes[1] in {"4-0", "4-3"}
