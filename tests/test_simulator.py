from uuid import UUID

import pytest

from network_viz.core.enums import LinkKind
from network_viz.core.errors import TopologyError, UnknownNodeError
from network_viz.core.link import LinkEndpoint
from network_viz.core.packet import Packet
from network_viz.core.policy import ForwardingPolicy
from network_viz.core.simulator import LOCAL_INTERFACE, NetworkSimulator
from network_viz.core.transmission import Transmission
from network_viz.scenario.loader import Scenario

UUID_A = UUID("2f1d8a30-61c4-4e55-8a2b-5c9b3d7e0f42")


def create_pair(distance_points=((0, 0), (30, 40))):
    """Two endpoints joined by one cable, 50 units apart by default."""
    (x0, y0), (x1, y1) = distance_points
    sim = NetworkSimulator()
    Scenario(nodes=[(x0, y0, True), (x1, y1, True)], cable_connections=[(0, 1)]).build(sim)
    return sim


def create_bus(sim, members):
    """Attach the given (node, interface) pairs to one bus."""
    for node, name in members:
        sim.create_interface(node, name)
    return sim.connect(members, LinkKind.BUS)


def test_transmission_delivers_exactly_once_at_distance():
    transmission = Transmission((0, 0), (3, 4), LinkEndpoint(1, "1-0"), Packet(UUID_A, 0, 0, 1))
    assert transmission.distance == 5

    results = [transmission.advance() for _ in range(8)]

    assert results == [False, False, False, False, True, False, False, False]
    assert transmission.travelled == 5


def test_transmission_with_zero_distance_completes_next_tick():
    transmission = Transmission((7, 7), (7, 7), LinkEndpoint(1, "1-0"), Packet(UUID_A, 0, 0, 1))
    assert transmission.distance == 0
    assert transmission.advance() is True
    assert transmission.travelled == 0
    assert transmission.advance() is False


def test_transmission_position_is_interpolated():
    transmission = Transmission((0, 0), (30, 40), LinkEndpoint(1, "1-0"), Packet(UUID_A, 0, 0, 1))
    assert transmission.position() == (0.0, 0.0)
    for _ in range(25):
        transmission.advance()
    assert transmission.position() == (15.0, 20.0)


def test_send_queues_packet_without_admission_guard():
    sim = create_pair()
    packet = sim.send(UUID_A, 0, 1)

    assert packet == Packet(UUID_A, 0, 0, 1)
    assert sim.incoming == [(0, LOCAL_INTERFACE, packet)]
    assert sim.packets_queued == 1
    assert not sim.is_idle()


def test_send_to_unknown_node():
    sim = create_pair()
    with pytest.raises(UnknownNodeError):
        sim.send(UUID_A, 0, 5)


def test_packet_crosses_cable_and_is_consumed():
    sim = create_pair()
    arrivals = []
    sim.register_hook("packet_arrived", lambda packet, node, tick: arrivals.append((packet, node, tick)))

    sim.send(UUID_A, 0, 1)
    sim.step()
    assert sim.packets_in_flight == 1
    [transmission] = sim.transmissions
    assert transmission.recipient == LinkEndpoint(1, "1-0")
    assert transmission.packet == Packet(UUID_A, 0, 0, 1)
    assert transmission.distance == 50

    for _ in range(49):
        sim.step()
    assert sim.packets_in_flight == 1
    assert arrivals == []

    sim.step()
    assert sim.is_idle()
    assert [(p.uuid, node) for p, node, _ in arrivals] == [(UUID_A, 1)]
    assert sim.tick == 51


def test_echo_produces_one_return_transmission():
    sim = create_pair()
    echo = ForwardingPolicy(echo_on_arrival=True)
    started = []
    sim.register_hook("transmission_started", lambda t, tick: started.append(t))

    sim.send(UUID_A, 0, 1)
    sim.run(51, echo)

    assert len(started) == 2
    back = started[1]
    assert back.recipient.owner == 0
    assert back.packet.current_sender == 1
    assert (back.packet.source, back.packet.destination) == (1, 0)
    assert back.packet.uuid != UUID_A

    sim.run(100)
    assert sim.is_idle()
    assert len(started) == 2


def test_drop_everything_stops_all_emissions():
    sim = create_pair()
    dropped = []
    sim.register_hook("packet_dropped", lambda p, node, reason, tick: dropped.append((node, reason)))

    sim.send(UUID_A, 0, 1)
    sim.step(ForwardingPolicy(drop_everything=True))

    assert sim.is_idle()
    assert dropped == [(0, "Drop everything")]


def test_drop_everything_applies_to_transit_packets():
    sim = NetworkSimulator()
    Scenario(
        nodes=[(0, 0, True), (10, 0, False), (20, 0, True)],
        cable_connections=[(0, 1), (1, 2)],
    ).build(sim)
    forwarded = []
    sim.register_hook("packet_forwarded", lambda p, node, iface, tick: forwarded.append(node))

    sim.send(UUID_A, 0, 2)
    sim.step()
    assert forwarded == [0]
    sim.run(20, ForwardingPolicy(drop_everything=True))
    assert forwarded == [0]
    assert sim.is_idle()


def test_multi_hop_route_is_followed():
    sim = NetworkSimulator()
    Scenario(
        nodes=[(0, 0, True), (10, 0, False), (20, 0, False), (30, 0, True)],
        cable_connections=[(0, 1), (1, 2), (2, 3)],
    ).build(sim)
    deliveries = []
    sim.register_hook("packet_delivered", lambda p, node, iface, tick: deliveries.append((node, iface, p.current_sender)))

    sim.send(UUID_A, 0, 3)
    sim.run(1000)

    assert deliveries == [(1, "1-0", 0), (2, "2-1", 1), (3, "3-2", 2)]
    assert sim.is_idle()


def test_bus_never_returns_packet_to_its_sender():
    sim = NetworkSimulator()
    a = sim.add_endpoint_node((0, 0))
    b = sim.add_router_node((40, 0))
    c = sim.add_endpoint_node((80, 0))
    create_bus(sim, [(a, "a0"), (a, "a1"), (b, "b0"), (c, "c0")])
    policy = ForwardingPolicy(computed_routing=False)

    sim.send(UUID_A, a, c)
    sim.step(policy)

    recipients = sorted(t.recipient.owner for t in sim.transmissions)
    assert recipients == [b, c]
    assert all(t.packet.current_sender == a for t in sim.transmissions)


def test_bus_relay_reaches_everyone_but_relay():
    sim = NetworkSimulator()
    a = sim.add_endpoint_node((0, 0))
    b = sim.add_router_node((40, 0))
    c = sim.add_endpoint_node((80, 0))
    create_bus(sim, [(a, "a0"), (b, "b0"), (c, "c0")])
    policy = ForwardingPolicy(computed_routing=False)

    sim.send(UUID_A, a, c)
    for _ in range(41):
        sim.step(policy)

    relayed = [t for t in sim.transmissions if t.packet.current_sender == b]
    assert sorted(t.recipient.owner for t in relayed) == [a, c]


def test_stale_routes_refuse_to_step():
    sim = NetworkSimulator()
    a = sim.add_endpoint_node((0, 0))
    b = sim.add_endpoint_node((10, 0))
    sim.create_interface(a, "0-1")
    sim.create_interface(b, "1-0")
    sim.connect_cable((a, "0-1"), (b, "1-0"))

    with pytest.raises(TopologyError):
        sim.step()
    sim.step(ForwardingPolicy(computed_routing=False))


def test_random_forwarding_still_delivers():
    sim = create_pair()
    sim.send(UUID_A, 0, 1)
    sim.run(100, ForwardingPolicy(computed_routing=False))
    assert sim.is_idle()


def test_frame_exposes_render_state():
    sim = create_pair()
    sim.send(UUID_A, 0, 1)
    for _ in range(26):
        sim.step()

    frame = sim.frame()
    assert frame.tick == 26
    assert [(n, p) for n, _, p in frame.nodes] == [(0, (0, 0)), (1, (30, 40))]
    assert frame.segments == [((0, 0), (30, 40))]
    assert frame.packets == [((15.0, 20.0), UUID_A)]
    assert frame.packets_in_flight == 1


def test_unknown_hook_is_rejected():
    sim = NetworkSimulator()
    with pytest.raises(ValueError):
        sim.register_hook("packet_lost", print)
