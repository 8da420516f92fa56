"""Network simulator class for network simulation.

This module defines the NetworkSimulator class, which owns the topology
(nodes and links), computes routes, and moves packets across links one tick
at a time.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

import networkx as nx

from network_viz.core.arena import Arena
from network_viz.core.enums import LinkKind, NodeKind
from network_viz.core.errors import (
    InterfaceAlreadyBoundError,
    InterfaceNotConnectedError,
    RouteInterfaceError,
    TopologyError,
    UnknownLinkError,
    UnknownNodeError,
    UnreachableDestinationError,
)
from network_viz.core.link import Link, LinkEndpoint, Position
from network_viz.core.node import Node, route_interface_id
from network_viz.core.packet import Packet
from network_viz.core.policy import ForwardingPolicy
from network_viz.core.routing_algorithms import build_edge_list, compute_known_routes
from network_viz.core.transmission import Transmission
from network_viz.utils.rng import CustomRNG

logger = logging.getLogger(__name__)

# Interface tag of packets injected straight into a node's own stack.
LOCAL_INTERFACE = "localhost"


@dataclass
class Frame:
    """Read-only picture of the network for a renderer.

    Attributes:
        tick: Number of completed simulation steps.
        nodes: (node ID, kind, position) per node.
        segments: Line segments of every link.
        packets: Interpolated position and uuid of every in-flight packet.
        packets_in_flight: Number of transmissions in flight.
    """

    tick: int
    nodes: List[Tuple[int, NodeKind, Position]] = field(default_factory=list)
    segments: List[Tuple[Position, Position]] = field(default_factory=list)
    packets: List[Tuple[Tuple[float, float], UUID]] = field(default_factory=list)
    packets_in_flight: int = 0


class NetworkSimulator:
    """Network simulation environment.

    Attributes:
        graph: NetworkX directed graph mirroring the topology.
        nodes: Node objects keyed by node ID.
        links: Link objects keyed by link ID.
        transmissions: Packets currently travelling over links.
        incoming: Packets waiting to be processed by a node.
        tick: Number of completed simulation steps.
        routes_stale: Whether the topology changed since routes were computed.
        rng: Generator for random forwarding and echo identities.
    """

    def __init__(self, seed: int = 42) -> None:
        """Initialize the network simulator.

        Args:
            seed: Random seed for reproducibility.
        """
        self.graph = nx.DiGraph()
        self.nodes: Arena[Node] = Arena(UnknownNodeError)
        self.links: Arena[Link] = Arena(UnknownLinkError)
        self.transmissions: List[Transmission] = []
        self.incoming: List[Tuple[int, str, Packet]] = []
        self.tick = 0
        self.routes_stale = True
        self.rng = CustomRNG(seed)

        self.hooks: Dict[str, List[Callable[..., Any]]] = {
            "packet_sent": [],  # packet injected at its source
            "transmission_started": [],  # packet put on a link towards a recipient
            "packet_delivered": [],  # transmission reached its recipient
            "packet_forwarded": [],  # node relayed a packet
            "packet_echoed": [],  # destination generated a reply
            "packet_arrived": [],  # packet reached its destination
            "packet_dropped": [],  # packet discarded
            "sim_end": [],  # the simulation ends
        }

    def add_node(self, kind: NodeKind, position: Position) -> int:
        """Add a node to the network.

        Args:
            kind: Router or endpoint.
            position: Position of the node as (x, y).

        Returns:
            The ID of the new node.
        """
        node_id = self.nodes.insert_with(lambda key: Node(key, kind, position))
        self.graph.add_node(node_id, kind=kind, pos=tuple(position))
        self.routes_stale = True
        logger.debug("Added %s node %d at %s", kind.name.lower(), node_id, position)
        return node_id

    def add_router_node(self, position: Position) -> int:
        return self.add_node(NodeKind.ROUTER, position)

    def add_endpoint_node(self, position: Position) -> int:
        return self.add_node(NodeKind.ENDPOINT, position)

    def get_node(self, node_id: int) -> Node:
        return self.nodes.get(node_id)

    def get_link(self, link_id: int) -> Link:
        return self.links.get(link_id)

    def create_interface(self, node_id: int, interface_id: str) -> str:
        """Create an interface on a node.

        Args:
            node_id: ID of the node.
            interface_id: Identifier, unique within the node.

        Returns:
            The interface ID.

        Raises:
            UnknownNodeError: If the node does not exist.
            DuplicateInterfaceError: If the node already has this interface.
        """
        return self.get_node(node_id).create_interface(interface_id)

    def connect(
        self,
        endpoints: Sequence[Tuple[int, str]],
        kind: LinkKind = LinkKind.CABLE,
    ) -> int:
        """Join interfaces with a new link.

        Every endpoint is validated before any interface is bound.

        Args:
            endpoints: (node ID, interface ID) pairs.
            kind: The kind of medium.

        Returns:
            The ID of the new link.

        Raises:
            UnknownNodeError: If a node does not exist.
            UnknownInterfaceError: If a node lacks the named interface.
            InterfaceAlreadyBoundError: If an interface is already bound.
            InvalidLinkError: If the endpoints do not fit the medium.
        """
        interfaces = []
        positions = []
        for node_id, interface_id in endpoints:
            node = self.get_node(node_id)
            interface = node.get_interface(interface_id)
            if interface.is_bound:
                raise InterfaceAlreadyBoundError(node_id, interface_id, interface.link)
            interfaces.append(interface)
            positions.append(node.position)

        link_endpoints = [LinkEndpoint(i.owner, i.id) for i in interfaces]
        link_id = self.links.insert_with(
            lambda key: Link(key, kind, link_endpoints, positions)
        )
        for interface in interfaces:
            interface.bind(link_id)

        link = self.links.get(link_id)
        for source, target, multiplier in link.routing_edges():
            self.graph.add_edge(source, target, link=link_id, multiplier=multiplier)
        self.routes_stale = True
        logger.debug("Connected %r", link)
        return link_id

    def connect_cable(self, side_a: Tuple[int, str], side_b: Tuple[int, str]) -> int:
        """Join two interfaces with a cable."""
        return self.connect([side_a, side_b], LinkKind.CABLE)

    def locate_node(self, point: Position) -> Optional[int]:
        """Find the node drawn under a point.

        Args:
            point: Position as (x, y).

        Returns:
            The first node, in ID order, whose radius contains the point.
        """
        for node_id, node in self.nodes.items():
            if node.corresponds_to_position(point):
                return node_id
        return None

    def calculate_routes(self, allow_unreachable: bool = False) -> None:
        """Compute shortest paths and set routing tables for all nodes.

        Routing tables are replaced only if the whole computation succeeds.

        Args:
            allow_unreachable: Accept a partitioned topology. Unreachable
                destinations are left out of the tables and fall back to
                random forwarding.

        Raises:
            UnreachableDestinationError: If some pair cannot be connected and
                allow_unreachable is False.
            RouteInterfaceError: If the '<node>-<next hop>' interface a route
                needs is missing or does not lead to the next hop.
        """
        positions = {node_id: node.position for node_id, node in self.nodes.items()}
        edges = build_edge_list(self.links.values(), positions)
        for source, target, weight in edges:
            self.graph[source][target]["weight"] = weight

        routes, unreachable = compute_known_routes(list(self.nodes.keys()), edges)
        if unreachable:
            if not allow_unreachable:
                raise UnreachableDestinationError(unreachable)
            logger.warning("%d source/destination pairs are unreachable", len(unreachable))

        for source, table in routes.items():
            node = self.get_node(source)
            for next_hop in table.values():
                interface_id = route_interface_id(source, next_hop)
                interface = node.interfaces.get(interface_id)
                if interface is None:
                    raise RouteInterfaceError(source, interface_id)
                if not interface.is_bound:
                    raise RouteInterfaceError(source, interface_id, "is not connected")
                owners = [e.owner for e in self.get_link(interface.link).endpoints]
                if next_hop not in owners:
                    raise RouteInterfaceError(
                        source, interface_id, f"does not lead to node {next_hop}"
                    )

        for source, table in routes.items():
            node = self.get_node(source)
            node.clear_known_routes()
            for destination, next_hop in table.items():
                node.set_known_route(destination, next_hop)

        self.routes_stale = False

    def send(self, uuid: UUID, source: int, destination: int) -> Packet:
        """Inject a packet at its source node.

        The packet enters the source's receive path directly, tagged with the
        local interface. It does not pass the admission guard: it originates
        in the node's own stack, not on the wire.

        Args:
            uuid: Identity of the new packet.
            source: Source node ID.
            destination: Destination node ID.

        Returns:
            The injected packet.
        """
        self.get_node(source)
        self.get_node(destination)
        packet = Packet.originate(uuid, source, destination)
        self.incoming.append((source, LOCAL_INTERFACE, packet))
        self.call_hooks("packet_sent", packet, self.tick)
        return packet

    @property
    def packets_in_flight(self) -> int:
        return len(self.transmissions)

    @property
    def packets_queued(self) -> int:
        return len(self.incoming)

    def is_idle(self) -> bool:
        """Whether nothing is in flight and nothing waits to be processed."""
        return not self.transmissions and not self.incoming

    def step(self, policy: Optional[ForwardingPolicy] = None) -> None:
        """Advance the simulation by one tick.

        Args:
            policy: Policy snapshot for this tick; defaults to ForwardingPolicy().

        Raises:
            TopologyError: If computed routing is on and routes are stale.
        """
        if policy is None:
            policy = ForwardingPolicy()
        if policy.computed_routing and self.routes_stale and len(self.links):
            raise TopologyError("Routes are stale; call calculate_routes() after changing the topology")

        self._advance_transmissions()
        outgoing = self._process_incoming(policy)
        self._emit(outgoing)
        self.tick += 1

    def _advance_transmissions(self) -> None:
        in_flight = []
        for transmission in self.transmissions:
            if not transmission.advance():
                in_flight.append(transmission)
                continue
            packet = transmission.packet
            recipient = transmission.recipient
            self.incoming.append((recipient.owner, recipient.interface_id, packet))
            logger.info(
                "%6d # %s %3d > %3d : RX %3d | %s",
                self.tick,
                packet.uuid,
                packet.source,
                packet.destination,
                recipient.owner,
                recipient.interface_id,
            )
            self.call_hooks(
                "packet_delivered", packet, recipient.owner, recipient.interface_id, self.tick
            )
        self.transmissions = in_flight

    def _process_incoming(self, policy: ForwardingPolicy) -> List[Tuple[Link, LinkEndpoint, Packet]]:
        incoming, self.incoming = self.incoming, []
        outgoing = []
        for node_id, interface_id, packet in incoming:
            node = self.get_node(node_id)
            emissions = node.receive(interface_id, packet, policy, self.rng)
            self._report(node_id, packet, emissions, policy)

            for out_interface, out_packet in emissions:
                interface = node.get_interface(out_interface)
                if not interface.is_bound:
                    raise InterfaceNotConnectedError(node_id, out_interface)
                link = self.get_link(interface.link)
                outgoing.append((link, LinkEndpoint(node_id, out_interface), out_packet))
        return outgoing

    def _report(
        self,
        node_id: int,
        packet: Packet,
        emissions: List[Tuple[str, Packet]],
        policy: ForwardingPolicy,
    ) -> None:
        if policy.drop_everything:
            self.call_hooks("packet_dropped", packet, node_id, "Drop everything", self.tick)
            return
        if packet.destination == node_id:
            self.call_hooks("packet_arrived", packet, node_id, self.tick)
            if not policy.echo_on_arrival:
                return
        if not emissions:
            self.call_hooks("packet_dropped", packet, node_id, "No bound interface", self.tick)
            return
        for out_interface, out_packet in emissions:
            if out_packet.uuid != packet.uuid:
                self.call_hooks("packet_echoed", out_packet, packet, node_id, self.tick)
            else:
                self.call_hooks("packet_forwarded", out_packet, node_id, out_interface, self.tick)

    def _emit(self, outgoing: List[Tuple[Link, LinkEndpoint, Packet]]) -> None:
        for link, sender, packet in outgoing:
            start = link.position_of(sender)
            for endpoint, position in link.receivers(sender):
                owner = self.get_node(endpoint.owner)
                if not owner.will_receive(endpoint.interface_id, packet):
                    continue
                transmission = Transmission(start, position, endpoint, packet)
                self.transmissions.append(transmission)
                self.call_hooks("transmission_started", transmission, self.tick)

    def run(
        self,
        max_ticks: int,
        policy: Optional[ForwardingPolicy] = None,
        until_idle: bool = True,
    ) -> int:
        """Step the simulation repeatedly.

        Args:
            max_ticks: Upper bound on the number of steps.
            policy: Policy snapshot used for every step.
            until_idle: Stop as soon as the network is idle.

        Returns:
            The number of steps taken.
        """
        steps = 0
        while steps < max_ticks:
            if until_idle and self.is_idle():
                break
            self.step(policy)
            steps += 1
        self.call_hooks("sim_end", self.tick)
        return steps

    def frame(self) -> Frame:
        """Capture what a renderer needs to draw the current tick."""
        return Frame(
            tick=self.tick,
            nodes=[(node_id, node.kind, node.position) for node_id, node in self.nodes.items()],
            segments=[segment for link in self.links.values() for segment in link.segments()],
            packets=[(t.position(), t.packet.uuid) for t in self.transmissions],
            packets_in_flight=self.packets_in_flight,
        )

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback function for a specific event type.

        Args:
            event_type: The type of event to register for.
            callback: The function to call when the event occurs.
        """
        if event_type not in self.hooks:
            raise ValueError(f"Unknown hook type: {event_type}")
        self.hooks[event_type].append(callback)

    def call_hooks(self, event_type: str, *args: Any, **kwargs: Any) -> None:
        """Call all registered callbacks for the given event type.

        Args:
            event_type: The type of event that occurred.
            *args, **kwargs: Arguments to pass to the callback functions.
        """
        if event_type in self.hooks:
            for callback in self.hooks[event_type]:
                callback(*args, **kwargs)
