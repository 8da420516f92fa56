"""Node class for network simulation.

This module defines the Node class, which represents a network element
(router or endpoint) in the simulated network. Routers and endpoints share
the same forwarding logic; the kind only matters to the renderer.
"""

import logging
from typing import Dict, List, Optional, Tuple

from network_viz.core.enums import NodeKind
from network_viz.core.errors import DuplicateInterfaceError, UnknownInterfaceError
from network_viz.core.link import Interface, Position, distance_between
from network_viz.core.packet import Packet
from network_viz.core.policy import ForwardingPolicy
from network_viz.utils.rng import CustomRNG

logger = logging.getLogger(__name__)

# Radius around a node's centre that counts as "on" the node.
NODE_RADIUS = 35.0


def route_interface_id(node_id: int, next_hop: int) -> str:
    """Interface name a node uses to reach a neighbour."""
    return f"{node_id}-{next_hop}"


class Node:
    """Represents a network node (router or endpoint).

    Attributes:
        id: Unique identifier for the node.
        kind: Router or endpoint.
        position: Position of the node as (x, y).
        interfaces: Interfaces keyed by ID, in creation order.
        known_routes: Outgoing interface ID for each destination.
    """

    def __init__(self, node_id: int, kind: NodeKind, position: Position) -> None:
        """Initialize a network node.

        Args:
            node_id: Unique identifier for the node.
            kind: Router or endpoint.
            position: Position of the node as (x, y).
        """
        self.id = node_id
        self.kind = kind
        self.position: Position = tuple(position)
        self.interfaces: Dict[str, Interface] = {}
        self.known_routes: Dict[int, str] = {}

    def create_interface(self, interface_id: str) -> str:
        """Add an unbound interface.

        Args:
            interface_id: Identifier, unique within this node.

        Returns:
            The interface ID.

        Raises:
            DuplicateInterfaceError: If the ID is already used on this node.
        """
        if interface_id in self.interfaces:
            raise DuplicateInterfaceError(self.id, interface_id)
        self.interfaces[interface_id] = Interface(self.id, interface_id)
        return interface_id

    def get_interface(self, interface_id: str) -> Interface:
        """Look up an interface by ID.

        Raises:
            UnknownInterfaceError: If the node has no such interface.
        """
        try:
            return self.interfaces[interface_id]
        except KeyError:
            raise UnknownInterfaceError(self.id, interface_id) from None

    def bound_interfaces(self) -> List[str]:
        """IDs of the interfaces attached to a link, in creation order."""
        return [i.id for i in self.interfaces.values() if i.is_bound]

    def corresponds_to_position(self, point: Position) -> bool:
        """Whether a point falls within the node's drawn radius."""
        return distance_between(point, self.position) < NODE_RADIUS

    def set_known_route(self, destination: int, next_hop: int) -> None:
        """Record the neighbour to send to for a destination.

        Args:
            destination: Destination node ID.
            next_hop: Neighbour node ID on the shortest path.
        """
        self.known_routes[destination] = route_interface_id(self.id, next_hop)

    def clear_known_routes(self) -> None:
        self.known_routes.clear()

    def will_receive(self, interface_id: str, packet: Packet) -> bool:
        """Admission guard for packets arriving on a link.

        A node never takes back a packet it put on the medium itself.
        """
        return packet.current_sender != self.id

    def choose_interface(
        self, destination: int, policy: ForwardingPolicy, rng: CustomRNG
    ) -> Optional[str]:
        """Pick the outgoing interface towards a destination.

        With computed routing the routing table is used; without it, or when no
        route is known, a bound interface is chosen at random.

        Returns:
            The interface ID, or None if the node has no bound interface.
        """
        if policy.computed_routing:
            interface_id = self.known_routes.get(destination)
            if interface_id is not None:
                return interface_id
        candidates = self.bound_interfaces()
        if not candidates:
            return None
        return rng.choice(candidates)

    def receive(
        self,
        interface_id: str,
        packet: Packet,
        policy: ForwardingPolicy,
        rng: CustomRNG,
    ) -> List[Tuple[str, Packet]]:
        """Decide what to do with an incoming packet.

        Args:
            interface_id: Interface the packet arrived on.
            packet: The incoming packet.
            policy: Policy snapshot for this tick.
            rng: Generator used for random fallback and echo identities.

        Returns:
            (outgoing interface ID, packet) emissions; empty if the packet stops here.
        """
        if policy.drop_everything:
            logger.debug("Node %s drops %s (drop everything)", self.id, packet.uuid)
            return []

        if packet.destination != self.id:
            outgoing = packet.forwarded_by(self.id)
        elif policy.echo_on_arrival:
            outgoing = packet.echo_from(self.id, rng.uuid())
        else:
            return []

        out_interface = self.choose_interface(outgoing.destination, policy, rng)
        if out_interface is None:
            logger.debug("Node %s has no bound interface, dropping %s", self.id, outgoing.uuid)
            return []
        return [(out_interface, outgoing)]

    def __repr__(self) -> str:
        return f"Node({self.id}, {self.kind.name})"
