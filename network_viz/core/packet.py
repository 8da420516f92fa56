"""Packet class for network simulation.

This module defines the Packet class, which represents a network packet
traveling through the simulated network. Packets carry routing metadata only.
"""

from dataclasses import dataclass, replace
from uuid import UUID


@dataclass(frozen=True)
class Packet:
    """Represents a network packet.

    Packets are immutable; every hop produces a new value.

    Attributes:
        uuid: Identity of the transmission, kept across ordinary hops.
        source: Node ID that originated the packet.
        current_sender: Node ID that last put the packet on a link.
        destination: Destination node ID.
    """

    uuid: UUID
    source: int
    current_sender: int
    destination: int

    @classmethod
    def originate(cls, uuid: UUID, source: int, destination: int) -> "Packet":
        """Create a packet as it leaves the stack of its source node."""
        return cls(uuid=uuid, source=source, current_sender=source, destination=destination)

    def forwarded_by(self, node_id: int) -> "Packet":
        """Return the copy of this packet relayed by node_id.

        Args:
            node_id: ID of the forwarding node.

        Returns:
            A packet with the same uuid, source and destination.
        """
        return replace(self, current_sender=node_id)

    def echo_from(self, node_id: int, uuid: UUID) -> "Packet":
        """Return the reply a destination sends back to the source.

        Args:
            node_id: ID of the node generating the echo.
            uuid: Fresh identity for the reply.

        Returns:
            A packet travelling from node_id back to this packet's source.
        """
        if uuid == self.uuid:
            raise ValueError("An echo must carry a new uuid.")
        return Packet(
            uuid=uuid,
            source=node_id,
            current_sender=node_id,
            destination=self.source,
        )
