"""Interactive controls for network simulation.

Holds what a user interface manipulates between ticks: the selected source
and destination nodes and the current forwarding policy.
"""

import logging
from typing import Optional, Tuple

from network_viz.core.packet import Packet
from network_viz.core.policy import ForwardingPolicy
from network_viz.core.simulator import NetworkSimulator

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = 0
DEFAULT_DESTINATION = 16


class Controls:
    """User-facing state of an interactive session.

    Attributes:
        simulator: The simulator being controlled.
        source: Node packets are fired from.
        destination: Node packets are fired to.
        policy: Current policy snapshot.
    """

    def __init__(
        self,
        simulator: NetworkSimulator,
        source: int = DEFAULT_SOURCE,
        destination: int = DEFAULT_DESTINATION,
        policy: Optional[ForwardingPolicy] = None,
    ) -> None:
        self.simulator = simulator
        self.source = source
        self.destination = destination
        self.policy = policy or ForwardingPolicy()

    def select_source(self, point: Tuple[int, int]) -> Optional[int]:
        """Make the node under point the source, if there is one."""
        node_id = self.simulator.locate_node(point)
        if node_id is not None:
            self.source = node_id
        return node_id

    def select_destination(self, point: Tuple[int, int]) -> Optional[int]:
        """Make the node under point the destination, if there is one."""
        node_id = self.simulator.locate_node(point)
        if node_id is not None:
            self.destination = node_id
        return node_id

    def toggle(self, flag: str) -> ForwardingPolicy:
        """Flip a policy flag and return the new snapshot."""
        self.policy = self.policy.toggled(flag)
        logger.debug("Policy flags now: %s", ", ".join(self.policy.active_flags()) or "none")
        return self.policy

    def fire(self) -> Packet:
        """Inject a packet with a fresh uuid from source to destination."""
        return self.simulator.send(self.simulator.rng.uuid(), self.source, self.destination)

    def step(self) -> None:
        """Advance the simulator with the current policy."""
        self.simulator.step(self.policy)

    @property
    def label(self) -> str:
        return f"{self.source}-{self.destination}"
