"""In-flight packet state.

A Transmission is created for every receiver of an emission and advances one
unit of distance per tick until it reaches the receiver.
"""

from typing import Tuple

import numpy as np

from network_viz.core.link import LinkEndpoint, Position, distance_between
from network_viz.core.packet import Packet


class Transmission:
    """A packet traversing a link towards one recipient.

    Attributes:
        start: Position the packet left from.
        end: Position of the recipient.
        distance: Length of the trip in ticks.
        travelled: Ticks travelled so far, within [0, distance].
        recipient: Endpoint the packet is delivered to.
        packet: The carried packet.
        delivered: Whether delivery already happened.
    """

    def __init__(
        self, start: Position, end: Position, recipient: LinkEndpoint, packet: Packet
    ) -> None:
        self.start = start
        self.end = end
        self.distance = int(distance_between(start, end))
        self.travelled = 0
        self.recipient = recipient
        self.packet = packet
        self.delivered = False
        self._ticks = 0

    def advance(self) -> bool:
        """Move one tick forward.

        Returns:
            True exactly once, on the tick the packet reaches the recipient.
        """
        if self.delivered:
            return False
        self._ticks += 1
        self.travelled = min(self._ticks, self.distance)
        if self._ticks >= self.distance:
            self.delivered = True
            return True
        return False

    @property
    def progress(self) -> float:
        if self.distance == 0:
            return 1.0 if self.delivered else 0.0
        return self.travelled / self.distance

    def position(self) -> Tuple[float, float]:
        """Interpolated position between start and end."""
        start = np.asarray(self.start, dtype=float)
        end = np.asarray(self.end, dtype=float)
        x, y = start + (end - start) * self.progress
        return float(x), float(y)

    def __repr__(self) -> str:
        return (
            f"Transmission({self.packet.uuid}, {self.packet.current_sender}->"
            f"{self.recipient.owner}, {self.travelled}/{self.distance})"
        )
