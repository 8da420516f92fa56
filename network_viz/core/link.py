"""Link classes for network simulation.

This module defines the Interface a node attaches through, and the Link
medium that joins two (cable) or more (bus) interfaces. A link delivers an
emitted packet to every endpoint other than the one that emitted it.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from network_viz.core.enums import LinkKind
from network_viz.core.errors import InterfaceAlreadyBoundError, InvalidLinkError

Position = Tuple[int, int]


def distance_between(a: Position, b: Position) -> float:
    """Euclidean distance between two points.

    Args:
        a: First point as (x, y).
        b: Second point as (x, y).

    Returns:
        The straight-line distance.
    """
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


class Interface:
    """A node's named attachment point to a link.

    An interface starts unbound and may be bound to a link exactly once.

    Attributes:
        owner: ID of the node holding the interface.
        id: Interface identifier, unique within the owner.
    """

    def __init__(self, owner: int, interface_id: str) -> None:
        self.owner = owner
        self.id = interface_id
        self._link: Optional[int] = None

    @property
    def link(self) -> Optional[int]:
        """ID of the bound link, or None while unbound."""
        return self._link

    @property
    def is_bound(self) -> bool:
        return self._link is not None

    def bind(self, link_id: int) -> None:
        """Bind this interface to a link.

        Args:
            link_id: ID of the link.

        Raises:
            InterfaceAlreadyBoundError: If the interface is already bound.
        """
        if self._link is not None:
            raise InterfaceAlreadyBoundError(self.owner, self.id, self._link)
        self._link = link_id

    def __repr__(self) -> str:
        return f"Interface({self.owner}:{self.id} -> {self._link})"


@dataclass(frozen=True)
class LinkEndpoint:
    """One side of a link: an interface identified through its owner."""

    owner: int
    interface_id: str


class Link:
    """Represents a broadcast-capable link medium.

    Attributes:
        id: Link ID.
        kind: Cable (two endpoints) or bus (two or more).
        endpoints: Attached interfaces in connection order.
        positions: Owner positions captured when the link was connected.
        weight_multiplier: Factor applied to geometric distance for routing.
    """

    def __init__(
        self,
        link_id: int,
        kind: LinkKind,
        endpoints: Sequence[LinkEndpoint],
        positions: Sequence[Position],
        weight_multiplier: float = 1.0,
    ) -> None:
        """Initialize a link.

        Args:
            link_id: Link ID.
            kind: The kind of medium.
            endpoints: Interfaces joined by the link.
            positions: Position of each endpoint's owner, same order as endpoints.
            weight_multiplier: Factor applied to distances when routing.

        Raises:
            InvalidLinkError: If the endpoints do not fit the medium.
        """
        endpoints = list(endpoints)
        if kind is LinkKind.CABLE and len(endpoints) != 2:
            raise InvalidLinkError(f"A cable needs exactly 2 endpoints, got {len(endpoints)}")
        if kind is LinkKind.BUS and len(endpoints) < 2:
            raise InvalidLinkError(f"A bus needs at least 2 endpoints, got {len(endpoints)}")
        if len(set(endpoints)) != len(endpoints):
            raise InvalidLinkError("The same interface appears twice on one link")
        if len(positions) != len(endpoints):
            raise InvalidLinkError("Every endpoint needs a position")

        self.id = link_id
        self.kind = kind
        self.endpoints: List[LinkEndpoint] = endpoints
        self.positions: List[Position] = [tuple(p) for p in positions]
        self.weight_multiplier = weight_multiplier

    def position_of(self, endpoint: LinkEndpoint) -> Position:
        """Cached position of an endpoint's owner."""
        return self.positions[self.endpoints.index(endpoint)]

    def receivers(self, sender: LinkEndpoint) -> List[Tuple[LinkEndpoint, Position]]:
        """Endpoints that hear an emission from sender.

        Args:
            sender: The emitting endpoint.

        Returns:
            Every other endpoint with its cached position.
        """
        return [
            (endpoint, position)
            for endpoint, position in zip(self.endpoints, self.positions)
            if endpoint != sender
        ]

    def routing_edges(self) -> List[Tuple[int, int, float]]:
        """Directed edges this link contributes to the routing graph.

        A cable yields the forward then the reverse edge; a bus yields one
        edge per ordered pair of endpoints.

        Returns:
            (from node, to node, weight multiplier) triples.
        """
        edges = []
        owners = [endpoint.owner for endpoint in self.endpoints]
        for i, source in enumerate(owners):
            for j, target in enumerate(owners):
                if i != j and source != target:
                    edges.append((source, target, self.weight_multiplier))
        return edges

    def segments(self) -> List[Tuple[Position, Position]]:
        """Straight line segments used to draw the link."""
        if self.kind is LinkKind.CABLE:
            return [(self.positions[0], self.positions[1])]
        return [
            (self.positions[i], self.positions[j])
            for i in range(len(self.positions))
            for j in range(i + 1, len(self.positions))
        ]

    def __repr__(self) -> str:
        sides = ", ".join(f"{e.owner}:{e.interface_id}" for e in self.endpoints)
        return f"Link({self.id}, {self.kind.name}, [{sides}])"
