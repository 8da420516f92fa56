"""Enumerations for network simulation.

This module defines enumerations used throughout the network simulator.
"""

from enum import Enum


class NodeKind(Enum):
    """Enum for the kinds of network node.

    Both kinds forward packets identically; the kind is only consulted when
    the node is drawn.

    Attributes:
        ROUTER: Transit node drawn as a router.
        ENDPOINT: Host node drawn as an endpoint.
    """

    ROUTER = 1
    ENDPOINT = 2


class LinkKind(Enum):
    """Enum for the kinds of link medium.

    Attributes:
        CABLE: Point-to-point medium with exactly two endpoints.
        BUS: Shared broadcast medium with two or more endpoints.
    """

    CABLE = 1
    BUS = 2
