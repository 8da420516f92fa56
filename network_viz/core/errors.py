"""Exceptions raised by the network simulator.

Configuration errors derive from ValueError and are raised while the topology
is being built or routes are computed. Lookup errors derive from KeyError and
signal a reference to something that does not exist.
"""

from typing import List, Tuple


class TopologyError(ValueError):
    """Base class for malformed topology configuration."""


class DuplicateInterfaceError(TopologyError):
    """An interface with the same id already exists on the node."""

    def __init__(self, node_id: int, interface_id: str) -> None:
        super().__init__(f"Interface '{interface_id}' already exists on node {node_id}")
        self.node_id = node_id
        self.interface_id = interface_id


class InterfaceAlreadyBoundError(TopologyError):
    """The interface is already bound to a link."""

    def __init__(self, node_id: int, interface_id: str, link_id: int) -> None:
        super().__init__(
            f"Interface '{interface_id}' of node {node_id} is already bound to link {link_id}"
        )
        self.node_id = node_id
        self.interface_id = interface_id
        self.link_id = link_id


class InvalidLinkError(TopologyError):
    """The endpoints given to a link do not form a valid medium."""


class UnreachableDestinationError(TopologyError):
    """Route computation found destinations that cannot be reached."""

    def __init__(self, pairs: List[Tuple[int, int]]) -> None:
        shown = ", ".join(f"{s}->{d}" for s, d in pairs[:10])
        if len(pairs) > 10:
            shown += f", ... ({len(pairs)} total)"
        super().__init__(f"Cannot calculate path: unreachable {shown}")
        self.pairs = pairs


class RouteInterfaceError(TopologyError):
    """A computed route names an interface that does not lead to the next hop."""

    def __init__(self, node_id: int, interface_id: str, problem: str = "does not exist") -> None:
        super().__init__(
            f"Route from node {node_id} needs interface '{interface_id}', which {problem}. "
            "Interfaces must be named '<node>-<neighbour>'."
        )
        self.node_id = node_id
        self.interface_id = interface_id


class ScenarioError(ValueError):
    """The scenario description is malformed."""


class NetworkLookupError(KeyError):
    """Base class for references to nonexistent network objects."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class UnknownNodeError(NetworkLookupError):
    def __init__(self, node_id: int) -> None:
        super().__init__(f"Node '{node_id}' not found!")
        self.node_id = node_id


class UnknownLinkError(NetworkLookupError):
    def __init__(self, link_id: int) -> None:
        super().__init__(f"Link '{link_id}' not found!")
        self.link_id = link_id


class UnknownInterfaceError(NetworkLookupError):
    def __init__(self, node_id: int, interface_id: str) -> None:
        super().__init__(f"No interface '{interface_id}' in node '{node_id}'!")
        self.node_id = node_id
        self.interface_id = interface_id


class InterfaceNotConnectedError(NetworkLookupError):
    def __init__(self, node_id: int, interface_id: str) -> None:
        super().__init__(f"Interface '{interface_id}' of node '{node_id}' not connected!")
        self.node_id = node_id
        self.interface_id = interface_id
