"""Scenario files for network simulation.

A scenario is a JSON document describing the topology and the timed packet
injections of one run::

    {
        "nodes": [[x, y, is_endpoint], ...],
        "cable_connections": [[i, j], ...],
        "transmissions": [[tick, uuid, source, destination], ...]
    }

Node indices in connections and transmissions refer to positions in the
"nodes" list.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, IO, List, Tuple
from uuid import UUID

from network_viz.core.enums import NodeKind
from network_viz.core.errors import ScenarioError
from network_viz.core.simulator import NetworkSimulator

logger = logging.getLogger(__name__)

NodeSpec = Tuple[int, int, bool]
Event = Tuple[int, UUID, int, int]

DEMO_NODES: List[NodeSpec] = [
    (80, 80, True),
    (150, 130, False),
    (290, 50, False),
    (80, 300, True),
    (120, 510, True),
    (200, 360, False),
    (400, 520, True),
    (320, 280, False),
    (480, 120, False),
    (650, 150, True),
    (300, 370, False),
    (560, 40, True),
    (520, 320, False),
    (630, 360, False),
    (640, 440, False),
    (570, 560, True),
    (760, 490, True),
]

DEMO_CABLES: List[Tuple[int, int]] = [
    (0, 1),
    (1, 3),
    (3, 5),
    (4, 5),
    (5, 10),
    (10, 7),
    (1, 7),
    (1, 2),
    (2, 8),
    (8, 11),
    (11, 9),
    (6, 10),
    (10, 12),
    (7, 12),
    (8, 12),
    (12, 13),
    (13, 14),
    (14, 15),
    (14, 16),
    (9, 12),
]


@dataclass
class Scenario:
    """Topology and timed packet injections of one run.

    Attributes:
        nodes: (x, y, is_endpoint) per node.
        cable_connections: Pairs of node indices joined by a cable.
        transmissions: (tick, uuid, source, destination) events, ordered by tick.
    """

    nodes: List[NodeSpec]
    cable_connections: List[Tuple[int, int]] = field(default_factory=list)
    transmissions: List[Event] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.transmissions = sorted(self.transmissions, key=lambda event: event[0])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scenario":
        """Build a scenario from decoded JSON.

        Raises:
            ScenarioError: If the document does not follow the schema.
        """
        if not isinstance(data, dict):
            raise ScenarioError("Scenario must be a JSON object")
        missing = {"nodes", "cable_connections", "transmissions"} - data.keys()
        if missing:
            raise ScenarioError(f"Scenario is missing {', '.join(sorted(missing))}")

        try:
            nodes = [(_as_int(x), _as_int(y), _as_bool(e)) for x, y, e in data["nodes"]]
            cables = [(_as_int(i), _as_int(j)) for i, j in data["cable_connections"]]
            events = [
                (_as_int(tick), UUID(str(uuid)), _as_int(source), _as_int(destination))
                for tick, uuid, source, destination in data["transmissions"]
            ]
        except (TypeError, ValueError) as e:
            raise ScenarioError(f"Malformed scenario: {e}") from e

        count = len(nodes)
        for i, j in cables:
            if not (0 <= i < count and 0 <= j < count):
                raise ScenarioError(f"Cable ({i}, {j}) refers to a missing node")
            if i == j:
                raise ScenarioError(f"Cable ({i}, {j}) connects a node to itself")
        for tick, uuid, source, destination in events:
            if tick < 0:
                raise ScenarioError(f"Transmission {uuid} is scheduled before tick 0")
            if not (0 <= source < count and 0 <= destination < count):
                raise ScenarioError(f"Transmission {uuid} refers to a missing node")

        return cls(nodes, cables, events)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [list(n) for n in self.nodes],
            "cable_connections": [list(c) for c in self.cable_connections],
            "transmissions": [
                [tick, str(uuid), source, destination]
                for tick, uuid, source, destination in self.transmissions
            ],
        }

    def build(self, simulator: NetworkSimulator, allow_unreachable: bool = False) -> List[int]:
        """Create the topology on a simulator and compute its routes.

        Each cable (i, j) joins interface "i-j" of node i with interface
        "j-i" of node j.

        Args:
            simulator: An empty simulator.
            allow_unreachable: Passed on to calculate_routes.

        Returns:
            Node IDs in scenario order.
        """
        node_ids = [
            simulator.add_node(NodeKind.ENDPOINT if is_endpoint else NodeKind.ROUTER, (x, y))
            for x, y, is_endpoint in self.nodes
        ]
        for i, j in self.cable_connections:
            a, b = node_ids[i], node_ids[j]
            side_a = simulator.create_interface(a, f"{a}-{b}")
            side_b = simulator.create_interface(b, f"{b}-{a}")
            simulator.connect_cable((a, side_a), (b, side_b))

        simulator.calculate_routes(allow_unreachable=allow_unreachable)
        logger.debug(
            "Built scenario with %d nodes and %d cables",
            len(node_ids),
            len(self.cable_connections),
        )
        return node_ids


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {value!r}")
    return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValueError(f"expected a boolean, got {value!r}")


def loads(text: str) -> Scenario:
    """Parse a scenario from a JSON string."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ScenarioError(f"Invalid JSON: {e}") from e
    return Scenario.from_dict(data)


def load(stream: IO[str]) -> Scenario:
    """Parse a scenario from an open text stream."""
    return loads(stream.read())


def load_file(path: str) -> Scenario:
    """Parse a scenario from a file."""
    with open(path, "r", encoding="utf-8") as f:
        return load(f)


def demo_scenario() -> Scenario:
    """The built-in 17 node topology, with no scheduled transmissions."""
    return Scenario(list(DEMO_NODES), list(DEMO_CABLES), [])
