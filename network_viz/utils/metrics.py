"""Metrics utilities for network simulation.

This module provides a hook-driven packet counter that records what happens
to packets during a run, and helpers to save the results.
"""

import json
import os
from collections import defaultdict
from typing import Any, Dict, List, Tuple
from uuid import UUID

from network_viz.core.packet import Packet
from network_viz.core.simulator import NetworkSimulator
from network_viz.core.transmission import Transmission


class PacketCounter:
    """Collects packet statistics from simulator hooks.

    Attributes:
        sent: Packets injected at a source.
        transmissions: Transmissions started on links.
        delivered: Transmissions that reached their recipient.
        forwarded: Relay decisions, including the first one at the source.
        echoed: Replies generated at destinations.
        arrived: Packets that reached their destination.
        dropped: (uuid, node ID, reason) per discarded packet.
        hops: Number of link traversals per packet uuid.
        arrival_ticks: Tick of first arrival per packet uuid.
        end_tick: Tick at which the run ended.
    """

    def __init__(self, simulator: NetworkSimulator) -> None:
        self.sent = 0
        self.transmissions = 0
        self.delivered = 0
        self.forwarded = 0
        self.echoed = 0
        self.arrived = 0
        self.dropped: List[Tuple[UUID, int, str]] = []
        self.hops: Dict[UUID, int] = defaultdict(int)
        self.arrival_ticks: Dict[UUID, int] = {}
        self.end_tick = 0

        simulator.register_hook("packet_sent", self.on_packet_sent)
        simulator.register_hook("transmission_started", self.on_transmission_started)
        simulator.register_hook("packet_delivered", self.on_packet_delivered)
        simulator.register_hook("packet_forwarded", self.on_packet_forwarded)
        simulator.register_hook("packet_echoed", self.on_packet_echoed)
        simulator.register_hook("packet_arrived", self.on_packet_arrived)
        simulator.register_hook("packet_dropped", self.on_packet_dropped)
        simulator.register_hook("sim_end", self.on_sim_end)

    def on_packet_sent(self, packet: Packet, tick: int) -> None:
        self.sent += 1

    def on_transmission_started(self, transmission: Transmission, tick: int) -> None:
        self.transmissions += 1

    def on_packet_delivered(self, packet: Packet, node_id: int, interface_id: str, tick: int) -> None:
        self.delivered += 1
        self.hops[packet.uuid] += 1

    def on_packet_forwarded(self, packet: Packet, node_id: int, interface_id: str, tick: int) -> None:
        self.forwarded += 1

    def on_packet_echoed(self, echo: Packet, original: Packet, node_id: int, tick: int) -> None:
        self.echoed += 1

    def on_packet_arrived(self, packet: Packet, node_id: int, tick: int) -> None:
        self.arrived += 1
        self.arrival_ticks.setdefault(packet.uuid, tick)

    def on_packet_dropped(self, packet: Packet, node_id: int, reason: str, tick: int) -> None:
        self.dropped.append((packet.uuid, node_id, reason))

    def on_sim_end(self, tick: int) -> None:
        self.end_tick = tick

    def summary(self) -> Dict[str, Any]:
        """Return the statistics as a JSON-serializable dictionary."""
        hop_counts = list(self.hops.values())
        return {
            "ticks": self.end_tick,
            "sent": self.sent,
            "transmissions": self.transmissions,
            "delivered": self.delivered,
            "forwarded": self.forwarded,
            "echoed": self.echoed,
            "arrived": self.arrived,
            "dropped": len(self.dropped),
            "average_hops": sum(hop_counts) / len(hop_counts) if hop_counts else 0,
            "hops": {str(uuid): count for uuid, count in self.hops.items()},
            "arrival_ticks": {str(uuid): tick for uuid, tick in self.arrival_ticks.items()},
        }


def save_metrics_to_json(
    metrics: Dict[str, Any], filename: str = "results/metrics.json"
) -> None:
    """Save metrics to a JSON file.

    Args:
        metrics: Dictionary of metrics to save.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filename, "w") as f:
        json.dump(metrics, f, indent=2)
