"""Scenario playback for network simulation.

The runner drives a NetworkSimulator on a SimPy clock: one simulation step
per time unit, with scheduled transmissions injected at the start of the
tick they are due.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Generator, Iterable, List, Optional

import simpy

from network_viz.core.policy import ForwardingPolicy
from network_viz.core.simulator import NetworkSimulator
from network_viz.scenario.loader import Event

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of a scenario run.

    Attributes:
        ticks: Number of simulation steps executed.
        completed: True if the run ended because all work was done, False if
            it hit the tick limit.
        pending_events: Scheduled transmissions never injected.
        packets_in_flight: Transmissions still travelling at the end.
    """

    ticks: int
    completed: bool
    pending_events: int
    packets_in_flight: int


class ScenarioRunner:
    """Plays timed packet injections against a simulator.

    Attributes:
        simulator: The simulator being driven.
        env: SimPy environment providing the tick clock.
        policy: Policy snapshot used for the next step; may be replaced between ticks.
        max_ticks: Upper bound on the number of steps, or None.
    """

    def __init__(
        self,
        simulator: NetworkSimulator,
        events: Iterable[Event],
        policy: Optional[ForwardingPolicy] = None,
        max_ticks: Optional[int] = None,
    ) -> None:
        """Initialize the runner.

        Args:
            simulator: Simulator with its topology built and routes computed.
            events: (tick, uuid, source, destination) entries ordered by tick.
            policy: Policy snapshot; defaults to ForwardingPolicy().
            max_ticks: Upper bound on the number of steps, or None for no bound.
        """
        self.simulator = simulator
        self.env = simpy.Environment()
        self.policy = policy or ForwardingPolicy()
        self.max_ticks = max_ticks
        self.events: Deque[Event] = deque(events)
        self.ticks = 0
        self.frame_callbacks: List[Callable[[NetworkSimulator], Any]] = []

    @property
    def pending_events(self) -> int:
        return len(self.events)

    @property
    def packets_count(self) -> int:
        """Packets shown to the user: in flight plus not yet injected."""
        return self.simulator.packets_in_flight + self.pending_events

    def on_frame(self, callback: Callable[[NetworkSimulator], Any]) -> None:
        """Register a callback invoked after every step."""
        self.frame_callbacks.append(callback)

    def finished(self) -> bool:
        """Whether no events remain and the network has nothing left to do."""
        return not self.events and self.simulator.is_idle()

    def dispatch_due(self, now: int) -> int:
        """Inject every event due at or before now.

        Returns:
            The number of packets injected.
        """
        sent = 0
        while self.events and self.events[0][0] <= now:
            _, uuid, source, destination = self.events.popleft()
            self.simulator.send(uuid, source, destination)
            sent += 1
        return sent

    def _tick_loop(self) -> Generator[simpy.events.Event, Any, None]:
        while True:
            if self.finished():
                return
            if self.max_ticks is not None and self.ticks >= self.max_ticks:
                logger.warning(
                    "Stopping after %d ticks with %d packets in flight and %d events pending",
                    self.ticks,
                    self.simulator.packets_in_flight,
                    self.pending_events,
                )
                return

            self.dispatch_due(int(self.env.now))
            self.simulator.step(self.policy)
            self.ticks += 1
            for callback in self.frame_callbacks:
                callback(self.simulator)
            yield self.env.timeout(1)

    def run(self) -> RunResult:
        """Run until the scenario finishes or the tick limit is reached.

        Returns:
            Summary of the run.
        """
        process = self.env.process(self._tick_loop())
        self.env.run(until=process)
        self.simulator.call_hooks("sim_end", self.simulator.tick)
        return RunResult(
            ticks=self.ticks,
            completed=self.finished(),
            pending_events=self.pending_events,
            packets_in_flight=self.simulator.packets_in_flight,
        )
