"""Command-line entry point for the network visualizer.

Runs a scenario headlessly, logging every delivery, and optionally saves
rendered frames and packet statistics.
"""

import argparse
import logging
import sys
from typing import List, Optional

from network_viz.core.errors import ScenarioError, TopologyError
from network_viz.core.policy import ForwardingPolicy
from network_viz.core.simulator import NetworkSimulator
from network_viz.scenario.loader import Scenario, demo_scenario, load, load_file
from network_viz.scenario.runner import ScenarioRunner
from network_viz.utils.controls import Controls
from network_viz.utils.metrics import PacketCounter, save_metrics_to_json

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="network-viz", description="Computer Network Visualizer"
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "-f", "--file", help="Read JSON-formatted simulation scenario from a file"
    )
    source.add_argument(
        "-s", "--stdin", action="store_true", help="Read scenario from stdin"
    )
    parser.add_argument(
        "--no-routing",
        action="store_true",
        help="Forward on random interfaces instead of computed routes",
    )
    parser.add_argument(
        "--echo", action="store_true", help="Destinations send a reply back to the source"
    )
    parser.add_argument(
        "--drop", action="store_true", help="Every node discards every packet it receives"
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=100_000,
        help="Stop after this many ticks even if packets are still moving",
    )
    parser.add_argument("--render-dir", help="Save rendered frames to this directory")
    parser.add_argument(
        "--render-every", type=positive_int, default=10, help="Save one frame out of this many"
    )
    parser.add_argument("--metrics", help="Save packet statistics to this JSON file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def read_scenario(args: argparse.Namespace) -> Optional[Scenario]:
    if args.stdin:
        return load(sys.stdin)
    if args.file:
        return load_file(args.file)
    return None


def main(argv: Optional[List[str]] = None) -> int:
    """Run the visualizer.

    Without a scenario the built-in demo topology is used and one packet is
    fired from the default source to the default destination.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    policy = ForwardingPolicy(
        computed_routing=not args.no_routing,
        echo_on_arrival=args.echo,
        drop_everything=args.drop,
    )
    simulator = NetworkSimulator(seed=args.seed)
    counter = PacketCounter(simulator)

    try:
        scenario = read_scenario(args)
        if scenario is None:
            demo_scenario().build(simulator)
            Controls(simulator, policy=policy).fire()
            events = []
        else:
            scenario.build(simulator)
            events = scenario.transmissions
    except (OSError, ScenarioError, TopologyError) as e:
        logger.error("Unable to load scenario: %s", e)
        return 2

    runner = ScenarioRunner(simulator, events, policy=policy, max_ticks=args.max_ticks)
    if args.render_dir:
        from network_viz.utils.visualization import FrameRecorder

        runner.on_frame(FrameRecorder(args.render_dir, args.render_every, policy.active_flags()))

    result = runner.run()
    logger.info(
        "Finished after %d ticks: %d delivered, %d arrived, %d dropped%s",
        result.ticks,
        counter.delivered,
        counter.arrived,
        len(counter.dropped),
        "" if result.completed else f", {result.packets_in_flight} still in flight",
    )

    if args.metrics:
        save_metrics_to_json(counter.summary(), args.metrics)

    return 0 if result.completed else 1


if __name__ == "__main__":
    sys.exit(main())
