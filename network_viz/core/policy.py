"""Forwarding policy snapshot.

The three simulation-wide toggles are held in an immutable record that is
handed to every simulation step. Whoever handles user input owns the current
snapshot and replaces it when a toggle changes.
"""

from dataclasses import dataclass, fields, replace


@dataclass(frozen=True)
class ForwardingPolicy:
    """Policy flags read by the node forwarding logic.

    Attributes:
        computed_routing: Use the routing table; otherwise pick a random interface.
        echo_on_arrival: Destinations send a reply back to the source.
        drop_everything: Every node discards every packet it receives.
    """

    computed_routing: bool = True
    echo_on_arrival: bool = False
    drop_everything: bool = False

    def toggled(self, flag: str) -> "ForwardingPolicy":
        """Return a copy with one flag inverted.

        Args:
            flag: Name of the flag to invert.

        Raises:
            ValueError: If flag is not a policy flag.
        """
        if flag not in self.flag_names():
            raise ValueError(f"Unknown policy flag: {flag}")
        return replace(self, **{flag: not getattr(self, flag)})

    @classmethod
    def flag_names(cls):
        return [f.name for f in fields(cls)]

    def active_flags(self):
        """Names of the flags currently enabled, in declaration order."""
        return [name for name in self.flag_names() if getattr(self, name)]
