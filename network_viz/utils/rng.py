from typing import Sequence, TypeVar
from uuid import UUID

T = TypeVar("T")


class CustomRNG:
    """
    A seeded pseudo-random number generator using a Linear Congruential Generator (LCG).
    The simulator owns one instance so that interface selection and generated
    packet identities are reproducible for a given seed.
    """

    # Linear Congruential Generator (LCG) parameters
    MULTIPLIER = 1664525
    INCREMENT = 1013904223
    MODULUS = 2**32

    def __init__(self, seed: int):
        """
        Initialize the PRNG with a seed value.

        Args:
            seed (int): The initial seed value for the generator.
        """
        self.state = seed % self.MODULUS

    def next_word(self) -> int:
        """
        Advance the generator and return the new 32-bit state.

        Returns:
            int: A pseudo-random integer in the range [0, 2**32).
        """
        self.state = (self.MULTIPLIER * self.state + self.INCREMENT) % self.MODULUS
        return self.state

    def random(self) -> float:
        """
        Generate a pseudo-random float between 0 and 1.

        Returns:
            float: A pseudo-random number in the range [0, 1).
        """
        return self.next_word() / self.MODULUS

    def choice(self, items: Sequence[T]) -> T:
        """
        Select a random item from a non-empty sequence.

        Args:
            items (Sequence): The items to choose from.

        Returns:
            Any: A randomly selected item.

        Raises:
            ValueError: If the input sequence is empty.
        """
        if not items:
            raise ValueError("Cannot choose from an empty list")
        index = int(self.random() * len(items))
        return items[index]

    def uuid(self) -> UUID:
        """
        Build a version 4 UUID from four generator words.

        Returns:
            UUID: A reproducible random UUID.
        """
        value = 0
        for _ in range(4):
            value = (value << 32) | self.next_word()
        return UUID(int=value, version=4)
