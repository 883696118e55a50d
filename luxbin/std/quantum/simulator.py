import random
from typing import Any, Optional

from luxbin.types import NIL, ArrayVal, is_number


class QuantumSimulator:
    """Simulated quantum operations backed by one random source.

    Every random choice of a run (including `photon_random`) goes
    through `rng`, so seeding it makes the whole run reproducible.
    """
    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else random.Random(seed)

    def coin(self) -> bool:
        return self.rng.random() < 0.5

    def superpose(self, states: ArrayVal) -> ArrayVal:
        # A superposition is the array of its equally likely states
        return states

    def measure(self, value: Any) -> Any:
        if isinstance(value, ArrayVal) and value.items:
            idx = int(self.rng.random() * len(value.items))
            return value.items[idx]
        return value

    def entangle(self, a: Any, b: Any) -> ArrayVal:
        return ArrayVal([a, b])

    def hadamard(self, value: Any, other: Any = NIL) -> Any:
        if is_number(value):
            return 0.0 if self.coin() else 1.0
        return value if self.coin() else other
