"""Builtin libraries available to every Luxbin program."""

from typing import Callable

from luxbin.environment import Environment

from .photon import MAX_RANGE_LENGTH, populate_photon_environment
from .quantum import QuantumSimulator, populate_quantum_environment


def populate_std_environment(emit: Callable[[str], None], simulator: QuantumSimulator) -> Environment:
    """Return a frame holding every builtin, each bound as a constant."""
    std_env = Environment()
    for module_env in (
        populate_photon_environment(emit, simulator.rng),
        populate_quantum_environment(simulator),
    ):
        std_env.values.update(module_env.values)
        std_env.consts.update(module_env.consts)
    return std_env


__all__ = [
    'MAX_RANGE_LENGTH',
    'QuantumSimulator',
    'populate_photon_environment',
    'populate_quantum_environment',
    'populate_std_environment',
]
