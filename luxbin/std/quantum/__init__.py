from .simulator import QuantumSimulator
from luxbin.builtin_function import BuiltinFunction
from luxbin.environment import Environment
from luxbin.errors import LuxbinError
from luxbin.types import NIL, ArrayVal
from typing import List, Any


def populate_quantum_environment(simulator: QuantumSimulator) -> Environment:
        quantum_env = Environment()

        def std_superpose(args: List[Any]) -> Any:
            states = args[0] if args else NIL
            if not isinstance(states, ArrayVal):
                raise LuxbinError('TypeError', 'superpose: expected array of states')
            return simulator.superpose(states)

        def std_measure(args: List[Any]) -> Any:
            return simulator.measure(args[0] if args else NIL)

        def std_entangle(args: List[Any]) -> Any:
            if len(args) < 2:
                raise LuxbinError('TypeError', 'entangle: expected two values')
            return simulator.entangle(args[0], args[1])

        def std_hadamard(args: List[Any]) -> Any:
            value = args[0] if args else NIL
            other = args[1] if len(args) > 1 else NIL
            return simulator.hadamard(value, other)

        quantum_env.define('superpose', BuiltinFunction('superpose', std_superpose), is_const=True)
        quantum_env.define('measure', BuiltinFunction('measure', std_measure), is_const=True)
        quantum_env.define('entangle', BuiltinFunction('entangle', std_entangle), is_const=True)
        quantum_env.define('hadamard', BuiltinFunction('hadamard', std_hadamard), is_const=True)

        return quantum_env
