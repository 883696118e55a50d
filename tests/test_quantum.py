import random

from luxbin import run
from luxbin.std import QuantumSimulator
from luxbin.types import NIL, ArrayVal, format_number


def test_superpose_returns_the_same_array():
    sim = QuantumSimulator(seed=1)
    states = ArrayVal(['a', 'b'])
    assert sim.superpose(states) is states


def test_measure_picks_an_element():
    sim = QuantumSimulator(seed=3)
    states = ArrayVal(['up', 'down', 'left'])
    seen = {sim.measure(states) for _ in range(200)}
    assert seen == {'up', 'down', 'left'}


def test_measure_passes_other_values_through():
    sim = QuantumSimulator(seed=3)
    empty = ArrayVal([])
    assert sim.measure(empty) is empty
    assert sim.measure('classical') == 'classical'


def test_entangle_builds_a_new_pair():
    pair = QuantumSimulator(seed=0).entangle(1.0, 'x')
    assert pair.items == [1.0, 'x']


def test_hadamard():
    sim = QuantumSimulator(rng=random.Random(11))
    bits = {sim.hadamard(5.0) for _ in range(100)}
    assert bits == {0.0, 1.0}
    picks = {sim.hadamard('a', 'b') for _ in range(100)}
    assert picks == {'a', 'b'}
    assert {sim.hadamard('only') for _ in range(100)} == {'only', NIL}


def test_seeded_runs_are_reproducible():
    source = 'let xs = []\nfor i in photon_range(20) do photon_push(xs, measure([1, 2, 3, 4])) end\n' \
             'photon_print(xs, photon_random(), hadamard("a", "b"))'
    first = run(source, seed=1234)
    second = run(source, seed=1234)
    assert first.error is None
    assert first.output == second.output


def test_explicit_rng_is_used():
    source = 'photon_print(photon_random())'
    expected = random.Random(99).random()
    result = run(source, rng=random.Random(99))
    assert result.output == [format_number(expected)]


def test_quantum_errors():
    assert run('superpose(1)').error == 'superpose: expected array of states'
    assert run('entangle(1)').error == 'entangle: expected two values'


def test_quantum_example_in_language():
    result = run('let pair = entangle("up", "down")\nphoton_print(pair, photon_type(hadamard(1)))', seed=5)
    assert result.output == ['[up, down] int']
