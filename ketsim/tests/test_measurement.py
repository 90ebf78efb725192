# ketsim/tests/test_measurement.py
import logging
import random

import numpy as np
import pytest

from ketsim import gates as G
from ketsim.errors import DegenerateStateError, DimensionMismatchError
from ketsim.measurement import (
    MeasurementOutcome,
    choose_outcome,
    collapse,
    draw,
    marginal_probabilities,
    sample_counts,
)
from ketsim.state import KET_ONE, KET_PLUS, KET_ZERO, AmplitudeVector, basis_state, qubit
from ketsim.system import CompositeSystem

s = np.sqrt(0.5)


def bell():
    return CompositeSystem.from_vector(AmplitudeVector.from_terms({"00": s, "11": s}))


@pytest.mark.parametrize("label", ["0", "1", "101", "0110"])
@pytest.mark.parametrize("u", [0.0, 0.3, 0.5, 0.999999])
def test_basis_states_measure_deterministically(label, u):
    system = CompositeSystem.from_vector(basis_state(label))
    out = system.measure_all(lambda: u)
    assert out.bitstring == label
    assert out.probability == pytest.approx(1.0)
    assert system.snapshot() == basis_state(label)


def test_superposition_frequencies():
    rng = np.random.default_rng(1234)
    trials = 4000
    ones = 0
    for _ in range(trials):
        system = CompositeSystem([KET_ZERO])
        system.apply_gate(G.H, [0])
        out = system.measure([0], rng)
        assert out.probability == pytest.approx(0.5)
        ones += out.value
    assert abs(ones / trials - 0.5) < 0.03


def test_same_seed_same_outcomes():
    def run(seed):
        rng = np.random.default_rng(seed)
        outs = []
        for _ in range(25):
            system = CompositeSystem.zeros(2).apply_gate(G.H, [0]).apply_gate(G.H, [1])
            outs.append(system.measure_all(rng).value)
        return outs
    assert run(7) == run(7)
    assert len(set(run(7))) > 1


def test_cumulative_intervals_in_ascending_order():
    v = AmplitudeVector.from_terms({"0": 0.5, "1": np.sqrt(0.75)})
    probs = marginal_probabilities(v, [0])
    assert np.allclose(probs, [0.25, 0.75])
    assert choose_outcome(probs, 0.0, 1e-9) == 0
    assert choose_outcome(probs, 0.2499, 1e-9) == 0
    assert choose_outcome(probs, 0.25, 1e-9) == 1
    assert choose_outcome(probs, 0.9999, 1e-9) == 1


def test_zero_probability_outcomes_never_chosen():
    probs = np.array([0.0, 0.5, 1e-14, 0.5, 0.0])
    picks = {choose_outcome(probs, u, 1e-9) for u in np.linspace(0, 0.999999, 101)}
    assert picks == {1, 3}


def test_marginals_of_product_state():
    system = CompositeSystem([KET_ONE, qubit(0.6, 0.8), KET_PLUS])
    assert np.allclose(system.probabilities([1]), [0.36, 0.64])
    assert np.allclose(system.probabilities([0]), [0.0, 1.0])
    # (q2, q0): q0 is always 1
    assert np.allclose(system.probabilities([2, 0]), [0.0, 0.5, 0.0, 0.5])
    assert np.isclose(system.probabilities().sum(), 1.0)


def test_probabilities_do_not_collapse():
    system = bell()
    before = system.snapshot()
    system.probabilities([0])
    system.sample_counts(100, np.random.default_rng(0))
    assert system.snapshot() == before


def test_partial_measurement_collapses_partner():
    system = bell()
    out = system.measure([0], lambda: 0.1)
    assert out == MeasurementOutcome((0,), 0, pytest.approx(0.5))
    assert system.snapshot().isclose(basis_state("00"))
    assert system.measure([1], lambda: 0.9).value == 0

    system = bell()
    assert system.measure([1], lambda: 0.6).value == 1
    assert system.snapshot().isclose(basis_state("11"))


def test_full_measurement_leaves_one_basis_entry():
    system = CompositeSystem.zeros(3)
    for q in range(3):
        system.apply_gate(G.H, [q])
    out = system.measure_all(np.random.default_rng(3))
    amps = system.amplitudes()
    assert np.count_nonzero(amps) == 1
    assert abs(amps[out.value]) == pytest.approx(1.0)
    assert out.probability == pytest.approx(1 / 8)


def test_outcome_encoding_follows_position_order():
    system = CompositeSystem.from_vector(basis_state("01"))
    out = system.measure([1, 0], lambda: 0.5)
    assert out.positions == (1, 0)
    assert out.value == 0b10
    assert out.bitstring == "10"
    assert out.bits == (1, 0)


def test_collapse_onto_impossible_outcome_is_degenerate():
    with pytest.raises(DegenerateStateError):
        collapse(KET_ZERO.copy(), [0], 1)


def test_all_outcomes_below_tolerance_is_degenerate(caplog):
    with caplog.at_level(logging.ERROR, logger="ketsim.errors"):
        with pytest.raises(DegenerateStateError):
            choose_outcome(np.array([1e-12, 1e-12]), 0.5, 1e-9)
    assert "degenerate state" in caplog.text


def test_measure_rejects_bad_positions():
    system = CompositeSystem.zeros(2)
    for bad in ([2], [0, 0], []):
        with pytest.raises(DimensionMismatchError):
            system.measure(bad, lambda: 0.5)


def test_randomness_sources():
    assert draw(lambda: 0.25) == 0.25
    assert 0.0 <= draw(random.Random(3)) < 1.0
    assert 0.0 <= draw(np.random.default_rng(3)) < 1.0
    with pytest.raises(ValueError):
        draw(lambda: 1.0)
    with pytest.raises(ValueError):
        draw(lambda: -0.1)
    with pytest.raises(TypeError):
        draw(object())


def test_sample_counts_bell():
    system = bell()
    counts = sample_counts(system.snapshot(), [0, 1], 2000, np.random.default_rng(42))
    assert set(counts) <= {"00", "11"}
    assert sum(counts.values()) == 2000
    assert abs(counts["00"] / 2000 - 0.5) < 0.05
    assert sample_counts(system.snapshot(), [0], 0, lambda: 0.5) == {}
