# ketsim/tests/test_state.py
import numpy as np
import pytest

from ketsim import gates as G
from ketsim.errors import DegenerateStateError, InvalidStateError
from ketsim.measurement import measure
from ketsim.state import (
    KET_MINUS,
    KET_ONE,
    KET_PLUS,
    KET_ZERO,
    AmplitudeVector,
    basis_state,
    qubit,
    tensor,
    tensor_product,
)
from ketsim.system import CompositeSystem

s = np.sqrt(0.5)


@pytest.mark.parametrize("a,b", [
    (1, 0),
    (0, 1),
    (s, s),
    (0.6, 0.8j),
    ((0.5, 0.5), (0.0, s)),
    (s * np.exp(0.3j), -s * 1j),
])
def test_valid_single_qubits_construct(a, b):
    v = qubit(a, b)
    assert v.n == 1
    assert abs(v.norm2() - 1.0) < 1e-12


@pytest.mark.parametrize("a,b", [(1, 1), (0.5, 0.5), (0, 0), (1 + 1e-6, 0), (float("nan"), 0)])
def test_unnormalized_qubits_rejected(a, b):
    with pytest.raises(InvalidStateError) as exc:
        qubit(a, b)
    assert exc.value.reason == "not-normalized"


def test_drift_within_tolerance_is_accepted():
    v = qubit(1 + 1e-10, 0)
    assert v.n == 1


@pytest.mark.parametrize("amps", [[], [1], [1, 0, 0], [0.6, 0.8, 0, 0, 0, 0]])
def test_length_must_be_power_of_two(amps):
    with pytest.raises(InvalidStateError) as exc:
        AmplitudeVector.from_amplitudes(amps)
    assert exc.value.reason == "length"


def test_explicit_n_must_match_length():
    with pytest.raises(InvalidStateError) as exc:
        AmplitudeVector(n=2, psi=np.array([1, 0], dtype=complex))
    assert exc.value.reason == "length"
    with pytest.raises(InvalidStateError):
        AmplitudeVector(n=0, psi=np.array([1], dtype=complex))


def test_length_checked_before_norm():
    with pytest.raises(InvalidStateError) as exc:
        AmplitudeVector.from_amplitudes([2, 2, 2])
    assert exc.value.reason == "length"


def test_basis_decomposition_view():
    v = AmplitudeVector.from_terms({"0": 0.6, "1": 0.8})
    assert v == qubit(0.6, 0.8)
    assert v.terms() == {"0": 0.6 + 0j, "1": 0.8 + 0j}
    assert v.amplitude("1") == 0.8 + 0j
    assert v.amplitude(0) == 0.6 + 0j

    bell = AmplitudeVector.from_terms({"00": s, "11": s})
    assert bell.terms() == {"00": complex(s), "11": complex(s)}
    assert np.allclose(bell.probabilities(), [0.5, 0, 0, 0.5])


def test_from_terms_integer_labels_need_n():
    with pytest.raises(InvalidStateError):
        AmplitudeVector.from_terms({0: 1.0})
    assert AmplitudeVector.from_terms({3: 1.0}, n=2) == basis_state("11")


def test_basis_state():
    assert np.array_equal(basis_state("10").psi, [0, 0, 1, 0])
    assert basis_state(1, n=3) == basis_state("001")
    with pytest.raises(InvalidStateError):
        basis_state("12")


def test_tensor_product_is_a_major():
    assert tensor_product(KET_ONE, KET_ZERO) == basis_state("10")
    ab = tensor_product(qubit(0.6, 0.8), KET_PLUS)
    assert ab.n == 2
    assert np.allclose(ab.psi, [0.6 * s, 0.6 * s, 0.8 * s, 0.8 * s])


def test_tensor_product_is_associative():
    a = qubit(0.6, 0.8)
    b = KET_MINUS
    c = qubit(s, 1j * s)
    left = tensor_product(tensor_product(a, b), c)
    right = tensor_product(a, tensor_product(b, c))
    assert left.n == right.n == 3
    assert left.isclose(right)
    assert tensor(a, b, c).isclose(left)


def test_tensor_product_tolerates_input_drift():
    a = qubit(1 + 4e-10, 0)
    aaaa = tensor(a, a, a, a)
    assert aaaa.n == 4
    assert aaaa.tolerance == a.tolerance


def test_renormalize_after_zeroing():
    v = qubit(s, s).copy()
    v.psi[1] = 0
    v.renormalize()
    assert np.allclose(v.psi, [1, 0])


def test_renormalize_degenerate():
    v = KET_ZERO.copy()
    v.psi[:] = 0
    with pytest.raises(DegenerateStateError):
        v.renormalize()


def test_constants_are_read_only():
    with pytest.raises(ValueError):
        KET_ZERO.psi[0] = 0
    v = KET_ZERO.copy()
    v.psi[0] = 1j
    assert KET_ZERO.psi[0] == 1


def test_equality_exact_and_isclose():
    a = qubit(s, s)
    b = qubit(s + 1e-12, s)
    assert a != b
    assert a.isclose(b)
    assert a == a.copy()
    assert a != basis_state("00")


def test_round_trip_through_amplitudes():
    v = tensor(qubit(0.6, 0.8j), KET_MINUS)
    again = AmplitudeVector.from_amplitudes(v.amplitudes())
    assert again == v
    again = AmplitudeVector.from_amplitudes(v.as_numpy())
    assert again.isclose(v)


def test_complex64_uses_looser_tolerance():
    v = AmplitudeVector.zero(2, dtype=np.complex64)
    assert v.dtype == np.complex64
    assert v.tolerance == 1e-6
    assert AmplitudeVector.zero(2).tolerance == 1e-9


def test_complex64_snapshot_round_trip():
    system = CompositeSystem.zeros(3, dtype=np.complex64)
    system.apply_gate(G.H, [0]).apply_gate(G.RY(0.7), [1]).apply_gate(G.CNOT, [0, 2])
    snap = system.snapshot()
    again = AmplitudeVector.from_amplitudes(snap.amplitudes())
    assert again.dtype == np.complex64
    assert again.tolerance == 1e-6
    assert again == snap
    wide = AmplitudeVector.from_amplitudes(snap.amplitudes(), dtype=np.complex128, tolerance=1e-6)
    assert wide.isclose(snap, tol=1e-6)


def test_in_place_operations_on_constants_raise():
    with pytest.raises(InvalidStateError) as exc:
        G.X.apply(KET_ZERO, [0])
    assert exc.value.reason == "read-only"
    with pytest.raises(InvalidStateError):
        KET_PLUS.renormalize()
    with pytest.raises(InvalidStateError):
        measure(KET_PLUS, [0], lambda: 0.5)
    assert np.array_equal(KET_ZERO.psi, [1, 0])
    assert G.X.apply(KET_ZERO.copy(), [0]) == KET_ONE
