import math

import pytest

from atomdirac.constants import ALPHA, C
from atomdirac.errors import AtomErrorCode, ConfigurationError, SmallGamma
from atomdirac.hydrogenic import hydrogenic_dirac_energy
from atomdirac.utils import (
    effective_mass,
    qnum_dirac_to_schro,
    qnum_nodes_to_principal,
    qnum_principal_to_nodes,
    qnum_schro_to_dirac,
)


@pytest.mark.quick
def test_hydrogen_1s_fine_structure():
    # E - mc^2 ≈ -1/2 (1 + α²/4)
    B = hydrogenic_dirac_energy(1.0, 1.0, 1, -1) - C * C
    assert math.isclose(B, -0.5 * (1 + ALPHA**2 / 4), rel_tol=1e-8)


@pytest.mark.quick
def test_dirac_degeneracy_in_j():
    # 点核库仑势下 2s1/2 与 2p1/2 简并
    e_2s = hydrogenic_dirac_energy(10.0, 1.0, 2, -1)
    e_2p12 = hydrogenic_dirac_energy(10.0, 1.0, 2, 1)
    e_2p32 = hydrogenic_dirac_energy(10.0, 1.0, 2, -2)
    assert e_2s == e_2p12
    assert e_2p32 > e_2s


@pytest.mark.quick
def test_uranium_ground_state():
    za = 92 * ALPHA
    E = hydrogenic_dirac_energy(92.0, 1.0, 1, -1)
    assert math.isclose(E, C * C * math.sqrt(1 - za * za), rel_tol=1e-14)


@pytest.mark.quick
@pytest.mark.parametrize("n,k", [(0, -1), (1, 1), (2, 2), (2, -3), (1, 0)])
def test_invalid_quantum_numbers(n, k):
    with pytest.raises(ConfigurationError) as exc:
        hydrogenic_dirac_energy(1.0, 1.0, n, k)
    assert exc.value.code is AtomErrorCode.INVALID_QUANTUM_NUMBERS


@pytest.mark.quick
def test_small_gamma():
    with pytest.raises(SmallGamma):
        hydrogenic_dirac_energy(138.0, 1.0, 1, -1)


@pytest.mark.quick
def test_quantum_number_conversions():
    assert qnum_schro_to_dirac(0, False) == -1
    assert qnum_schro_to_dirac(0, True) == -1
    assert qnum_schro_to_dirac(1, True) == 1
    assert qnum_schro_to_dirac(2, False) == -3
    for k in (-3, -2, -1, 1, 2):
        l, s = qnum_dirac_to_schro(k)
        assert qnum_schro_to_dirac(l, s) == k
    assert qnum_nodes_to_principal(1, 0) == 2
    assert qnum_principal_to_nodes(3, 1) == 1
    with pytest.raises(ConfigurationError):
        qnum_principal_to_nodes(2, 2)


@pytest.mark.quick
def test_effective_mass():
    assert math.isclose(effective_mass(1.0, 1.0), 0.5)
    assert effective_mass(1.0, 1e12) < 1.0
