import math
from types import SimpleNamespace

import pytest

from atomdirac.config import SolverConfig
from atomdirac.constants import C
from atomdirac.errors import AtomErrorCode, ConvergenceError
from atomdirac.hydrogenic import hydrogenic_dirac_energy
from atomdirac.potential import CoulombSpherePotential
from atomdirac.refine import converge_energy
from atomdirac.shooting import RadialShooter


def _shooter(Z):
    V = CoulombSpherePotential(Z)
    return RadialShooter(Z, 1.0, -1.0, 1.0 / Z, 0.005, lambda g: V(g.r))


class ConstantCorrection:
    def __init__(self, dE):
        self.dE = dE

    def init_state(self, E, k):
        return SimpleNamespace(E=E, k=k)

    def integrate_with_correction(self, state):
        return state, None, self.dE


@pytest.mark.shooting
@pytest.mark.parametrize("Z,n,k", [(1.0, 2, -1), (1.0, 2, 1), (92.0, 1, -1)])
def test_refine_converges_to_hydrogenic(Z, n, k):
    sh = _shooter(Z)
    E_exact = hydrogenic_dirac_energy(Z, 1.0, n, k)
    B_exact = E_exact - C * C
    E0 = C * C + 1.002 * B_exact
    state = converge_energy(sh, sh.init_state(E0, k))
    assert state.init
    assert math.isclose(state.E - C * C, B_exact, rel_tol=1e-6)
    assert math.isclose(state.norm(), 1.0, rel_tol=1e-9)
    assert state.nodes == n - state.l - 1
    assert state.nodes_q - state.nodes == (1 if k > 0 else 0)


@pytest.mark.quick
def test_refine_nan_correction():
    with pytest.raises(ConvergenceError) as exc:
        converge_energy(ConstantCorrection(float("nan")), SimpleNamespace(E=1.0, k=-1))
    assert exc.value.code is AtomErrorCode.NAN_ENERGY


@pytest.mark.quick
def test_refine_iterations_exhausted():
    cfg = SolverConfig(max_iterations=3)
    with pytest.raises(ConvergenceError) as exc:
        converge_energy(ConstantCorrection(1.0), SimpleNamespace(E=10.0, k=-1), cfg)
    assert exc.value.code is AtomErrorCode.MAXIT_REACHED
