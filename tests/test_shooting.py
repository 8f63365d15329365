import logging
import math

import numpy as np
import pytest

from atomdirac.config import SolverConfig
from atomdirac.constants import ALPHA, C
from atomdirac.errors import AtomErrorCode, ConfigurationError, SmallGamma, UnboundState
from atomdirac.hydrogenic import hydrogenic_dirac_energy
from atomdirac.potential import CoulombSpherePotential
from atomdirac.shooting import RadialShooter, boundary_dirac_coulomb, turning_point_index


def _hydrogen_shooter(Z=1.0, config=None):
    V = CoulombSpherePotential(Z)
    return RadialShooter(Z, 1.0, -1.0, 1.0 / Z, 0.005, lambda g: V(g.r), config)


@pytest.mark.shooting
@pytest.mark.quick
def test_grid_limits_bracket_turning_point():
    sh = _hydrogen_shooter()
    E = hydrogenic_dirac_energy(1.0, 1.0, 1, -1)
    i0, i1 = sh.grid_limits(E, -1)
    r0 = sh.rc * math.exp(i0 * sh.dx)
    r1 = sh.rc * math.exp(i1 * sh.dx)
    # 转折点 r_tp ≈ 2
    assert r0 < 1e-5
    assert r1 > 13.0
    assert i1 - i0 + 1 >= 9


@pytest.mark.shooting
@pytest.mark.quick
@pytest.mark.parametrize("E", [C * C * 1.01, -C * C * 1.01, 2 * C * C])
def test_grid_limits_unbound(E):
    sh = _hydrogen_shooter()
    with pytest.raises(UnboundState) as exc:
        sh.grid_limits(E, -1)
    assert exc.value.code is AtomErrorCode.UNBOUND_STATE


@pytest.mark.shooting
@pytest.mark.quick
@pytest.mark.parametrize("k", [-1, 1])
def test_grid_limits_small_gamma(k):
    sh = _hydrogen_shooter(Z=138.0)
    with pytest.raises(SmallGamma) as exc:
        sh.grid_limits(0.5 * C * C, k)
    assert exc.value.code is AtomErrorCode.SMALL_GAMMA


@pytest.mark.shooting
@pytest.mark.quick
def test_grid_limits_invalid_tolerance():
    cfg = SolverConfig()
    cfg.out_eps = 2.0
    sh = _hydrogen_shooter(config=cfg)
    with pytest.raises(ConfigurationError):
        sh.grid_limits(C * C - 0.5, -1)


@pytest.mark.shooting
@pytest.mark.quick
def test_grid_limits_clamps_inner_radius_for_deep_energy(caplog):
    # 极深的试探能量：r_in 被截断到 r_tp/e 以内，仅记录 DEBUG
    sh = _hydrogen_shooter()
    E = -0.9 * C * C
    with caplog.at_level(logging.DEBUG, logger="atomdirac"):
        i0, i1 = sh.grid_limits(E, -3)
    r_tp = 1.0 / abs(E - C * C)
    assert sh.rc * math.exp(i0 * sh.dx) <= r_tp / math.e * (1 + 1e-12)
    clamped = [rec for rec in caplog.records if "截断" in rec.getMessage()]
    assert clamped
    assert all(rec.levelno == logging.DEBUG for rec in clamped)


@pytest.mark.shooting
@pytest.mark.quick
def test_boundary_point_nucleus_ratio():
    r = np.exp(np.linspace(-10, 3, 20))
    P = np.zeros_like(r)
    Q = np.zeros_like(r)
    E = C * C - 0.5
    boundary_dirac_coulomb(P, Q, r, E, -1, 1.0, 1.0)
    gamma = math.sqrt(1 - ALPHA**2)
    assert np.allclose(P[:4], r[:4] ** gamma)
    assert np.allclose(Q[:4] / P[:4], (gamma - 1) / ALPHA)
    assert P[-1] == 1.0
    s = math.sqrt((C * C - E) / (C * C + E))
    assert np.allclose(Q[-4:] / P[-4:], -s)
    # 中间点不被修改
    assert np.all(P[4:-4] == 0)


@pytest.mark.shooting
@pytest.mark.quick
def test_boundary_finite_nucleus_k_positive():
    r = np.exp(np.linspace(-14, 0, 20))
    P = np.zeros_like(r)
    Q = np.zeros_like(r)
    E = C * C - 10.0
    V0 = -1000.0
    boundary_dirac_coulomb(P, Q, r, E, 1, 1.0, 8.0, R=1e-3, V0=V0)
    assert np.allclose(Q[:4], r[:4])
    assert np.allclose(P[:4], r[:4] * (E - V0 + C * C) / (3 * C) * Q[:4])


@pytest.mark.shooting
@pytest.mark.quick
def test_turning_point_is_clamped():
    V = -1.0 / np.linspace(0.1, 10, 20)
    assert turning_point_index(V, C * C - 0.15, C * C) == 12
    assert turning_point_index(V, C * C - 100.0, C * C) == 4
    assert turning_point_index(V, C * C - 1e-6, C * C) == 15


@pytest.mark.shooting
@pytest.mark.quick
@pytest.mark.parametrize("n,k,nodes", [(1, -1, 0), (2, -1, 1), (2, 1, 0), (3, -2, 1)])
def test_exact_energy_gives_small_correction(n, k, nodes):
    sh = _hydrogen_shooter()
    E = hydrogenic_dirac_energy(1.0, 1.0, n, k)
    state, tp, dE = sh.integrate_with_correction(sh.init_state(E, k))
    assert abs(dE) < 1e-6
    assert state.P.shape == state.grid.r.shape
    counted = sh.count_nodes(sh.init_state(E, k))
    assert counted.nodes == nodes


@pytest.mark.shooting
@pytest.mark.quick
def test_newton_correction_points_to_eigenvalue():
    sh = _hydrogen_shooter()
    E_exact = hydrogenic_dirac_energy(1.0, 1.0, 1, -1)
    for offset in (-1e-3, 1e-3):
        E = E_exact + offset
        _, _, dE = sh.integrate_with_correction(sh.init_state(E, -1))
        # 新能量 E - dE 比原能量更接近本征值
        assert abs(E - dE - E_exact) < 0.1 * abs(offset)


@pytest.mark.shooting
@pytest.mark.quick
def test_integrate_matches_at_turning_point():
    sh = _hydrogen_shooter()
    E = hydrogenic_dirac_energy(1.0, 1.0, 2, -1)
    state, tp = sh.integrate(sh.init_state(E, -1))
    assert 4 <= tp.i <= state.grid.size - 5
    cont = state.continuified(tp)
    assert math.isclose(cont.P[tp.i], tp.P_inner, rel_tol=1e-12)
