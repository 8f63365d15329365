import math

import numpy as np
import pytest

from atomdirac.constants import FM
from atomdirac.errors import AtomErrorCode, ConfigurationError
from atomdirac.hartree import v_radial_density_log
from atomdirac.grid import log_grid_from_bounds
from atomdirac.potential import (
    BackgroundGridPotential,
    CompositePotential,
    CoulombSpherePotential,
    NuclearRadiusModel,
    UehlingSpherePotential,
    sphere_nuclear_radius,
)


def _h1s_density(r):
    # 氢原子 1s 的径向电荷密度，总电荷为 1
    return 4.0 * r * r * math.exp(-2.0 * r)


def _h1s_potential(r):
    return -1.0 / r + math.exp(-2.0 * r) * (1.0 + 1.0 / r)


@pytest.mark.potential
@pytest.mark.quick
def test_sphere_radius_models():
    assert sphere_nuclear_radius(None, NuclearRadiusModel.POINT) == -1.0
    assert sphere_nuclear_radius(16, NuclearRadiusModel.POINT) == -1.0
    assert math.isclose(sphere_nuclear_radius(27), 1.2 * FM * 3.0, rel_tol=1e-12)


@pytest.mark.potential
@pytest.mark.quick
def test_sphere_radius_requires_mass_number():
    with pytest.raises(ConfigurationError) as exc:
        sphere_nuclear_radius(None, NuclearRadiusModel.SPHERE)
    assert exc.value.code is AtomErrorCode.INVALID_PARAMETER


@pytest.mark.potential
@pytest.mark.quick
def test_coulomb_point_and_sphere():
    V = CoulombSpherePotential(2.0)
    assert V(0.5) == -4.0
    assert V(0.0) == -math.inf

    R = 1e-3
    Vs = CoulombSpherePotential(2.0, R)
    assert math.isclose(Vs(0.0), -1.5 * 2.0 / R)
    # 球面处内外两支连续
    assert math.isclose(Vs(R * (1 - 1e-12)), -2.0 / R, rel_tol=1e-9)
    assert math.isclose(Vs(2 * R), -1.0 / R)

    arr = Vs(np.array([0.0, R / 2, 2 * R]))
    assert arr.shape == (3,)
    assert np.all(np.diff(arr) > 0)


@pytest.mark.potential
@pytest.mark.quick
def test_negative_radius_raises():
    with pytest.raises(ConfigurationError) as exc:
        CoulombSpherePotential(1.0)(-1.0)
    assert exc.value.code is AtomErrorCode.NEGATIVE_RADIUS
    with pytest.raises(ConfigurationError):
        UehlingSpherePotential(1.0, 1e-4)(np.array([1e-3, -1e-3]))


@pytest.mark.potential
@pytest.mark.quick
def test_uehling_is_attractive_and_short_ranged():
    U = UehlingSpherePotential(8.0, -1.0)
    r = np.array([1e-4, 1e-3, 1e-2])
    v = U(r)
    assert np.all(v < 0)
    # 幅度随距离迅速衰减
    assert np.all(np.diff(np.abs(v * r)) < 0)
    assert U(1.0) == 0.0
    assert U(0.0) == -math.inf


@pytest.mark.potential
@pytest.mark.quick
def test_uehling_sphere_matches_point_far_outside():
    Up = UehlingSpherePotential(8.0, -1.0)
    Us = UehlingSpherePotential(8.0, 1e-5)
    for r in (1e-3, 5e-3):
        assert math.isclose(Us(r), Up(r), rel_tol=1e-3)


@pytest.mark.potential
@pytest.mark.quick
def test_uehling_sphere_continuous_at_surface_and_origin():
    R = 5e-5
    U = UehlingSpherePotential(8.0, R)
    assert math.isclose(U(R * (1 - 1e-9)), U(R * (1 + 1e-9)), rel_tol=1e-6)
    # 原点附近的极限值
    assert math.isclose(U(1e-12), U.K * U.uint0, rel_tol=1e-12)
    assert math.isclose(U(1e-8), U(1e-12), rel_tol=1e-4)
    assert np.isfinite(U(0.0))


@pytest.mark.potential
@pytest.mark.quick
def test_uehling_invalid_steps():
    with pytest.raises(ConfigurationError):
        UehlingSpherePotential(1.0, -1.0, usteps=1)


@pytest.mark.potential
@pytest.mark.quick
def test_radial_poisson_hydrogen_density():
    g = log_grid_from_bounds(1e-7, 40.0, 6001)
    rho = np.array([_h1s_density(r) for r in g.r])
    V, Q = v_radial_density_log(rho, g.r, g.dx)
    assert math.isclose(Q, 1.0, rel_tol=1e-6)
    ref = np.array([_h1s_potential(r) for r in g.r])
    mask = (g.r > 1e-3) & (g.r < 20.0)
    assert np.allclose(V[mask], ref[mask], rtol=0, atol=1e-5)


@pytest.mark.potential
def test_background_from_density():
    bkg = BackgroundGridPotential.from_density(_h1s_density, rc=1.0, dx=0.005, rho_eps=1e-12)
    assert bkg.grid.r_min < 1e-6
    assert bkg.grid.r_max > 15.0
    assert math.isclose(bkg.total_charge, 1.0, rel_tol=1e-6)

    for r in (0.3, 1.0, 2.5):
        assert math.isclose(bkg(r), _h1s_potential(r), abs_tol=1e-5)
    # 网格外：纯库仑尾部；网格内侧：趋于 V(0) = -1
    assert math.isclose(bkg(100.0), -bkg.total_charge / 100.0, rel_tol=1e-12)
    assert math.isclose(bkg(1e-12), -1.0, abs_tol=1e-4)
    assert math.isclose(bkg(0.0), bkg(1e-12), abs_tol=1e-9)


@pytest.mark.potential
@pytest.mark.quick
def test_background_interpolates_linearly_in_r():
    rho = np.array([0.0, 1.0, 2.0, 1.0, 0.0])
    bkg = BackgroundGridPotential(rho, rc=1.0, dx=0.1, i0=0, i1=4)
    r = bkg.grid.r
    Vg = bkg(r)
    # 格点上取表值
    mid = 0.5 * (r[1] + r[2])
    assert math.isclose(bkg(mid), 0.5 * (Vg[1] + Vg[2]), rel_tol=1e-12)


@pytest.mark.potential
@pytest.mark.quick
def test_background_rejects_mismatched_density():
    with pytest.raises(ConfigurationError):
        BackgroundGridPotential([1.0, 2.0], rc=1.0, dx=0.1, i0=0, i1=4)


@pytest.mark.potential
@pytest.mark.quick
def test_composite_sums_parts():
    a = CoulombSpherePotential(1.0)
    b = CoulombSpherePotential(2.0)
    V = CompositePotential(a, b)
    assert math.isclose(V(2.0), -1.5)
    assert np.allclose(V(np.array([1.0, 3.0])), [-3.0, -1.0])
    with pytest.raises(ConfigurationError):
        CompositePotential()
