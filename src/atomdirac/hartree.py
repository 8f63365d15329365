from __future__ import annotations

import numpy as np
from scipy.integrate import cumulative_trapezoid

__all__ = ["v_radial_density_log"]


def v_radial_density_log(rho: np.ndarray, r: np.ndarray, dx: float) -> tuple[np.ndarray, float]:
    r"""由径向电荷密度在对数网格上求解径向 Poisson 方程。

    ``rho`` 为单位半径上的电荷 :math:`\rho(r) = 4\pi r^2 n(r)`（正电荷为正）。
    被束缚粒子（电荷 :math:`-1`）在其中的势能为：

    .. math::
        V(r) = -\frac{1}{r}\int_0^r \rho(r')\,dr' - \int_r^{\infty} \frac{\rho(r')}{r'}\,dr'.

    在对数坐标下 :math:`dr = r\,dx`，两项分别化为向前累积 :math:`\int \rho r\,dx`
    与向后累积 :math:`\int \rho\,dx`（与 Slater/Hartree 的两段累积算法一致）。
    首格点以内假定电荷密度均匀，即 :math:`\rho \propto r^2`，其电荷为 :math:`\rho_0 r_0/3`。
    末格点以外假定无电荷。

    Parameters
    ----------
    rho : numpy.ndarray
        径向电荷密度 :math:`\rho(r_i)`。
    r : numpy.ndarray
        对数等距网格半径 :math:`r_i`。
    dx : float
        对数步长。

    Returns
    -------
    V : numpy.ndarray
        网格上的势能 :math:`V(r_i)`。
    Q : float
        总电荷 :math:`\int_0^\infty \rho\,dr`；满足 :math:`V(r_{\max}) = -Q/r_{\max}`。
    """
    if rho.shape != r.shape:
        raise ValueError("rho 与 r 的形状必须一致")
    if r.size < 2:
        raise ValueError("网格至少需要两个点")

    q_core = rho[0] * r[0] / 3.0

    # 向前累积：Y(r) = ∫_0^r ρ dr'
    Y = q_core + cumulative_trapezoid(rho * r, dx=dx, initial=0.0)

    # 向后累积：Zb(r) = ∫_r^∞ ρ/r' dr'
    forward = cumulative_trapezoid(rho, dx=dx, initial=0.0)
    Zb = forward[-1] - forward

    V = -(Y / r + Zb)
    return V, float(Y[-1])
