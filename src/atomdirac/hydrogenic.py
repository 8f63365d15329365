"""氢样解析能级
================

提供点核纯库仑势下 Dirac 方程的解析能级，作为本征值搜索的初猜，
也用作数值解的验证基准。
"""

from __future__ import annotations

import math

from .constants import ALPHA, C
from .errors import AtomErrorCode, ConfigurationError, SmallGamma

__all__ = ["hydrogenic_dirac_energy"]


def hydrogenic_dirac_energy(Z: float, mu: float, n: int, k: int = -1) -> float:
    r"""氢样 Dirac 能级（含静能）。

    .. math::
        E_{nk} = \frac{\mu c^2}{\sqrt{1 + \left(\dfrac{Z\alpha}{n-|k|+\gamma}\right)^2}},
        \qquad \gamma = \sqrt{k^2 - (Z\alpha)^2}.

    Parameters
    ----------
    Z : float
        核电荷。
    mu : float
        （约化）质量。
    n : int
        主量子数 :math:`n \ge 1`。
    k : int
        Dirac 量子数，:math:`k \ne 0`，且需 :math:`|k| \le n`（:math:`k>0` 时 :math:`k < n`）。

    Returns
    -------
    float
        总能量 :math:`E`，满足 :math:`0 < E < \mu c^2`。
    """
    if n < 1 or k == 0 or abs(k) > n or (k > 0 and k >= n):
        raise ConfigurationError(f"非法量子数 n={n}, k={k}", AtomErrorCode.INVALID_QUANTUM_NUMBERS)
    za = Z * ALPHA
    g2 = k * k - za * za
    if g2 < 0:
        raise SmallGamma(f"Z*alpha = {za:.4f} 超过 |k| = {abs(k)}，无束缚态")
    gamma = math.sqrt(g2)
    return mu * C * C / math.sqrt(1.0 + (za / (n - abs(k) + gamma)) ** 2)

