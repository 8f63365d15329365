from __future__ import annotations

import numpy as np
from scipy.integrate import trapezoid

from .errors import AtomErrorCode, ConfigurationError

__all__ = [
    "trapz_log",
    "dirac_norm",
    "count_nodes",
    "effective_mass",
    "qnum_schro_to_dirac",
    "qnum_dirac_to_schro",
    "qnum_nodes_to_principal",
    "qnum_principal_to_nodes",
]


def trapz_log(y: np.ndarray, r: np.ndarray, dx: float) -> float:
    r"""对数等距网格上的梯形积分 :math:`\int y(r)\,dr = \int y\,r\,dx`。

    Parameters
    ----------
    y : numpy.ndarray
        被积函数离散值 :math:`y(r_i)`。
    r : numpy.ndarray
        对数网格半径 :math:`r_i`。
    dx : float
        对数步长。

    Returns
    -------
    float
        积分近似值。
    """
    if y.shape != r.shape:
        raise ValueError("y 与 r 的形状必须一致")
    return float(trapezoid(y * r, dx=dx))


def dirac_norm(P: np.ndarray, Q: np.ndarray, r: np.ndarray, dx: float) -> float:
    r"""Dirac 径向波函数的范数 :math:`\left(\int (P^2+Q^2)\,dr\right)^{1/2}`。"""
    return float(np.sqrt(trapz_log(P * P + Q * Q, r, dx)))


def count_nodes(v: np.ndarray) -> int:
    """统计序列的变号次数（节点数）。

    恰为零的点不计入，跨越零点的一次变号只计一次。
    """
    s = np.sign(np.asarray(v, dtype=float))
    s = s[s != 0]
    if s.size < 2:
        return 0
    return int(np.count_nonzero(s[1:] != s[:-1]))


def effective_mass(m: float, M: float) -> float:
    r"""约化质量 :math:`\mu = mM/(m+M)`。"""
    return m * M / (m + M)


def qnum_schro_to_dirac(l: int, s: bool) -> int:
    r"""由轨道量子数 :math:`l` 与自旋标记 :math:`s` 求 Dirac 量子数 :math:`k`。

    约定：:math:`k = l` 若 ``s and l > 0``，否则 :math:`k = -l-1`。
    即 ``s=True`` 对应 :math:`j = l - 1/2`，``s=False`` 对应 :math:`j = l + 1/2`。
    """
    if l < 0:
        raise ConfigurationError(f"l 必须非负，当前值: {l}", AtomErrorCode.INVALID_QUANTUM_NUMBERS)
    return l if (s and l > 0) else -l - 1


def qnum_dirac_to_schro(k: int) -> tuple[int, bool]:
    """:func:`qnum_schro_to_dirac` 的逆映射，返回 ``(l, s)``。"""
    if k == 0:
        raise ConfigurationError("k = 0 不是合法的 Dirac 量子数", AtomErrorCode.INVALID_QUANTUM_NUMBERS)
    if k > 0:
        return k, True
    return -k - 1, False


def qnum_nodes_to_principal(nodes: int, l: int) -> int:
    """由大分量节点数与 :math:`l` 求主量子数 :math:`n = nodes + l + 1`。"""
    return nodes + l + 1


def qnum_principal_to_nodes(n: int, l: int) -> int:
    """由主量子数求大分量应有的节点数 :math:`n - l - 1`。"""
    if n < 1 or not (0 <= l < n):
        raise ConfigurationError(f"非法量子数 n={n}, l={l}（要求 0 <= l < n）", AtomErrorCode.INVALID_QUANTUM_NUMBERS)
    return n - l - 1
