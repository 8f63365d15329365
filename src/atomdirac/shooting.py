from __future__ import annotations

"""Dirac 径向方程打靶积分
========================

在对数网格 :math:`x = \\ln r` 上求解 Dirac 径向方程（Grant 约定，:math:`E` 含静能）：

.. math::
    \\frac{dP}{dx} = -kP + a(x)\\,Q,\\qquad a = \\frac{r\\,(E - V + \\mu c^2)}{c},

    \\frac{dQ}{dx} = -b(x)\\,P + kQ,\\qquad b = \\frac{r\\,(E - V - \\mu c^2)}{c}.

基本流程：
- 按能量与 :math:`k` 选取网格范围（:meth:`RadialShooter.grid_limits`）；
- 两端各设四个边界点，用五阶隐式 Adams–Moulton 公式从内向外、从外向内积分到经典转折点；
- 转折点处比较 :math:`Q/P` 的内外值，失配量对能量的导数由 Wronskian
  :math:`W = P\\,\\partial_E Q - Q\\,\\partial_E P` 给出（:math:`dW/dr = -(P^2+Q^2)/c`），
  从而得到 Newton 能量修正 :math:`\\delta E`。

注意：
- 积分循环使用 Python 浮点数，避免逐元素访问 numpy 数组的开销；
- 网格点数至少为 9，保证转折点两侧各有四个点。
"""

import math
from typing import Callable, Optional

import numpy as np

from .config import SolverConfig
from .constants import ALPHA, C
from .errors import AtomErrorCode, ConfigurationError, SmallGamma, UnboundState
from .grid import RadialGrid
from .logging_config import get_logger
from .state import DiracState, TurningPoint
from .utils import trapz_log

logger = get_logger(__name__)

__all__ = [
    "RadialShooter",
    "boundary_dirac_coulomb",
    "turning_point_index",
    "shoot_dirac_log",
    "wronskian_derivative",
]

# 五阶 Adams–Moulton 系数（/720）
_AM = (251.0, 646.0, -264.0, 106.0, -19.0)
_MIN_POINTS = 9


def boundary_dirac_coulomb(
    P: np.ndarray,
    Q: np.ndarray,
    r: np.ndarray,
    E: float,
    k: int,
    mu: float,
    Z: float,
    R: float = -1.0,
    V0: float = 0.0,
) -> None:
    r"""在数组两端各写入四个边界点（原地修改 ``P``, ``Q``）。

    内边界：

    - 点核（或 :math:`R \le r_0`）：:math:`P = r^\gamma`，:math:`Q = P(\gamma+k)/(Z\alpha)`；
    - 有限核、:math:`k<0`：:math:`P = r^{|k|}`，:math:`Q = -\dfrac{r(E-V_0-\mu c^2)}{c(2|k|+1)}P`；
    - 有限核、:math:`k>0`：:math:`Q = r^{k}`，:math:`P = \dfrac{r(E-V_0+\mu c^2)}{c(2k+1)}Q`。

    外边界：:math:`P = e^{-K(r-r_N)}`，:math:`Q = -\sqrt{\dfrac{\mu c^2-E}{\mu c^2+E}}\,P`，
    其中 :math:`K = \sqrt{(\mu c)^2 - (E/c)^2}`。
    """
    if P.size < _MIN_POINTS:
        raise ConfigurationError(f"网格点数至少为 {_MIN_POINTS}，当前: {P.size}")
    restE = mu * C * C
    K2 = (mu * C) ** 2 - (E / C) ** 2
    if K2 <= 0:
        raise UnboundState(f"E = {E:.10e} 不在束缚区间 (-{restE:.6e}, {restE:.6e}) 内")

    ri = r[:4]
    if R <= 0 or R <= r[0]:
        za = Z * ALPHA
        g2 = k * k - za * za
        if g2 <= 0:
            raise SmallGamma(f"k = {k}, Z*alpha = {za:.4f}：gamma^2 <= 0")
        gamma = math.sqrt(g2)
        P[:4] = ri**gamma
        Q[:4] = P[:4] * (gamma + k) / za
    elif k < 0:
        ka = abs(k)
        P[:4] = ri**ka
        Q[:4] = -ri * (E - V0 - restE) / (C * (2 * ka + 1)) * P[:4]
    else:
        Q[:4] = ri**k
        P[:4] = ri * (E - V0 + restE) / (C * (2 * k + 1)) * Q[:4]

    K = math.sqrt(K2)
    ro = r[-4:]
    P[-4:] = np.exp(-K * (ro - r[-1]))
    Q[-4:] = -math.sqrt((restE - E) / (restE + E)) * P[-4:]


def turning_point_index(V: np.ndarray, E: float, rest_energy: float) -> int:
    """最外侧的经典允许区格点（:math:`V < E - \\mu c^2`），限制在 ``[4, N-5]`` 内。"""
    allowed = np.flatnonzero(V < E - rest_energy)
    i_tp = int(allowed[-1]) if allowed.size else 0
    return min(max(i_tp, 4), V.size - 5)


def _am_sweep(P: list, Q: list, a: list, b: list, k: float, h: float) -> None:
    # P, Q 的前四项已给定，依次补齐其余各项（原地追加）
    c0 = _AM[0] * h / 720.0
    c1, c2, c3, c4 = (w * h / 720.0 for w in _AM[1:])
    fP = [-k * P[j] + a[j] * Q[j] for j in range(4)]
    fQ = [-b[j] * P[j] + k * Q[j] for j in range(4)]
    ck = c0 * k
    for n in range(3, len(a) - 1):
        rP = P[n] + c1 * fP[n] + c2 * fP[n - 1] + c3 * fP[n - 2] + c4 * fP[n - 3]
        rQ = Q[n] + c1 * fQ[n] + c2 * fQ[n - 1] + c3 * fQ[n - 2] + c4 * fQ[n - 3]
        an = a[n + 1]
        bn = b[n + 1]
        det = 1.0 - ck * ck + c0 * c0 * an * bn
        Pn = ((1.0 - ck) * rP + c0 * an * rQ) / det
        Qn = ((1.0 + ck) * rQ - c0 * bn * rP) / det
        P.append(Pn)
        Q.append(Qn)
        fP.append(-k * Pn + an * Qn)
        fQ.append(-bn * Pn + k * Qn)


def shoot_dirac_log(
    P: np.ndarray,
    Q: np.ndarray,
    r: np.ndarray,
    V: np.ndarray,
    E: float,
    k: int,
    mu: float,
    dx: float,
    i_tp: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, TurningPoint]:
    """从两端的边界点出发积分到转折点 ``i_tp``。

    Parameters
    ----------
    P, Q : numpy.ndarray
        已由 :func:`boundary_dirac_coulomb` 写入边界点的数组。
    r, V : numpy.ndarray
        网格半径与势能。
    E, k, mu : float, int, float
        能量、Dirac 量子数与质量。
    dx : float
        对数步长。
    i_tp : int
        转折点下标，须满足 ``4 <= i_tp <= N-5``。

    Returns
    -------
    P, Q : numpy.ndarray
        拼接后的解：``[:i_tp]`` 为向外解，``[i_tp:]`` 为向内解。
    inner, outer : numpy.ndarray
        形状 ``(2, m)`` 的两段原始解（向外段含 ``i_tp``，向内段自 ``i_tp`` 起）。
    tp : TurningPoint
        转折点匹配数据。
    """
    N = r.size
    if not (4 <= i_tp <= N - 5):
        raise ConfigurationError(f"转折点下标 {i_tp} 超出 [4, {N - 5}]")
    restE = mu * C * C
    a = (r * (E - V + restE) / C).tolist()
    b = (r * (E - V - restE) / C).tolist()
    kf = float(k)

    Pi = P[:4].tolist()
    Qi = Q[:4].tolist()
    _am_sweep(Pi, Qi, a[: i_tp + 1], b[: i_tp + 1], kf, dx)

    Pe = P[-1:-5:-1].tolist()
    Qe = Q[-1:-5:-1].tolist()
    _am_sweep(Pe, Qe, a[: i_tp - 1 : -1], b[: i_tp - 1 : -1], kf, -dx)
    Pe.reverse()
    Qe.reverse()

    tp = TurningPoint(i_tp, Pi[-1], Qi[-1], Pe[0], Qe[0])
    P_out = np.array(Pi[:-1] + Pe)
    Q_out = np.array(Qi[:-1] + Qe)
    return P_out, Q_out, np.array([Pi, Qi]), np.array([Pe, Qe]), tp


def wronskian_derivative(
    inner: np.ndarray,
    outer: np.ndarray,
    r: np.ndarray,
    dx: float,
    E: float,
    k: int,
    mu: float,
    R: float = -1.0,
    V0: float = 0.0,
) -> float:
    r"""转折点处失配量 :math:`Q_i/P_i - Q_e/P_e` 对能量的导数。

    .. math::
        \zeta_i = \frac{W_0 - \frac{1}{c}\int_{r_0}^{r_{tp}} (P^2+Q^2)\,dr}{P_i^2},\qquad
        \zeta_e = \frac{W_N + \frac{1}{c}\int_{r_{tp}}^{r_N} (P^2+Q^2)\,dr}{P_e^2},

    其中 :math:`W_0, W_N` 由边界条件中 :math:`Q/P` 对能量的导数给出。返回 :math:`\zeta_i - \zeta_e`。
    """
    restE = mu * C * C
    Pi, Qi = inner
    Pe, Qe = outer
    m = Pi.size
    r_in = r[:m]
    r_out = r[m - 1 :]
    r0 = r[0]

    if R <= 0 or R <= r0:
        dy0 = 0.0
    elif k < 0:
        dy0 = -r0 / (C * (2 * abs(k) + 1))
    else:
        p = r0 * (E - V0 + restE) / (C * (2 * k + 1))
        dy0 = -r0 / (C * (2 * k + 1)) / (p * p)
    W0 = Pi[0] ** 2 * dy0

    s = (restE - E) / (restE + E)
    WN = Pe[-1] ** 2 * restE / (math.sqrt(s) * (restE + E) ** 2)

    W_in = W0 - trapz_log(Pi * Pi + Qi * Qi, r_in, dx) / C
    W_out = WN + trapz_log(Pe * Pe + Qe * Qe, r_out, dx) / C
    return W_in / Pi[-1] ** 2 - W_out / Pe[0] ** 2


class RadialShooter:
    """给定原子参数下的单态打靶积分器。

    Parameters
    ----------
    Z, mu : float
        核电荷与（约化）质量。
    R : float
        核半径，:math:`R \\le 0` 为点核。
    rc, dx : float
        对数网格中心与步长；所有态网格都取自同一格点集合 :math:`r_c e^{i\\,dx}`。
    potential_sampler : callable
        ``potential_sampler(grid) -> V``，返回网格上的势能数组。
    config : SolverConfig, optional
        数值容差。
    """

    def __init__(
        self,
        Z: float,
        mu: float,
        R: float,
        rc: float,
        dx: float,
        potential_sampler: Callable[[RadialGrid], np.ndarray],
        config: Optional[SolverConfig] = None,
    ):
        self.Z = float(Z)
        self.mu = float(mu)
        self.R = float(R)
        self.rc = float(rc)
        self.dx = float(dx)
        self.sample = potential_sampler
        self.config = config if config is not None else SolverConfig()
        self.rest_energy = self.mu * C * C

    def grid_limits(self, E: float, k: int) -> tuple[int, int]:
        r"""按能量与 :math:`k` 确定网格下标范围 ``(i0, i1)``。

        .. math::
            r_{tp} = \frac{Z}{|E - \mu c^2|},\qquad
            r_{out} = r_{tp} - \frac{\ln \epsilon_{out}}{K},\qquad
            r_{in} = \frac{\epsilon_{in}^{1/\gamma}}{e}\,\frac{\gamma}{K}.

        Raises
        ------
        UnboundState
            :math:`K^2 \le 0`。
        SmallGamma
            :math:`\gamma^2 \le 0`。
        ConfigurationError
            ``in_eps`` 或 ``out_eps`` 不在 (0,1) 内。
        """
        in_eps, out_eps = self.config.in_eps, self.config.out_eps
        if not (0 < in_eps < 1 and 0 < out_eps < 1):
            raise ConfigurationError(
                f"in_eps/out_eps 必须位于 (0,1)，当前值: {in_eps}, {out_eps}", AtomErrorCode.INVALID_TOLERANCE
            )
        K2 = (self.mu * C) ** 2 - (E / C) ** 2
        if K2 <= 0:
            raise UnboundState(f"E = {E:.10e} 超出束缚区间 |E| < {self.rest_energy:.6e}")
        za = self.Z * ALPHA
        g2 = k * k - za * za
        if g2 <= 0:
            raise SmallGamma(f"k = {k}, Z*alpha = {za:.4f}：gamma^2 <= 0")
        K = math.sqrt(K2)
        gamma = math.sqrt(g2)

        r_tp = self.Z / abs(E - self.rest_energy)
        r_out = r_tp - math.log(out_eps) / K
        r_in = in_eps ** (1.0 / gamma) / math.e * gamma / K
        if r_in > r_tp:
            logger.debug("r_in = %.4e 超过转折点 r_tp = %.4e，截断为 r_tp/e", r_in, r_tp)
            r_in = r_tp / math.e

        i1 = math.ceil(math.log(r_out / self.rc) / self.dx)
        i0 = math.floor(math.log(r_in / self.rc) / self.dx)
        if i1 - i0 + 1 < _MIN_POINTS:
            i1 = i0 + _MIN_POINTS - 1
        return i0, i1

    def init_state(self, E: float, k: int) -> DiracState:
        """构造能量 ``E`` 下网格匹配、势已采样、尚未积分的态。"""
        i0, i1 = self.grid_limits(E, k)
        grid = RadialGrid(self.rc, self.dx, i0, i1)
        V = np.asarray(self.sample(grid), dtype=float)
        return DiracState(k=k, E=E, grid=grid, V=V)

    def _shoot(self, state: DiracState):
        r = state.grid.r
        P = np.zeros(r.size)
        Q = np.zeros(r.size)
        V0 = float(state.V[0])
        boundary_dirac_coulomb(P, Q, r, state.E, state.k, self.mu, self.Z, self.R, V0)
        i_tp = turning_point_index(state.V, state.E, self.rest_energy)
        return shoot_dirac_log(P, Q, r, state.V, state.E, state.k, self.mu, self.dx, i_tp)

    def integrate(self, state: DiracState) -> tuple[DiracState, TurningPoint]:
        """在态自身的网格与能量下积分，返回填好 :math:`P, Q` 的新态与转折点数据。"""
        P, Q, _, _, tp = self._shoot(state)
        out = DiracState(k=state.k, E=state.E, grid=state.grid, V=state.V, P=P, Q=Q)
        return out, tp

    def integrate_with_correction(self, state: DiracState) -> tuple[DiracState, TurningPoint, float]:
        r"""积分并返回 Newton 能量修正 :math:`\delta E = \mathrm{err}/(\partial\,\mathrm{err}/\partial E)`。

        新能量取 :math:`E - \delta E`。
        """
        P, Q, inner, outer, tp = self._shoot(state)
        out = DiracState(k=state.k, E=state.E, grid=state.grid, V=state.V, P=P, Q=Q)
        derr = wronskian_derivative(
            inner, outer, state.grid.r, self.dx, state.E, state.k, self.mu, self.R, float(state.V[0])
        )
        dE = tp.mismatch / derr
        logger.debug("E = %.12e, i_tp = %d, err = %.4e, dE = %.4e", state.E, tp.i, tp.mismatch, dE)
        return out, tp, dE

    def count_nodes(self, state: DiracState) -> DiracState:
        """积分、拼接为连续解并统计节点，返回新态。"""
        out, tp = self.integrate(state)
        return out.continuified(tp).with_nodes()
