"""径向势模型
============

束缚粒子（电荷 :math:`-1`）所感受的球对称势能 :math:`V(r)`（Hartree 原子单位）。
所有势都是可调用对象 ``V(r)``：输入标量返回 ``float``，输入数组返回同形状数组。

- :class:`CoulombSpherePotential`：点核或均匀带电球核的库仑势
- :class:`UehlingSpherePotential`：真空极化（Uehling）修正
- :class:`BackgroundGridPotential`：由对数网格上的径向电荷密度得到的背景势（如电子屏蔽）
- :class:`CompositePotential`：以上各项之和
"""

from __future__ import annotations

import enum
import math
from typing import Callable, Optional

import numpy as np
from scipy.integrate import trapezoid

from .constants import ALPHA, C, R0_SPHERE
from .errors import AtomErrorCode, ConfigurationError
from .grid import RadialGrid
from .hartree import v_radial_density_log
from .logging_config import get_logger

logger = get_logger(__name__)

__all__ = [
    "NuclearRadiusModel",
    "sphere_nuclear_radius",
    "CoulombSpherePotential",
    "UehlingSpherePotential",
    "BackgroundGridPotential",
    "CompositePotential",
]


class NuclearRadiusModel(enum.Enum):
    """核半径模型。"""

    POINT = "point"
    SPHERE = "sphere"


def sphere_nuclear_radius(A: Optional[float], model: NuclearRadiusModel = NuclearRadiusModel.SPHERE) -> float:
    r"""核半径 :math:`R = 1.2\,\mathrm{fm}\cdot A^{1/3}`（均匀球模型）。

    点核模型时返回 ``-1``，约定 :math:`R \le 0` 表示点核；均匀球模型必须给定 ``A``。
    """
    if model is NuclearRadiusModel.POINT:
        return -1.0
    if A is None:
        raise ConfigurationError("均匀球核半径模型需要给定质量数 A")
    if not A > 0:
        raise ConfigurationError(f"质量数 A 必须为正，当前值: {A}")
    return R0_SPHERE * A ** (1.0 / 3.0)


def _as_radius(r) -> np.ndarray:
    arr = np.asarray(r, dtype=float)
    if np.any(arr < 0):
        raise ConfigurationError("半径不能为负", AtomErrorCode.NEGATIVE_RADIUS)
    return arr


def _same_shape(arr: np.ndarray, out: np.ndarray):
    return float(out) if arr.ndim == 0 else out


class CoulombSpherePotential:
    r"""均匀带电球核的库仑势。

    .. math::
        V(r) = \begin{cases}
            \dfrac{Z r^2}{2R^3} - \dfrac{3Z}{2R}, & r < R \\[4pt]
            -\dfrac{Z}{r}, & r \ge R
        \end{cases}

    :math:`R \le 0` 表示点核，此时 :math:`V(0) = -\infty`。
    """

    def __init__(self, Z: float, R: float = -1.0):
        if not Z > 0:
            raise ConfigurationError(f"核电荷 Z 必须为正，当前值: {Z}")
        self.Z = float(Z)
        self.R = float(R)

    def __call__(self, r):
        arr = _as_radius(r)
        Z, R = self.Z, self.R
        with np.errstate(divide="ignore"):
            out = -Z / arr
        if R > 0:
            inside = arr < R
            out = np.where(inside, Z * arr**2 / (2.0 * R**3) - 1.5 * Z / R, out)
        return _same_shape(arr, np.asarray(out, dtype=float))


class UehlingSpherePotential:
    r"""Uehling 真空极化势（一阶 QED 修正）。

    对 :math:`u \in (0, 1]` 的积分以 ``usteps`` 个等距节点的梯形公式计算，权函数为

    .. math::
        g(u) = \sqrt{1-u^2}\left(1 + \frac{u^2}{2}\right).

    点核：

    .. math::
        V(r) = -\frac{2\alpha Z}{3\pi r}\int_0^1 g(u)\,\frac{1}{u}\,e^{-2rc/u}\,du.

    均匀球核（:math:`\rho = 3Z/4\pi R^3`，:math:`K = -\tfrac{2}{3}\alpha^2\rho`，
    :math:`A_\pm = Ru\alpha/2 \pm u^2\alpha^2/4`）：

    .. math::
        V(r) = \frac{K}{r}\int_0^1 g(u)\,\kappa(u, r)\,du,

    .. math::
        \kappa = \begin{cases}
            A_+ e^{-2(r+R)c/u} + A_- e^{-2(r-R)c/u}, & r > R \\
            ru\alpha + A_+\left(e^{-2(R+r)c/u} - e^{-2(R-r)c/u}\right), & r \le R
        \end{cases}

    所有指数的幂均非正，不会溢出。

    Parameters
    ----------
    Z : float
        核电荷。
    R : float
        核半径，:math:`R \le 0` 为点核。
    usteps : int
        :math:`u` 方向积分节点数（>= 2）。
    """

    # 以 α/2（电子 Compton 波长的一半）为单位的截断半径
    cutoff_high = 30.0
    cutoff_low = 1e-5
    chunk_size = 2048

    def __init__(self, Z: float, R: float = -1.0, usteps: int = 100):
        if not Z > 0:
            raise ConfigurationError(f"核电荷 Z 必须为正，当前值: {Z}")
        if int(usteps) != usteps or usteps < 2:
            raise ConfigurationError(f"usteps 必须为 >= 2 的整数，当前值: {usteps}")
        self.Z = float(Z)
        self.R = float(R)
        self.usteps = int(usteps)

        self.du = 1.0 / (self.usteps - 1)
        # 去掉 u = 0 节点：该处被积函数为 0
        self._u = np.arange(1, self.usteps) * self.du
        u = self._u
        self._uker = np.sqrt(1.0 - u * u) * (1.0 + 0.5 * u * u)

        if self.R > 0:
            rho = 0.75 * self.Z / (math.pi * self.R**3)
            self.K = -2.0 * ALPHA**2 / 3.0 * rho
            B = (u * ALPHA) ** 2 / 4.0
            self._a_plus = self.R * u * ALPHA / 2.0 + B
            self._a_minus = self.R * u * ALPHA / 2.0 - B
            e2R = np.exp(-2.0 * self.R * C / u)
            self.uint0 = self._trapz(self._uker * 4.0 * C / u * (B - e2R * self._a_plus))
        else:
            self.K = -2.0 * ALPHA * self.Z / (3.0 * math.pi)
            self._a_plus = self._a_minus = None
            self.uint0 = -math.inf

    def _trapz(self, values: np.ndarray) -> float | np.ndarray:
        # 补回 u = 0 处的零值
        pad = [(0, 0)] * (values.ndim - 1) + [(1, 0)]
        return trapezoid(np.pad(values, pad), dx=self.du, axis=-1)

    def _kernel(self, r: np.ndarray) -> np.ndarray:
        u = self._u[None, :]
        rr = r[:, None]
        if self.R <= 0:
            return np.exp(-2.0 * rr * C / u) / u
        R = self.R
        ap = self._a_plus[None, :]
        am = self._a_minus[None, :]
        outside = ap * np.exp(-2.0 * (rr + R) * C / u) + am * np.exp(-2.0 * np.abs(rr - R) * C / u)
        inside = rr * u * ALPHA + ap * (np.exp(-2.0 * (R + rr) * C / u) - np.exp(-2.0 * np.abs(R - rr) * C / u))
        return np.where(rr > R, outside, inside)

    def __call__(self, r):
        arr = _as_radius(r)
        flat = arr.reshape(-1)
        out = np.zeros_like(flat)

        far = flat > self.cutoff_high * 0.5 * ALPHA
        if self.R > 0:
            near = flat < self.cutoff_low * 0.5 * self.du * ALPHA
            out[near] = self.K * self.uint0
        else:
            near = flat == 0
            out[near] = -math.inf

        todo = np.flatnonzero(~(far | near))
        for start in range(0, todo.size, self.chunk_size):
            idx = todo[start : start + self.chunk_size]
            rs = flat[idx]
            integral = self._trapz(self._uker[None, :] * self._kernel(rs))
            out[idx] = self.K / rs * integral

        return _same_shape(arr, out.reshape(arr.shape))


class BackgroundGridPotential:
    r"""由径向电荷密度定义的背景势。

    电荷密度 ``rho``（单位半径上的电荷）给定在对数网格 :math:`r_i = r_c e^{i\,dx}`,
    :math:`i = i_0,\dots,i_1` 上，势由 :func:`~atomdirac.hartree.v_radial_density_log` 求得。

    - :math:`r < r_{i_0}`：均匀带电核心的二次型
      :math:`V(r_0) + \tfrac{\rho_0}{6}\left[(r/r_0)^2 - 1\right]`，在 :math:`r_0` 处连续；
    - :math:`r > r_{i_1}`：:math:`-Q/r`；
    - 网格内：相邻格点间按 :math:`r` 线性插值。
    """

    def __init__(self, rho, rc: float, dx: float, i0: int, i1: int):
        self._grid = RadialGrid(float(rc), float(dx), int(i0), int(i1))
        rho = np.asarray(rho, dtype=float)
        if rho.shape != (self._grid.size,):
            raise ConfigurationError(f"rho 长度 {rho.size} 与网格点数 {self._grid.size} 不一致")
        self._rho = rho
        r = self._grid.r
        if r.size >= 2:
            self._V, self._Q = v_radial_density_log(rho, r, self._grid.dx)
        else:
            self._Q = float(rho[0] * r[0] / 3.0)
            self._V = np.array([-self._Q / r[0]])

    @classmethod
    def from_density(
        cls,
        density: Callable[[float], float],
        rc: float,
        dx: float,
        rho_eps: float = 1e-5,
        max_r0: Optional[float] = None,
        min_r1: Optional[float] = None,
        max_points: int = 1_000_000,
    ) -> BackgroundGridPotential:
        """从 ``rc`` 出发向两侧扩展网格，直到两端密度都低于 ``rho_eps``。

        内边界还须不大于 ``max_r0``（缺省 ``2*rc``），外边界不小于 ``min_r1``（缺省 ``rc/2``）。
        扩展超过 ``max_points`` 个格点仍未满足条件时抛出 :class:`ConfigurationError`。
        """
        if not rho_eps > 0:
            raise ConfigurationError(f"rho_eps 必须为正，当前值: {rho_eps}", AtomErrorCode.INVALID_TOLERANCE)
        if not (rc > 0 and dx > 0):
            raise ConfigurationError("要求 rc > 0 且 dx > 0")
        max_r0 = 2.0 * rc if max_r0 is None else max_r0
        min_r1 = rc / 2.0 if min_r1 is None else min_r1

        center = float(density(rc))
        inner: list[float] = []
        outer: list[float] = []

        i0 = 0
        r = rc
        front = center
        while abs(front) > rho_eps or r > max_r0:
            i0 -= 1
            r = rc * math.exp(i0 * dx)
            front = float(density(r))
            inner.append(front)
            if len(inner) > max_points:
                raise ConfigurationError("背景势网格内边界搜索未收敛，请检查 density 或 rho_eps")

        i1 = 0
        r = rc
        back = center
        while abs(back) > rho_eps or r < min_r1:
            i1 += 1
            r = rc * math.exp(i1 * dx)
            back = float(density(r))
            outer.append(back)
            if len(outer) > max_points:
                raise ConfigurationError("背景势网格外边界搜索未收敛，请检查 density 或 rho_eps")

        logger.info("背景势网格边界: i0 = %d (r = %.4e), i1 = %d (r = %.4e)",
                    i0, rc * math.exp(i0 * dx), i1, rc * math.exp(i1 * dx))
        rho = inner[::-1] + [center] + outer
        return cls(rho, rc, dx, i0, i1)

    @property
    def grid(self) -> RadialGrid:
        return self._grid

    @property
    def total_charge(self) -> float:
        """背景电荷总量 :math:`Q`（含 :math:`r_0` 以内的均匀核心）。"""
        return self._Q

    @property
    def rho(self) -> np.ndarray:
        return self._rho.copy()

    def __call__(self, r):
        arr = np.asarray(r, dtype=float)
        flat = arr.reshape(-1)
        g = self._grid
        r0 = g.r_min
        rho0 = self._rho[0]

        xi = np.full(flat.shape, -np.inf)
        pos = flat > 0
        xi[pos] = np.log(flat[pos] / g.rc) / g.dx

        out = np.empty_like(flat)
        below = xi < g.i0
        above = xi > g.i1
        out[below] = self._V[0] + rho0 / 6.0 * ((flat[below] / r0) ** 2 - 1.0)
        out[above] = -self._Q / flat[above]

        mid = ~(below | above)
        if np.any(mid):
            xm = xi[mid]
            il = np.clip(np.floor(xm).astype(int), g.i0, g.i1)
            ir = np.clip(np.ceil(xm).astype(int), g.i0, g.i1)
            Vl = self._V[il - g.i0]
            Vr = self._V[ir - g.i0]
            rl = g.r[il - g.i0]
            span = g.r[ir - g.i0] - rl
            same = ir == il
            f = np.where(same, 0.0, rl * np.expm1((xm - il) * g.dx) / np.where(same, 1.0, span))
            out[mid] = Vl + f * (Vr - Vl)

        return _same_shape(arr, out.reshape(arr.shape))


class CompositePotential:
    """若干势之和 :math:`V(r) = \\sum_j V_j(r)`。"""

    def __init__(self, *parts):
        if not parts:
            raise ConfigurationError("CompositePotential 至少需要一个分量")
        self._parts = tuple(parts)

    @property
    def parts(self) -> tuple:
        return self._parts

    def __call__(self, r):
        total = self._parts[0](r)
        for part in self._parts[1:]:
            total = total + part(r)
        return total
