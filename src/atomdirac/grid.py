from __future__ import annotations

import math
from dataclasses import dataclass
from functools import cached_property

import numpy as np

from .errors import ConfigurationError

__all__ = [
    "RadialGrid",
    "log_grid",
    "log_grid_from_bounds",
]


@dataclass(frozen=True)
class RadialGrid:
    r"""以中心点与整数下标描述的对数（几何）径向网格。

    网格的定义：

    .. math::
        x_i = i\,\Delta x,\qquad r_i = r_c\,e^{x_i},\qquad w_i = \Delta x\, r_i,
        \qquad i = i_0,\dots,i_1.

    其中 :math:`w_i` 为对数坐标下的积分权重（:math:`dr = r\,dx`）。同一 :math:`(r_c,\Delta x)`
    下所有网格共享同一个格点集合，不同下标区间在公共下标处给出完全相同的半径。

    Parameters
    ----------
    rc : float
        中心半径 :math:`r_c>0`（对应 :math:`i=0`）。
    dx : float
        对数步长 :math:`\Delta x>0`。
    i0, i1 : int
        闭区间下标范围，要求 :math:`i_1 \ge i_0`。
    """

    rc: float
    dx: float
    i0: int
    i1: int

    def __post_init__(self) -> None:
        if not self.rc > 0:
            raise ConfigurationError(f"网格中心 rc 必须为正，当前值: {self.rc}")
        if not self.dx > 0:
            raise ConfigurationError(f"对数步长 dx 必须为正，当前值: {self.dx}")
        if self.i1 < self.i0:
            raise ConfigurationError(f"要求 i1 >= i0，当前 i0={self.i0}, i1={self.i1}")

    @property
    def size(self) -> int:
        return self.i1 - self.i0 + 1

    def __len__(self) -> int:
        return self.size

    @cached_property
    def indices(self) -> np.ndarray:
        return np.arange(self.i0, self.i1 + 1)

    @cached_property
    def x(self) -> np.ndarray:
        """对数坐标 :math:`x_i = i\\,\\Delta x`。"""
        return self.indices * self.dx

    @cached_property
    def r(self) -> np.ndarray:
        """物理半径 :math:`r_i`，严格单调递增。"""
        return self.rc * np.exp(self.indices * self.dx)

    @cached_property
    def w(self) -> np.ndarray:
        """对数坐标积分权重 :math:`w_i = \\Delta x\\, r_i`。"""
        return self.dx * self.r

    @property
    def r_min(self) -> float:
        return float(self.r[0])

    @property
    def r_max(self) -> float:
        return float(self.r[-1])

    def index_of(self, r: float) -> float:
        """返回半径 ``r`` 对应的（实数）格点坐标 :math:`\\ln(r/r_c)/\\Delta x`。"""
        return math.log(r / self.rc) / self.dx

    def subgrid(self, i0: int, i1: int) -> RadialGrid:
        """取同一格点集合上的子区间 :math:`[i_0, i_1]`。"""
        if i0 < self.i0 or i1 > self.i1:
            raise ConfigurationError(f"子区间 [{i0}, {i1}] 超出网格范围 [{self.i0}, {self.i1}]")
        return RadialGrid(self.rc, self.dx, i0, i1)


def log_grid(rc: float, dx: float, i0: int, i1: int) -> RadialGrid:
    """由中心、步长与下标范围生成对数网格。"""
    return RadialGrid(float(rc), float(dx), int(i0), int(i1))


def log_grid_from_bounds(r0: float, r1: float, n: int, rc: float | None = None) -> RadialGrid:
    r"""由物理半径上下限与点数生成对数网格。

    步长取 :math:`\Delta x = \ln(r_1/r_0)/(N-1)`。

    Parameters
    ----------
    r0, r1 : float
        半径下限与上限，要求 :math:`0 < r_0 < r_1`。
    n : int
        网格点数 :math:`N \ge 2`。
    rc : float, optional
        网格中心；缺省时取 ``r0``（即 :math:`i_0 = 0`）。给定时端点吸附到最近的格点上。

    Returns
    -------
    RadialGrid
        满足 ``grid.size == n`` 的网格。

    Examples
    --------
    >>> g = log_grid_from_bounds(1e-5, 10.0, 1001)
    >>> g.i0, g.i1
    (0, 1000)
    """
    if n < 2:
        raise ConfigurationError(f"n 必须 >= 2，当前值: {n}")
    if not r0 > 0:
        raise ConfigurationError("对数网格要求 r0 > 0")
    if not r1 > r0:
        raise ConfigurationError("要求 r1 > r0")
    dx = math.log(r1 / r0) / (n - 1)
    if rc is None:
        return RadialGrid(float(r0), dx, 0, n - 1)
    i0 = int(round(math.log(r0 / rc) / dx))
    return RadialGrid(float(rc), dx, i0, i0 + n - 1)
