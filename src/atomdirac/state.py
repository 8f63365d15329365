from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import NamedTuple, Optional

import numpy as np

from .grid import RadialGrid
from .utils import count_nodes, dirac_norm, qnum_dirac_to_schro, qnum_nodes_to_principal

__all__ = ["StateKey", "TurningPoint", "DiracState"]


class StateKey(NamedTuple):
    """态缓存键 ``(n, l, s)``；``l = 0`` 时 ``s`` 统一为 ``False``。"""

    n: int
    l: int
    s: bool

    @classmethod
    def make(cls, n: int, l: int, s: bool) -> StateKey:
        return cls(int(n), int(l), bool(s) and l > 0)


@dataclass(frozen=True)
class TurningPoint:
    r"""经典转折点处内外两段解的匹配数据。

    ``P_inner, Q_inner`` 来自向外积分，``P_outer, Q_outer`` 来自向内积分，
    ``i`` 为转折点在态网格中的数组下标。
    """

    i: int
    P_inner: float
    Q_inner: float
    P_outer: float
    Q_outer: float

    @property
    def mismatch(self) -> float:
        r""":math:`Q_i/P_i - Q_e/P_e`，本征态处为零。"""
        return self.Q_inner / self.P_inner - self.Q_outer / self.P_outer


@dataclass
class DiracState:
    r"""Dirac 径向态 :math:`(P, Q)`。

    ``V`` 为在 ``grid`` 上采样的势能，``nodes``/``nodes_q`` 为大/小分量的节点数，
    ``init`` 标记该态已收敛。所有方法都返回新对象，不修改自身。
    """

    k: int
    E: float
    grid: RadialGrid
    V: np.ndarray
    P: np.ndarray = field(default=None)
    Q: np.ndarray = field(default=None)
    nodes: int = 0
    nodes_q: int = 0
    init: bool = False

    def __post_init__(self) -> None:
        n = self.grid.size
        if self.P is None:
            self.P = np.zeros(n)
        if self.Q is None:
            self.Q = np.zeros(n)

    @property
    def l(self) -> int:
        return qnum_dirac_to_schro(self.k)[0]

    @property
    def s(self) -> bool:
        return qnum_dirac_to_schro(self.k)[1]

    @property
    def n(self) -> int:
        return qnum_nodes_to_principal(self.nodes, self.l)

    @property
    def key(self) -> StateKey:
        return StateKey.make(self.n, self.l, self.s)

    @property
    def grid_indices(self) -> tuple[int, int]:
        return self.grid.i0, self.grid.i1

    @property
    def r(self) -> np.ndarray:
        return self.grid.r

    def norm(self) -> float:
        return dirac_norm(self.P, self.Q, self.grid.r, self.grid.dx)

    def normalized(self) -> DiracState:
        N = self.norm()
        return replace(self, P=self.P / N, Q=self.Q / N)

    def continuified(self, tp: Optional[TurningPoint]) -> DiracState:
        """将转折点外侧的解乘以 ``P_inner/P_outer``，使 :math:`P` 连续。"""
        if tp is None:
            return self.copy()
        f = tp.P_inner / tp.P_outer
        P = self.P.copy()
        Q = self.Q.copy()
        P[tp.i :] *= f
        Q[tp.i :] *= f
        return replace(self, P=P, Q=Q)

    def with_nodes(self) -> DiracState:
        return replace(self, nodes=count_nodes(self.P), nodes_q=count_nodes(self.Q))

    def copy(self) -> DiracState:
        return replace(self, V=self.V.copy(), P=self.P.copy(), Q=self.Q.copy())
