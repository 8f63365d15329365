"""类氢原子的 Dirac 本征态求解
============================

:class:`DiracAtom` 描述一个核（电荷 :math:`Z`、质量数 :math:`A`、半径模型）加一个
束缚粒子（质量 :math:`m`，可以是电子或 μ 子）的体系，负责：

- 组合势能（库仑、可选 Uehling 修正、可选背景电荷势）并按格点缓存采样值；
- 以氢样能级为初猜，先按节点数二分定位，再用阻尼 Newton 迭代收敛本征能量；
- 以 ``(n, l, s)`` 为键缓存已收敛的态，并利用同 ``(l, s)`` 的已知态收紧能量搜索区间。

示例
----
>>> from atomdirac import DiracAtom
>>> atom = DiracAtom(Z=1)
>>> st = atom.get_state(1, 0)
>>> round(st.E - atom.rest_energy, 5)
-0.50001
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Callable, Mapping, Optional

import numpy as np

from .config import SolverConfig
from .constants import AMU, C
from .errors import AtomErrorCode, ConfigurationError, ConvergenceError, InvariantViolation
from .grid import RadialGrid
from .hydrogenic import hydrogenic_dirac_energy
from .logging_config import get_logger
from .nodes import converge_nodes
from .potential import (
    CompositePotential,
    CoulombSpherePotential,
    NuclearRadiusModel,
    UehlingSpherePotential,
    sphere_nuclear_radius,
)
from .refine import converge_energy
from .shooting import RadialShooter
from .state import DiracState, StateKey
from .utils import (
    effective_mass,
    qnum_dirac_to_schro,
    qnum_nodes_to_principal,
    qnum_principal_to_nodes,
    qnum_schro_to_dirac,
)

logger = get_logger(__name__)

__all__ = ["DiracAtom"]

# 有限核初猜低于势能底部时的抬升量（Hartree）
_FLOOR_MARGIN = 0.1


class DiracAtom:
    r"""单粒子类氢原子模型。

    Parameters
    ----------
    Z : float
        核电荷。
    m : float
        束缚粒子质量（电子质量为 1），例如 :data:`~atomdirac.constants.M_MU`。
    A : float, optional
        核质量数；给定时用约化质量 :math:`\mu = mM/(m+M)`，:math:`M = A\cdot\mathrm{amu}`。
        ``None`` 表示无限重点核。
    radius_model : NuclearRadiusModel
        核半径模型；``SPHERE`` 需要给定 ``A``。
    fc : float
        网格中心因子，:math:`r_c = f_c/(Z\mu)`。
    dx : float
        对数步长。
    uehling : bool
        是否加入 Uehling 真空极化修正。
    uehling_steps : int
        Uehling 积分的 :math:`u` 节点数。
    background : callable, optional
        额外的背景势 ``V(r)``，如 :class:`~atomdirac.potential.BackgroundGridPotential`。
    config : SolverConfig, optional
        数值容差。
    """

    def __init__(
        self,
        Z: float,
        m: float = 1.0,
        A: Optional[float] = None,
        radius_model: NuclearRadiusModel = NuclearRadiusModel.POINT,
        fc: float = 1.0,
        dx: float = 0.005,
        uehling: bool = False,
        uehling_steps: int = 100,
        background: Optional[Callable] = None,
        config: Optional[SolverConfig] = None,
    ):
        for name, value in (("Z", Z), ("m", m), ("fc", fc), ("dx", dx)):
            if not (math.isfinite(value) and value > 0):
                raise ConfigurationError(f"{name} 必须为正，当前值: {value}")
        if A is not None and not A > 0:
            raise ConfigurationError(f"质量数 A 必须为正，当前值: {A}")

        self._Z = float(Z)
        self._m = float(m)
        self._A = A
        self._mu = effective_mass(self._m, A * AMU) if A is not None else self._m
        self._rest_energy = self._mu * C * C
        self._R = sphere_nuclear_radius(A, radius_model)
        self._rc = fc / (self._Z * self._mu)
        self._dx = float(dx)
        self._config = config if config is not None else SolverConfig()

        parts = [CoulombSpherePotential(self._Z, self._R)]
        if uehling:
            parts.append(UehlingSpherePotential(self._Z, self._R, uehling_steps))
        if background is not None:
            parts.append(background)
        self._potential = CompositePotential(*parts)

        self._vcache: dict[int, float] = {}
        self._states: dict[StateKey, DiracState] = {}
        self._shooter = RadialShooter(
            self._Z, self._mu, self._R, self._rc, self._dx, self.sample_potential, self._config
        )
        logger.info(
            "DiracAtom: Z=%g, m=%g, A=%s, mu=%.6g, R=%.4e, rc=%.4e, dx=%g, uehling=%s",
            self._Z, self._m, A, self._mu, self._R, self._rc, self._dx, uehling,
        )

    # ---- 只读属性 ----
    @property
    def Z(self) -> float:
        return self._Z

    @property
    def m(self) -> float:
        return self._m

    @property
    def A(self) -> Optional[float]:
        return self._A

    @property
    def mu(self) -> float:
        return self._mu

    @property
    def rest_energy(self) -> float:
        return self._rest_energy

    @property
    def R(self) -> float:
        return self._R

    @property
    def rc(self) -> float:
        return self._rc

    @property
    def dx(self) -> float:
        return self._dx

    @property
    def potential(self) -> CompositePotential:
        return self._potential

    @property
    def config(self) -> SolverConfig:
        return self._config

    @property
    def states(self) -> Mapping[StateKey, DiracState]:
        """已计算态的只读视图。"""
        return MappingProxyType(self._states)

    # ---- 势能 ----
    def potential_at(self, r):
        """在任意半径处计算组合势能（诊断用，不经缓存）。"""
        return self._potential(r)

    def sample_potential(self, grid: RadialGrid) -> np.ndarray:
        """在网格上采样势能；对本原子格点集合上的网格按下标缓存。"""
        if grid.rc != self._rc or grid.dx != self._dx:
            return np.asarray(self._potential(grid.r), dtype=float)
        cache = self._vcache
        missing = [i for i in range(grid.i0, grid.i1 + 1) if i not in cache]
        if missing:
            idx = np.array(missing)
            values = np.asarray(self._potential(self._rc * np.exp(idx * self._dx)), dtype=float)
            cache.update(zip(missing, values.tolist()))
        return np.array([cache[i] for i in range(grid.i0, grid.i1 + 1)])

    # ---- 打靶器直通 ----
    def grid_limits(self, E: float, k: int) -> tuple[int, int]:
        return self._shooter.grid_limits(E, k)

    def init_state(self, E: float, k: int) -> DiracState:
        return self._shooter.init_state(E, k)

    # ---- 本征态 ----
    def energy_limits(self, nodes: Optional[int] = None, k: Optional[int] = None) -> tuple[float, float]:
        r"""本征能量的搜索区间 ``(minE, maxE)``。

        下限为 :math:`\max(V(0) + \mu c^2, -\mu c^2)`，上限为 :math:`\mu c^2`。
        给定 ``nodes`` 与 ``k`` 时，缓存中同 ``(l, s)`` 的已收敛态进一步收紧区间：
        主量子数更小者抬高下限，更大者压低上限。
        """
        minE = max(float(self._potential(0.0)) + self._rest_energy, -self._rest_energy)
        maxE = self._rest_energy
        if nodes is None or k is None:
            return minE, maxE

        l, s = qnum_dirac_to_schro(k)
        n = qnum_nodes_to_principal(nodes, l)
        target = StateKey.make(n, l, s)
        for key, st in self._states.items():
            if not st.init or key.l != target.l or key.s != target.s:
                continue
            if key.n < n:
                minE = max(minE, st.E)
            elif key.n > n:
                maxE = min(maxE, st.E)
        return minE, maxE

    def converge_state(self, E0: float, k: int, target_nodes: int, trust_guess: bool = True) -> DiracState:
        """从初猜 ``E0`` 出发求 ``target_nodes`` 个节点附近的本征态。

        先在初猜处计数节点：节点数不符时以初猜收紧区间后做节点二分；
        恰为目标节点数且 ``trust_guess`` 为真时直接以初猜进入能量细化，
        否则仍在整个区间内做节点二分。最后做能量细化。
        返回的态节点数可能因细化跑到相邻吸引域而与目标不同，由调用方处理。

        Parameters
        ----------
        E0 : float
            初猜能量（含静能）。
        k : int
            Dirac 量子数。
        target_nodes : int
            目标大分量节点数。
        trust_guess : bool
            初猜节点数命中时是否跳过节点二分。抬升到势能底部的初猜应传入 ``False``。
        """
        minE, maxE = self.energy_limits(target_nodes, k)
        state = None
        if minE < E0 < maxE:
            guess = self._shooter.count_nodes(self._shooter.init_state(E0, k))
            if guess.nodes > target_nodes:
                maxE = E0
            elif guess.nodes < target_nodes:
                minE = E0
            elif trust_guess:
                state = guess
        if state is None:
            result = converge_nodes(self._shooter, k, target_nodes, minE, maxE, self._config)
            logger.debug("节点搜索完成: %d 次迭代, E = %.10e", result.iterations, result.state.E)
            state = result.state

        state = converge_energy(self._shooter, state, self._config)

        expected = 1 if k > 0 else 0
        if state.nodes_q - state.nodes != expected:
            raise InvariantViolation(
                f"k = {k}: 大分量 {state.nodes} 个节点，小分量 {state.nodes_q} 个节点，"
                f"不满足 nodes_q - nodes = {expected}",
                AtomErrorCode.NODES_WRONG,
            )
        return state

    def calc_state(self, n: int, l: int, s: bool = False, force: bool = False) -> DiracState:
        """计算并缓存态 ``(n, l, s)``，返回缓存态的副本；已缓存且收敛时不重算（除非 ``force``）。"""
        key = StateKey.make(n, l, s)
        cached = self._states.get(key)
        if not force and cached is not None and cached.init:
            return cached.copy()

        k = qnum_schro_to_dirac(l, key.s)
        target_nodes = qnum_principal_to_nodes(n, l)
        E0 = hydrogenic_dirac_energy(self._Z, self._mu, n, k)
        logger.info("求解态 n=%d, l=%d, s=%s (k=%d)，初猜 E-mc^2 = %.10e", n, l, key.s, k, E0 - self._rest_energy)

        lifted = False
        if self._R > 0:
            V0 = float(self._potential(0.0))
            if E0 - self._rest_energy < V0:
                E0 = V0 + self._rest_energy + _FLOOR_MARGIN
                lifted = True
                logger.debug("初猜低于势能底部，改用 E-mc^2 = %.10e", E0 - self._rest_energy)

        for it in range(self._config.max_iterations):
            state = self.converge_state(E0, k, target_nodes, trust_guess=not lifted)
            if state.nodes == target_nodes:
                self._states[key] = state
                logger.info("态 n=%d, l=%d, s=%s 收敛: E-mc^2 = %.12e", n, l, key.s, state.E - self._rest_energy)
                return state.copy()

            found = state.key
            logger.warning(
                "求解 n=%d 时收敛到 n=%d (l=%d, s=%s)，调整初猜后重试", n, found.n, l, key.s
            )
            self._states[found] = state
            B0 = E0 - self._rest_energy
            B0 = B0 * self._config.e_search if state.nodes > target_nodes else B0 / self._config.e_search
            E0 = B0 + self._rest_energy

        raise ConvergenceError(
            f"态 n={n}, l={l}, s={key.s} 在 {self._config.max_iterations} 次尝试内未收敛",
            AtomErrorCode.MAXIT_REACHED,
        )

    def calc_all_states(self, max_n: int, force: bool = False) -> None:
        """计算 :math:`n \\le` ``max_n`` 的全部态（所有 :math:`l < n` 及两种自旋）。"""
        for n in range(1, max_n + 1):
            for l in range(n):
                for s in (False, True):
                    if l == 0 and s:
                        continue
                    self.calc_state(n, l, s, force)

    def get_state(self, n: int, l: int, s: bool = False) -> DiracState:
        """返回已收敛态 ``(n, l, s)`` 的副本，必要时先计算。"""
        return self.calc_state(n, l, s)
