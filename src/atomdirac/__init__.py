"""atomdirac 包
=================

类氢原子（电子或 μ 子）径向 Dirac 方程的本征态求解器。

主要功能：

- 对数径向网格（:mod:`atomdirac.grid`）
- 点核/均匀球核库仑势、Uehling 真空极化修正、背景电荷势（:mod:`atomdirac.potential`）
- 五阶 Adams–Moulton 打靶积分与 Newton 能量修正（:mod:`atomdirac.shooting`）
- 按节点数的三分点搜索（:mod:`atomdirac.nodes`）与阻尼能量细化（:mod:`atomdirac.refine`）
- 带缓存的原子模型 :class:`~atomdirac.atom.DiracAtom`

注：本项目所有文档与注释均使用中文，Docstring 采用 Sphinx + NumPy 风格，公式使用 ``:math:`` 标记。
能量为含静能的总能量 :math:`E`，束缚能为 :math:`E - \\mu c^2`（Hartree 原子单位）。
"""

from atomdirac.atom import DiracAtom
from atomdirac.config import SolverConfig
from atomdirac.errors import (
    AtomDiracError,
    AtomErrorCode,
    BoundaryError,
    ConfigurationError,
    ConvergenceError,
    InvariantViolation,
    NodeOrderError,
    SmallGamma,
    UnboundState,
)
from atomdirac.grid import RadialGrid, log_grid, log_grid_from_bounds
from atomdirac.hydrogenic import hydrogenic_dirac_energy
from atomdirac.potential import (
    BackgroundGridPotential,
    CompositePotential,
    CoulombSpherePotential,
    NuclearRadiusModel,
    UehlingSpherePotential,
    sphere_nuclear_radius,
)
from atomdirac.shooting import RadialShooter
from atomdirac.state import DiracState, StateKey, TurningPoint

__all__ = [
    "DiracAtom",
    "SolverConfig",
    "AtomDiracError",
    "AtomErrorCode",
    "BoundaryError",
    "ConfigurationError",
    "ConvergenceError",
    "InvariantViolation",
    "NodeOrderError",
    "SmallGamma",
    "UnboundState",
    "RadialGrid",
    "log_grid",
    "log_grid_from_bounds",
    "hydrogenic_dirac_energy",
    "BackgroundGridPotential",
    "CompositePotential",
    "CoulombSpherePotential",
    "NuclearRadiusModel",
    "UehlingSpherePotential",
    "sphere_nuclear_radius",
    "RadialShooter",
    "DiracState",
    "StateKey",
    "TurningPoint",
]

__version__ = "0.1.0"
