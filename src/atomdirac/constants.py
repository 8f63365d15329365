"""物理常量（原子单位）
======================

集中维护求解器使用的物理常量，全部采用原子单位（Hartree 原子单位制）。

参考与核对来源：
- CODATA 2014 推荐值（与核半径模型、质量单位保持同一套数值）

注意：光速 :math:`c = 1/\\alpha`，电子质量为 1。
"""

from __future__ import annotations

# 精细结构常数与光速
ALPHA = 7.2973525664e-3
C = 137.035999139

# 粒子质量（以电子质量为单位）
M_E = 1.0
M_MU = 1.0 / 4.83633170e-3
M_P = 1.0 / 5.44617021352e-4

# 单位换算
METRE = 1.0 / 5.2917721067e-11
ANGSTROM = 1.0 / 5.2917721067e-1
FM = 1.0 / 5.2917721067e4
EV = 1.0 / 27.211385
AMU = 1822.888486192

# 均匀球核半径模型 R = R0_SPHERE * A^(1/3)
R0_SPHERE = 1.2 * FM
