from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional

from .config import SolverConfig
from .errors import AtomErrorCode, ConvergenceError
from .logging_config import get_logger
from .state import DiracState

logger = get_logger(__name__)

__all__ = ["converge_energy"]


def converge_energy(shooter, state: DiracState, config: Optional[SolverConfig] = None) -> DiracState:
    r"""阻尼 Newton 迭代细化本征能量。

    每步按当前能量重建网格并积分，得到修正 :math:`\delta E`：

    - :math:`|\delta E| <` ``e_tol``：取 :math:`E - \delta E`，拼接、归一化
      （:math:`\int (P^2+Q^2)\,dr = 1`）、计数节点后返回 ``init=True`` 的新态；
    - 否则若 :math:`|\delta E/E| >` ``max_de_ratio``，先截断到 :math:`|E|\cdot` ``max_de_ratio``，
      再更新 :math:`E \leftarrow E - \text{e\_damp}\cdot\delta E`。

    Raises
    ------
    ConvergenceError
        :math:`\delta E` 非有限（``NAN_ENERGY``）或迭代预算耗尽（``MAXIT_REACHED``）。
    """
    config = config if config is not None else SolverConfig()
    E = state.E
    k = state.k

    for it in range(1, config.max_iterations + 1):
        trial = shooter.init_state(E, k)
        trial, tp, dE = shooter.integrate_with_correction(trial)

        if not math.isfinite(dE):
            raise ConvergenceError(f"能量修正非有限 (E = {E:.10e}, dE = {dE})", AtomErrorCode.NAN_ENERGY)

        if abs(dE) < config.e_tol:
            out = replace(trial.continuified(tp).normalized().with_nodes(), E=E - dE, init=True)
            logger.debug("能量细化收敛: it=%d, E=%.12e, nodes=%d", it, out.E, out.nodes)
            return out

        limit = abs(E) * config.max_de_ratio
        if abs(dE) > limit:
            dE = math.copysign(limit, dE)
        E -= config.e_damp * dE

    raise ConvergenceError(
        f"能量细化在 {config.max_iterations} 次迭代内未收敛 (E = {E:.10e})", AtomErrorCode.MAXIT_REACHED
    )
