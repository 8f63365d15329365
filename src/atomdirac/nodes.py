from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import SolverConfig
from .errors import AtomErrorCode, ConfigurationError, ConvergenceError, NodeOrderError
from .logging_config import get_logger
from .state import DiracState

logger = get_logger(__name__)

__all__ = ["NodeSearchResult", "converge_nodes"]


@dataclass
class NodeSearchResult:
    """节点二分搜索的结果：命中目标节点数的态与收缩后的能量区间。"""

    state: DiracState
    minE: float
    maxE: float
    iterations: int


def converge_nodes(
    shooter,
    k: int,
    target_nodes: int,
    minE: float,
    maxE: float,
    config: Optional[SolverConfig] = None,
) -> NodeSearchResult:
    r"""在 ``[minE, maxE]`` 内按大分量节点数做三分点搜索。

    每轮在 :math:`E_l = E_{\min} + D/3`、:math:`E_r = E_{\max} - D/3` 处积分并计数节点
    （能量未变的试探点不重复积分），依节点数相对目标的位置收缩区间：

    - 两点节点都偏多：区间整体下移；
    - 两点节点都偏少：区间整体上移；
    - 左点偏少、右点偏多：从左侧收缩；
    - 其他情形（更低能量反而节点更多）违反节点定理，抛出 :class:`NodeOrderError`。

    Parameters
    ----------
    shooter : RadialShooter
        提供 ``init_state`` 与 ``count_nodes``。
    k : int
        Dirac 量子数。
    target_nodes : int
        目标节点数。
    minE, maxE : float
        初始能量区间。
    config : SolverConfig, optional
        使用其中的 ``max_iterations``。

    Returns
    -------
    NodeSearchResult
        ``state.nodes == target_nodes`` 的态（未收敛，``init`` 为假）。

    Raises
    ------
    ConfigurationError
        初始区间为空（``maxE <= minE``）。
    ConvergenceError
        迭代预算耗尽（``MAXIT_REACHED``）。
    NodeOrderError
        节点数与能量的单调关系被破坏。
    """
    config = config if config is not None else SolverConfig()
    if not maxE > minE:
        raise ConfigurationError(f"能量区间为空: [{minE}, {maxE}]")

    def probe(E: float) -> DiracState:
        return shooter.count_nodes(shooter.init_state(E, k))

    D = maxE - minE
    El = minE + D / 3.0
    Er = maxE - D / 3.0
    state_l = probe(El)
    state_r = probe(Er)

    for it in range(1, config.max_iterations + 1):
        dl = state_l.nodes - target_nodes
        dr = state_r.nodes - target_nodes
        logger.debug("节点搜索 it=%d: El=%.10e (%+d), Er=%.10e (%+d)", it, El, dl, Er, dr)

        if dl == 0:
            return NodeSearchResult(state_l, minE, maxE, it)
        if dr == 0:
            return NodeSearchResult(state_r, minE, maxE, it)

        if dl > 0 and dr > 0:
            # 两点都偏高：左点成为新的右点
            maxE = El
            Er, state_r = El, state_l
            El = 0.5 * (minE + El)
            state_l = probe(El)
        elif dl < 0 and dr < 0:
            minE = Er
            El, state_l = Er, state_r
            Er = 0.5 * (maxE + Er)
            state_r = probe(Er)
        elif dl < 0 < dr:
            minE = El
            El = 0.5 * (El + Er)
            state_l = probe(El)
        else:
            raise NodeOrderError(
                f"E = {El:.10e} 处 {state_l.nodes} 个节点，E = {Er:.10e} 处 {state_r.nodes} 个节点，违反节点定理"
            )

    raise ConvergenceError(
        f"节点搜索在 {config.max_iterations} 次迭代内未找到 {target_nodes} 个节点的态",
        AtomErrorCode.MAXIT_REACHED,
    )
