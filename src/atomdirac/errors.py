"""统一的错误类型
================

求解器内所有失败都通过同一套带标签的异常表示：每个异常携带一个
:class:`AtomErrorCode`，调用方既可以按异常类捕获，也可以按 ``code`` 区分具体原因。

层次结构::

    AtomDiracError
    ├── ConfigurationError   (同时是 ValueError)
    ├── BoundaryError
    │   ├── UnboundState
    │   └── SmallGamma
    ├── ConvergenceError     (同时是 RuntimeError)
    └── InvariantViolation   (同时是 RuntimeError)
        └── NodeOrderError   (同时是 ConvergenceError)
"""

from __future__ import annotations

import enum

__all__ = [
    "AtomErrorCode",
    "AtomDiracError",
    "ConfigurationError",
    "BoundaryError",
    "UnboundState",
    "SmallGamma",
    "ConvergenceError",
    "InvariantViolation",
    "NodeOrderError",
]


class AtomErrorCode(enum.Enum):
    """失败原因标签。"""

    INVALID_PARAMETER = "invalid_parameter"
    INVALID_TOLERANCE = "invalid_tolerance"
    NEGATIVE_RADIUS = "negative_radius"
    INVALID_QUANTUM_NUMBERS = "invalid_quantum_numbers"
    UNBOUND_STATE = "unbound_state"
    SMALL_GAMMA = "small_gamma"
    NAN_ENERGY = "nan_energy"
    MAXIT_REACHED = "maxit_reached"
    NODES_WRONG = "nodes_wrong"
    NODE_ORDER = "node_order"


class AtomDiracError(Exception):
    """所有求解器异常的基类。

    Parameters
    ----------
    message : str
        人类可读的错误描述。
    code : AtomErrorCode, optional
        错误标签；缺省时使用子类的 ``default_code``。
    """

    default_code: AtomErrorCode = AtomErrorCode.INVALID_PARAMETER

    def __init__(self, message: str, code: AtomErrorCode | None = None):
        super().__init__(message)
        self.code = code if code is not None else self.default_code

    def __str__(self) -> str:
        return f"[{self.code.value}] {super().__str__()}"


class ConfigurationError(AtomDiracError, ValueError):
    """物理参数或网格/容差参数非法。"""

    default_code = AtomErrorCode.INVALID_PARAMETER


class BoundaryError(AtomDiracError):
    """给定的能量与量子数无法构造合法的积分网格。"""

    default_code = AtomErrorCode.UNBOUND_STATE


class UnboundState(BoundaryError):
    """:math:`K^2 = (\\mu c)^2 - (E/c)^2 < 0`，能量超出束缚区间。"""

    default_code = AtomErrorCode.UNBOUND_STATE


class SmallGamma(BoundaryError):
    """:math:`\\gamma^2 = k^2 - (Z\\alpha)^2 < 0`，高 Z 下的轻态无解。"""

    default_code = AtomErrorCode.SMALL_GAMMA


class ConvergenceError(AtomDiracError, RuntimeError):
    """迭代预算耗尽或能量修正非有限。"""

    default_code = AtomErrorCode.MAXIT_REACHED


class InvariantViolation(AtomDiracError, RuntimeError):
    """收敛后的态违反节点数关系等不变量。"""

    default_code = AtomErrorCode.NODES_WRONG


class NodeOrderError(InvariantViolation, ConvergenceError):
    """二分搜索中出现"能量更低但节点更多"，违反节点定理。"""

    default_code = AtomErrorCode.NODE_ORDER
