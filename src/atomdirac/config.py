from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields

from .errors import AtomErrorCode, ConfigurationError

__all__ = ["SolverConfig"]


@dataclass
class SolverConfig:
    r"""本征值求解的数值容差配置。

    Attributes
    ----------
    e_tol : float
        能量收敛阈值（绝对值，Hartree）：当 Newton 修正 :math:`|\delta E| <` ``e_tol`` 时视为收敛。
    e_search : float
        搜索因子 (>1)：当收敛到错误主量子数时，按此因子几何缩放初猜的束缚能。
    max_de_ratio : float
        单步最大相对修正 :math:`|\delta E/E|`，超出则截断为 :math:`|E|\cdot` ``max_de_ratio``。
    e_damp : float
        Newton 步阻尼因子 :math:`\in (0,1]`。
    in_eps : float
        内边界截断容差 :math:`\in (0,1)`：决定近原点幂律区的起始半径。
    out_eps : float
        外边界截断容差 :math:`\in (0,1)`：波函数自转折点起衰减到该比例处截断。
    max_iterations : int
        各迭代循环（节点二分、能量细化、主量子数重试）的最大迭代次数。
    """

    e_tol: float = 1e-7
    e_search: float = 1.1
    max_de_ratio: float = 0.1
    e_damp: float = 0.5
    in_eps: float = 1e-6
    out_eps: float = 1e-5
    max_iterations: int = 100

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """检查全部参数，非法时抛出 :class:`ConfigurationError`。"""
        if not (math.isfinite(self.e_tol) and self.e_tol > 0):
            raise ConfigurationError(f"e_tol 必须为正，当前值: {self.e_tol}", AtomErrorCode.INVALID_TOLERANCE)
        if not self.e_search > 1:
            raise ConfigurationError(f"e_search 必须 > 1，当前值: {self.e_search}", AtomErrorCode.INVALID_TOLERANCE)
        if not self.max_de_ratio > 0:
            raise ConfigurationError(
                f"max_de_ratio 必须为正，当前值: {self.max_de_ratio}", AtomErrorCode.INVALID_TOLERANCE
            )
        if not (0 < self.e_damp <= 1):
            raise ConfigurationError(f"e_damp 必须位于 (0,1]，当前值: {self.e_damp}", AtomErrorCode.INVALID_TOLERANCE)
        for name in ("in_eps", "out_eps"):
            value = getattr(self, name)
            if not (0 < value < 1):
                raise ConfigurationError(f"{name} 必须位于 (0,1)，当前值: {value}", AtomErrorCode.INVALID_TOLERANCE)
        if int(self.max_iterations) != self.max_iterations or self.max_iterations < 1:
            raise ConfigurationError(
                f"max_iterations 必须为正整数，当前值: {self.max_iterations}", AtomErrorCode.INVALID_PARAMETER
            )

    @classmethod
    def from_dict(cls, params: dict) -> SolverConfig:
        """由字典构造配置；未知键视为错误，缺省键取默认值。"""
        known = {f.name for f in fields(cls)}
        unknown = set(params) - known
        if unknown:
            raise ConfigurationError(f"未知的配置项: {sorted(unknown)}")
        return cls(**params)

    def to_dict(self) -> dict:
        """导出为普通字典，便于序列化。"""
        return asdict(self)
