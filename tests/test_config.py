import logging

import pytest

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
from atomdirac.logging_config import enable_file_logging, disable_file_logging, get_logger, set_log_level


@pytest.mark.quick
def test_default_config_values():
    cfg = SolverConfig()
    assert cfg.e_tol == 1e-7
    assert cfg.e_search == 1.1
    assert cfg.max_de_ratio == 0.1
    assert cfg.e_damp == 0.5
    assert cfg.in_eps == 1e-6
    assert cfg.out_eps == 1e-5
    assert cfg.max_iterations == 100


@pytest.mark.quick
@pytest.mark.parametrize(
    "params",
    [
        {"e_tol": 0.0},
        {"e_tol": float("nan")},
        {"e_search": 1.0},
        {"max_de_ratio": -0.1},
        {"e_damp": 0.0},
        {"e_damp": 1.5},
        {"in_eps": 1.0},
        {"out_eps": 2.0},
        {"max_iterations": 0},
        {"max_iterations": 2.5},
    ],
)
def test_invalid_config_raises(params):
    with pytest.raises(ConfigurationError):
        SolverConfig(**params)


@pytest.mark.quick
def test_config_dict_round_trip():
    cfg = SolverConfig(e_tol=1e-9, max_iterations=50)
    d = cfg.to_dict()
    assert d["e_tol"] == 1e-9
    assert SolverConfig.from_dict(d) == cfg
    with pytest.raises(ConfigurationError):
        SolverConfig.from_dict({"tolerance": 1e-3})


@pytest.mark.quick
def test_error_hierarchy_and_codes():
    assert issubclass(ConfigurationError, ValueError)
    assert issubclass(ConvergenceError, RuntimeError)
    assert issubclass(UnboundState, BoundaryError)
    assert issubclass(SmallGamma, BoundaryError)
    # 节点顺序错误既是不变量违反也是收敛失败
    assert issubclass(NodeOrderError, InvariantViolation)
    assert issubclass(NodeOrderError, ConvergenceError)

    err = NodeOrderError("bad")
    assert err.code is AtomErrorCode.NODE_ORDER
    assert isinstance(err, AtomDiracError)
    assert "[node_order]" in str(err)
    assert ConvergenceError("x", AtomErrorCode.NAN_ENERGY).code is AtomErrorCode.NAN_ENERGY


@pytest.mark.quick
def test_logging_setup(tmp_path):
    logger = get_logger("atomdirac.tests")
    assert logger.name == "atomdirac.tests"
    set_log_level(logging.DEBUG)
    path = enable_file_logging(str(tmp_path / "run.log"))
    logger.debug("写入日志文件")
    disable_file_logging()
    set_log_level(logging.WARNING)
    with open(path, encoding="utf-8") as f:
        assert "写入日志文件" in f.read()
