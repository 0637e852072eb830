# src/calc_core/__init__.py
"""
Calc-Core v1.0.0
算术挑战协议客户端核心库 (TCP / TLS)。
"""

# 暴露核心配置
from .config import (
    CalcConfig,
    Endpoint,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露引擎与状态
from .core import CalcCore, run_session, solve_challenges

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    CalcError,
    ConfigError,
    ConnectionFailed,
    DivisionByZero,
    EvaluationError,
    MalformedOperand,
    NetworkError,
    ProtocolError,
    ReadFailed,
    StateError,
    UnexpectedResponse,
    UnknownOperator,
    WriteFailed,
)
from .state import CalcState, CoreStatus

__version__ = "1.0.0"

__all__ = [
    "CalcCore",
    "CalcConfig",
    "CalcState",
    "CoreStatus",
    "Endpoint",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "run_session",
    "solve_challenges",
    "CalcError",
    "ConfigError",
    "StateError",
    "NetworkError",
    "ConnectionFailed",
    "WriteFailed",
    "ReadFailed",
    "ProtocolError",
    "UnexpectedResponse",
    "EvaluationError",
    "MalformedOperand",
    "UnknownOperator",
    "DivisionByZero",
]
