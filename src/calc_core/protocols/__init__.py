# src/calc_core/protocols/__init__.py
"""
Calc-Core 协议层 (Protocol Layer)

本包负责消息的纯粹构建 (Build)、解析 (Parse) 与求值 (Evaluate)。

- 不包含任何 socket 操作或网络 I/O。
- 不包含任何状态管理 (State)。
- 不依赖于 core 或 network 层。
"""

from . import constants
from .evaluator import Operator, apply_operator, evaluate, parse_operand, solve
from .framing import (
    build_hello_message,
    build_message,
    build_solution_message,
    decode_message,
    encode_message,
)
from .parser import Challenge, Termination, parse_response, split_fields

# 公共 API
__all__ = [
    "constants",
    "Challenge",
    "Termination",
    "Operator",
    "build_message",
    "build_hello_message",
    "build_solution_message",
    "encode_message",
    "decode_message",
    "split_fields",
    "parse_response",
    "parse_operand",
    "apply_operator",
    "evaluate",
    "solve",
]
