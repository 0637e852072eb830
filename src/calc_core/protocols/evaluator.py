# File: src/calc_core/protocols/evaluator.py
"""
表达式求值器 (Expression Evaluator)

从挑战中解析两个整数操作数与一个运算符，并计算整数结果。
"""

import logging
import re
from enum import Enum

from ..exceptions import DivisionByZero, MalformedOperand, UnknownOperator
from .parser import Challenge

logger = logging.getLogger(__name__)

# 可选符号 + 十进制数字，拒绝空白、下划线等 int() 能接受的写法
_OPERAND_RE = re.compile(r"[+-]?[0-9]+")


class Operator(Enum):
    """支持的运算符，值为协议中的符号。"""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    @classmethod
    def from_symbol(cls, symbol: str) -> "Operator":
        """根据协议符号查找运算符。

        Raises:
            UnknownOperator: 符号不在支持范围内。
        """
        try:
            return cls(symbol)
        except ValueError:
            raise UnknownOperator(symbol) from None


def parse_operand(text: str) -> int:
    """将操作数字符串解析为有符号整数。

    Raises:
        MalformedOperand: 非十进制整数。
    """
    if not _OPERAND_RE.fullmatch(text):
        raise MalformedOperand(text)
    return int(text)


def _truncating_div(a: int, b: int) -> int:
    # Python 的 // 向下取整，这里需要向零截断
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def apply_operator(op: Operator, a: int, b: int) -> int:
    """对两个整数应用运算符 (纯函数)。

    Raises:
        DivisionByZero: 除法且除数为 0。
    """
    if op is Operator.ADD:
        return a + b
    if op is Operator.SUBTRACT:
        return a - b
    if op is Operator.MULTIPLY:
        return a * b
    if b == 0:
        raise DivisionByZero(a)
    return _truncating_div(a, b)


def evaluate(operand1: str, operator: str, operand2: str) -> int:
    """求值 `operand1 operator operand2`。

    Args:
        operand1: 第一个操作数 (十进制字符串)。
        operator: 运算符符号。
        operand2: 第二个操作数 (十进制字符串)。

    Returns:
        int: 计算结果。

    Raises:
        MalformedOperand: 操作数非法。
        UnknownOperator: 运算符无法识别。
        DivisionByZero: 除数为 0。
    """
    a = parse_operand(operand1)
    b = parse_operand(operand2)
    op = Operator.from_symbol(operator)
    result = apply_operator(op, a, b)
    logger.debug(f"evaluate: {a} {op.value} {b} = {result}")
    return result


def solve(challenge: Challenge) -> int:
    """求解一个挑战。"""
    return evaluate(challenge.operand1, challenge.operator, challenge.operand2)
