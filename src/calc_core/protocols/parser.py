# File: src/calc_core/protocols/parser.py
"""
响应解析器 (Response Parser)

将服务器返回的一行文本拆分为字段，并归类为挑战 (STATUS) 或终止 (BYE)。
"""

import logging
from dataclasses import dataclass

from ..exceptions import UnexpectedResponse
from .constants import MSG_PREFIX, ByeField, Keyword, StatusField

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Challenge:
    """服务器下发的算术挑战。操作数与运算符保持原始字符串，由求值器校验。"""

    operand1: str
    operator: str
    operand2: str

    def __str__(self) -> str:
        return f"{self.operand1} {self.operator} {self.operand2}"


@dataclass(frozen=True)
class Termination:
    """服务器结束交互，携带完成令牌。"""

    token: str


def split_fields(text: str) -> list[str]:
    """按空白拆分字段，读缓冲区的 NUL 填充视为空白。"""
    return text.replace("\x00", " ").split()


def parse_response(text: str, prefix: str = MSG_PREFIX) -> Challenge | Termination:
    """解析一条服务器响应。

    字段 0 为协议标记，始终丢弃。
    - 字段 1 为 STATUS: 字段 2/3/4 依次为操作数1、运算符、操作数2。
    - 否则字段 2 为 BYE: 字段 1 为完成令牌。

    Args:
        text: 接收到的文本。
        prefix: 期望的协议标记，仅用于调试日志。

    Returns:
        Challenge | Termination: 解析结果。

    Raises:
        UnexpectedResponse: 字段不足或关键字不匹配。
    """
    fields = split_fields(text)

    if fields and fields[0] != prefix:
        logger.debug(f"响应协议标记不匹配: {fields[0]!r}")

    if len(fields) > StatusField.KEYWORD and fields[StatusField.KEYWORD] == Keyword.STATUS:
        if len(fields) < StatusField.MIN_FIELDS:
            raise UnexpectedResponse(fields)
        return Challenge(
            operand1=fields[StatusField.OPERAND1],
            operator=fields[StatusField.OPERATOR],
            operand2=fields[StatusField.OPERAND2],
        )

    if len(fields) >= ByeField.MIN_FIELDS and fields[ByeField.KEYWORD] == Keyword.BYE:
        return Termination(token=fields[ByeField.TOKEN])

    raise UnexpectedResponse(fields)
