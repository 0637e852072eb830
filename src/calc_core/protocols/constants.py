# src/calc_core/protocols/constants.py
"""
Calc-Core 协议层 - 常量定义

本模块定义了所有协议相关的固定字面量、端口与字段位置。
采用命名空间 (Class Namespace) 组织。
"""

# =========================================================================
# 1. 消息字面量 (Message Literals)
# =========================================================================

# 每条消息的协议/版本标记
MSG_PREFIX = "cs3700spring2018"


class Keyword:
    """协议关键字"""

    HELLO = "HELLO"
    STATUS = "STATUS"
    BYE = "BYE"


# =========================================================================
# 2. 传输参数
# =========================================================================

# 单次读取的缓冲区大小。超出部分会被截断，协议保证消息不会超过该长度。
BUFFER_SIZE = 256

DEFAULT_PORT = 27998
DEFAULT_TLS_PORT = 27999

DEFAULT_CONNECT_TIMEOUT = 10.0

ENCODING = "utf-8"


# =========================================================================
# 3. 字段位置
# =========================================================================


class StatusField:
    """<prefix> STATUS <op1> <operator> <op2>"""

    KEYWORD = 1
    OPERAND1 = 2
    OPERATOR = 3
    OPERAND2 = 4
    MIN_FIELDS = 5


class ByeField:
    """<prefix> <token> BYE ...

    BYE 比 STATUS 晚一个字段出现，令牌位于 BYE 之前。
    """

    TOKEN = 1
    KEYWORD = 2
    MIN_FIELDS = 3
