# File: src/calc_core/exceptions.py
"""
Calc-Core 核心库 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如 CLI）能进行精细的错误处理。
所有异常都是终止性的：会话循环不会在本地重试或恢复。
"""


class CalcError(Exception):
    """Calc-Core 核心库的所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 calc-core 抛出的已知错误。
    底层原因通过异常链 (raise ... from e) 保留。
    """

    @property
    def cause(self) -> BaseException | None:
        """触发本异常的底层异常 (若有)。"""
        return self.__cause__


class ConfigError(CalcError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 host/identifier)。
    2. 字段格式错误 (如端口越界、布尔值无法解析)。
    3. 找不到配置文件或环境变量。
    """

    pass


class StateError(CalcError):
    """状态机错误 (FSM Violation)。

    触发场景: 会话仍在进行中时再次调用 run()。
    """

    pass


# =========================================================================
# I/O 层
# =========================================================================


class NetworkError(CalcError):
    """网络层面的错误 (I/O 级别)。"""

    pass


class ConnectionFailed(NetworkError):
    """地址解析、TCP 建连或 TLS 握手失败。不做重试。"""

    pass


class WriteFailed(NetworkError):
    """发送失败 (写入中断或连接已关闭)。"""

    pass


class ReadFailed(NetworkError):
    """接收失败 (读取错误、对端关闭或读超时)。"""

    pass


# =========================================================================
# 协议层
# =========================================================================


class ProtocolError(CalcError):
    """协议交互错误 (逻辑级别)。"""

    pass


class UnexpectedResponse(ProtocolError):
    """收到既不是 STATUS 也不是 BYE 的响应。

    Attributes:
        fields: 按空白拆分后的完整字段序列，用于诊断。
    """

    def __init__(self, fields: list[str] | tuple[str, ...]) -> None:
        self.fields: tuple[str, ...] = tuple(fields)
        super().__init__(f"服务器响应异常: {list(self.fields)!r}")


# =========================================================================
# 求值层
# =========================================================================


class EvaluationError(CalcError):
    """表达式求值错误。"""

    pass


class MalformedOperand(EvaluationError):
    """操作数不是合法的十进制整数。"""

    def __init__(self, operand: str) -> None:
        self.operand = operand
        super().__init__(f"操作数格式无效: {operand!r}")


class UnknownOperator(EvaluationError):
    """运算符不在 {+, -, *, /} 之内。"""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"无法识别的运算符: {symbol!r}")


class DivisionByZero(EvaluationError):
    """除法挑战的除数为 0。"""

    def __init__(self, dividend: int) -> None:
        self.dividend = dividend
        super().__init__(f"除数为 0: {dividend} / 0")
