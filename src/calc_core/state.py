# File: src/calc_core/state.py
"""
Calc-Core 核心库 - 状态模块

负责定义和存储所有易变的会话状态。
本模块不包含业务逻辑，仅作为数据容器供 Core 读写。
"""

from dataclasses import dataclass
from enum import Enum, auto

from .protocols.parser import Challenge


class CoreStatus(Enum):
    """会话循环的生命周期状态枚举。

    状态流转示意:
    IDLE -> CONNECTING -> GREETING -> AWAITING_RESPONSE <-> EVALUATING -> RESPONDING
               |                           |                   |
               v                           v                   v
             FAILED                  TERMINATED / FAILED     FAILED
    """

    IDLE = auto()
    """初始状态，引擎已实例化但未执行任何操作。"""

    CONNECTING = auto()
    """正在建立 TCP / TLS 连接。"""

    GREETING = auto()
    """连接已建立，正在发送 HELLO。"""

    AWAITING_RESPONSE = auto()
    """已发出请求，阻塞等待服务器响应。"""

    EVALUATING = auto()
    """收到 STATUS 挑战，正在求值。"""

    RESPONDING = auto()
    """正在回送计算结果。"""

    TERMINATED = auto()
    """收到 BYE，已获得完成令牌。"""

    FAILED = auto()
    """发生了不可恢复的错误，会话中止。"""


@dataclass
class CalcState:
    """存储一次会话的易变状态数据。

    该对象是非持久化的。每次 run() 都会重新实例化。

    Attributes:
        status: 当前会话状态。
        rounds: 已回答的挑战数。
        token: BYE 消息携带的完成令牌。
        last_error: 最近一次发生的错误信息描述。
        last_challenge: 最近一次收到的挑战。
    """

    status: CoreStatus = CoreStatus.IDLE
    rounds: int = 0
    token: str = ""
    last_error: str = ""
    last_challenge: Challenge | None = None

    @property
    def is_active(self) -> bool:
        """会话是否正在进行中 (已开始且未结束)。"""
        return self.status not in (
            CoreStatus.IDLE,
            CoreStatus.TERMINATED,
            CoreStatus.FAILED,
        )

    @property
    def is_finished(self) -> bool:
        return self.status in (CoreStatus.TERMINATED, CoreStatus.FAILED)
