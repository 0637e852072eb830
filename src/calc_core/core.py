# File: src/calc_core/core.py
"""
Calc-Core 核心引擎 (Core Engine)

职责：
1. 资源组装：State + Connection + Config。
2. 会话循环：HELLO -> (接收 -> 解析 -> 求值 -> 回答)* -> BYE。
3. 生命周期：连接在每条退出路径上都被关闭，令牌通过返回值传出。
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any

from .config import CalcConfig
from .exceptions import StateError
from .network import BaseConnection, open_connection
from .protocols import evaluator, framing, parser
from .state import CalcState, CoreStatus

logger = logging.getLogger(__name__)

# 定义回调函数类型别名：支持同步或异步函数
StatusCallback = Callable[[CoreStatus, str], Any | Awaitable[Any]]

# 每轮都会出现的状态只记 DEBUG
_ROUND_STATUSES = (
    CoreStatus.AWAITING_RESPONSE,
    CoreStatus.EVALUATING,
    CoreStatus.RESPONDING,
)


class CalcCore:
    """挑战求解会话引擎 (Async)。"""

    def __init__(
        self,
        config: CalcConfig,
        status_callback: StatusCallback | None = None,
    ) -> None:
        """初始化核心引擎。

        Args:
            config: 全局配置对象。
            status_callback: 初始状态回调。也可使用 add_listener 追加。
        """
        self.config = config

        self._listeners: list[StatusCallback] = []
        self._callback_tasks: set[asyncio.Task] = set()
        if status_callback:
            self.add_listener(status_callback)

        self._state = CalcState()
        self.connection: BaseConnection | None = None

    @property
    def state(self) -> CalcState:
        """获取当前会话状态的只读副本。"""
        return replace(self._state)

    def add_listener(self, callback: StatusCallback) -> None:
        """注册状态变更监听器。"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: StatusCallback) -> None:
        """移除状态变更监听器。"""
        if callback in self._listeners:
            self._listeners.remove(callback)

    async def run(self) -> str:
        """执行一次完整会话。

        外部调用必须使用 await core.run()。

        Returns:
            str: 服务器在 BYE 消息中给出的完成令牌。

        Raises:
            StateError: 会话已在进行中。
            ConnectionFailed / WriteFailed / ReadFailed: 网络通信异常。
            UnexpectedResponse: 服务器响应无法识别。
            MalformedOperand / UnknownOperator / DivisionByZero: 挑战无法求值。
        """
        if self._state.is_active:
            raise StateError("会话正在进行中，不能重复启动")

        self._state = CalcState()
        self._update_status(CoreStatus.CONNECTING, f"正在连接 {self.config.endpoint}")

        # 取消 / 中断 (非 CalcError) 同样落到 FAILED，引擎随后可以再次启动
        try:
            self.connection = await open_connection(
                self.config.endpoint,
                buffer_size=self.config.buffer_size,
                connect_timeout=self.config.connect_timeout,
                read_timeout=self.config.read_timeout,
            )
        except BaseException as e:
            self._fail(e)
            raise

        try:
            return await self._exchange(self.connection)
        except BaseException as e:
            self._fail(e)
            raise
        finally:
            await self.connection.close()

    async def _exchange(self, conn: BaseConnection) -> str:
        """[Internal] 请求-响应循环。同一时刻最多只有一个挑战未回答。"""
        prefix = self.config.prefix
        message = framing.build_hello_message(prefix, self.config.identifier)
        self._update_status(CoreStatus.GREETING, f"发送 HELLO ({self.config.identifier})")

        while True:
            await conn.send(message)

            self._update_status(CoreStatus.AWAITING_RESPONSE, "等待服务器响应")
            text = await conn.receive()
            response = parser.parse_response(text, prefix)

            if isinstance(response, parser.Termination):
                self._state.token = response.token
                self._update_status(
                    CoreStatus.TERMINATED,
                    f"收到 BYE，共完成 {self._state.rounds} 轮挑战",
                )
                return response.token

            self._state.last_challenge = response
            self._update_status(CoreStatus.EVALUATING, f"求值 {response}")
            solution = evaluator.solve(response)

            self._state.rounds += 1
            message = framing.build_solution_message(prefix, solution)
            self._update_status(
                CoreStatus.RESPONDING, f"第 {self._state.rounds} 轮答案: {solution}"
            )

    def _fail(self, error: BaseException) -> None:
        self._state.last_error = str(error) or type(error).__name__
        self._update_status(CoreStatus.FAILED, f"会话中止: {self._state.last_error}")

    def _update_status(self, status: CoreStatus, msg: str) -> None:
        """更新内部状态并异步触发所有回调。"""
        self._state.status = status
        level = logging.DEBUG if status in _ROUND_STATUSES else logging.INFO
        logger.log(level, f"[{status.name}] {msg}")

        for callback in self._listeners:
            try:
                if inspect.iscoroutinefunction(callback):
                    # 持有 Task 引用，完成后由 _on_callback_done 回收并报告异常
                    task = asyncio.create_task(callback(status, msg))  # type: ignore
                    self._callback_tasks.add(task)
                    task.add_done_callback(self._on_callback_done)
                else:
                    loop = asyncio.get_running_loop()
                    loop.call_soon(callback, status, msg)
            except RuntimeError:
                # 应对 loop 尚未运行或已关闭的边缘情况
                pass
            except Exception as e:
                logger.error(f"回调执行异常: {e}")

    def _on_callback_done(self, task: asyncio.Task) -> None:
        self._callback_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"回调执行异常: {exc!r}")


async def solve_challenges(
    config: CalcConfig, status_callback: StatusCallback | None = None
) -> str:
    """便捷协程：创建引擎并执行一次会话，返回完成令牌。"""
    core = CalcCore(config, status_callback=status_callback)
    return await core.run()


def run_session(config: CalcConfig) -> str:
    """同步入口：在新的事件循环中执行一次会话。"""
    return asyncio.run(solve_challenges(config))
