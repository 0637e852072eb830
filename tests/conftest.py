# tests/conftest.py
import asyncio
import ssl
import sys
from dataclasses import replace
from pathlib import Path

import pytest
import pytest_asyncio
import trustme

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from calc_core.config import CalcConfig
from calc_core.protocols.constants import MSG_PREFIX


@pytest.fixture
def valid_config():
    """
    [Fixture] 返回一个指向本机的明文 CalcConfig 对象。
    """
    return CalcConfig(
        host="127.0.0.1",
        port=27998,
        encrypted=False,
        identifier="001234567",
        prefix=MSG_PREFIX,
        buffer_size=256,
        connect_timeout=2.0,
        read_timeout=2.0,
    )


def challenge_script(challenges, token="TOKEN123", prefix=MSG_PREFIX):
    """辅助函数：把 (op1, operator, op2) 列表转换为服务器的回复序列，末尾附带 BYE。"""
    replies = [f"{prefix} STATUS {a} {op} {b}\n" for a, op, b in challenges]
    replies.append(f"{prefix} {token} BYE\n")
    return replies


class FakeChallengeServer:
    """本地假挑战服务器。

    每从客户端读到一行，就按顺序回复 replies 中的一条；
    回复耗尽后一直读到客户端关闭连接 (EOF)，并记录此后收到的多余数据。
    传入 ssl_context 时以 TLS 方式监听。
    """

    def __init__(self, replies, ssl_context: ssl.SSLContext | None = None):
        self.replies = list(replies)
        self.ssl_context = ssl_context
        self.received: list[str] = []
        self.after_script: list[bytes] = []
        self.connections = 0
        self.client_closed = 0
        self._server: asyncio.AbstractServer | None = None
        self.port = 0

    async def start(self) -> int:
        self._server = await asyncio.start_server(
            self._handle, "127.0.0.1", 0, ssl=self.ssl_context
        )
        self.port = self._server.sockets[0].getsockname()[1]
        return self.port

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()

    async def wait_client_closed(self, count: int, timeout: float = 2.0) -> None:
        """等待至少 count 个连接被客户端关闭。"""

        async def _poll():
            while self.client_closed < count:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(_poll(), timeout)

    async def _handle(self, reader, writer):
        self.connections += 1
        try:
            for reply in self.replies:
                line = await reader.readline()
                if not line:
                    break
                self.received.append(line.decode())
                writer.write(reply.encode())
                await writer.drain()

            while True:
                data = await reader.read(1024)
                if not data:
                    break
                self.after_script.append(data)
            self.client_closed += 1
        except (ConnectionError, ssl.SSLError):
            pass
        finally:
            writer.close()


@pytest.fixture(scope="session")
def server_tls_context():
    """[Fixture] 由临时 CA 签发 127.0.0.1 自签证书的服务端 TLS 上下文。"""
    ca = trustme.CA()
    cert = ca.issue_cert("127.0.0.1")
    ctx = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    cert.configure_cert(ctx)
    return ctx


@pytest_asyncio.fixture
async def challenge_server():
    """[Fixture] 工厂：启动假服务器，测试结束后统一关闭。"""
    servers = []

    async def _start(replies, ssl_context=None):
        server = FakeChallengeServer(replies, ssl_context=ssl_context)
        await server.start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        await server.stop()


@pytest.fixture
def local_config(valid_config):
    """[Fixture] 工厂：生成指向假服务器端口的配置。"""

    def _make(port: int, **overrides) -> CalcConfig:
        return replace(valid_config, port=port, **overrides)

    return _make
