# src/calc_core/network.py
"""
Calc-Core 核心库 - 网络模块 (Network) [Asyncio Edition]

封装 TCP / TLS 流连接的建立、发送、接收与关闭。
明文与加密两种连接在建连时选定一次，对上层暴露统一的 send / receive / close 接口。
"""

import abc
import asyncio
import logging
import socket
import ssl

from .config import Endpoint
from .exceptions import ConnectionFailed, ReadFailed, WriteFailed
from .protocols import constants, framing

logger = logging.getLogger(__name__)

Streams = tuple[asyncio.StreamReader, asyncio.StreamWriter]


def create_tls_context() -> ssl.SSLContext:
    """创建不校验证书与主机名的 TLS 上下文。

    协议没有 PKI 信任模型，仅适用于封闭测试环境。
    """
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


class BaseConnection(abc.ABC):
    """双向字节流连接的抽象基类。

    子类只负责建立底层流 (_open)，收发与关闭逻辑在此统一实现。
    """

    def __init__(
        self,
        endpoint: Endpoint,
        buffer_size: int = constants.BUFFER_SIZE,
        connect_timeout: float | None = constants.DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float | None = None,
    ) -> None:
        """初始化连接对象 (尚未建连)。

        Args:
            endpoint: 连接目标。
            buffer_size: 单次读取的最大字节数。
            connect_timeout: 建连超时 (秒)，None 表示不限。
            read_timeout: 读超时 (秒)，None 表示一直阻塞。
        """
        self.endpoint = endpoint
        self.buffer_size = buffer_size
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None
        self._closed = False

    @abc.abstractmethod
    async def _open(self) -> Streams:
        """[Abstract] 建立底层流。"""
        raise NotImplementedError

    @property
    def is_connected(self) -> bool:
        return self.writer is not None and not self._closed

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def connect(self) -> None:
        """建立连接。

        Raises:
            ConnectionFailed: 解析、建连、握手失败或超时。
        """
        try:
            self.reader, self.writer = await asyncio.wait_for(
                self._open(), timeout=self.connect_timeout
            )
        except ConnectionFailed:
            raise
        except asyncio.TimeoutError as e:
            raise ConnectionFailed(
                f"连接超时 {self.endpoint} ({self.connect_timeout}s)"
            ) from e
        except OSError as e:
            # ssl.SSLError 也是 OSError 的子类
            raise ConnectionFailed(f"连接失败 {self.endpoint}: {e}") from e

        logger.debug(f"连接已建立: {self.endpoint}")

    async def send(self, text: str) -> None:
        """发送一条文本消息 (UTF-8 原样写出)。

        Raises:
            WriteFailed: 连接不可用或写入失败。
        """
        writer = self.writer
        if writer is None or self._closed:
            raise WriteFailed("连接未建立或已关闭")

        data = framing.encode_message(text)
        try:
            writer.write(data)
            await writer.drain()
        except OSError as e:
            raise WriteFailed(f"发送消息 {text!r} 失败: {e}") from e

        logger.debug(f"-> {text!r}")

    async def receive(self) -> str:
        """读取一次 (最多 buffer_size 字节) 并解码为文本。

        Raises:
            ReadFailed: 连接不可用、读取失败、对端关闭或超时。
        """
        reader = self.reader
        if reader is None or self._closed:
            raise ReadFailed("连接未建立或已关闭")

        try:
            data = await asyncio.wait_for(
                reader.read(self.buffer_size), timeout=self.read_timeout
            )
        except asyncio.TimeoutError as e:
            raise ReadFailed(f"接收超时 ({self.read_timeout}s)") from e
        except OSError as e:
            raise ReadFailed(f"接收错误: {e}") from e

        if not data:
            raise ReadFailed("连接已被服务器关闭")

        text = framing.decode_message(data, self.buffer_size)
        logger.debug(f"<- {text!r}")
        return text

    async def close(self) -> None:
        """关闭连接。重复调用无副作用。"""
        if self._closed:
            return
        self._closed = True

        if self.writer is None:
            return
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except OSError as e:
            logger.debug(f"关闭连接时出现异常 (已忽略): {e}")
        logger.debug(f"连接已关闭: {self.endpoint}")

    async def __aenter__(self) -> "BaseConnection":
        if not self.is_connected:
            await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class PlainConnection(BaseConnection):
    """明文 TCP 连接：先解析地址，再建连。"""

    async def _open(self) -> Streams:
        loop = asyncio.get_running_loop()
        host, port = self.endpoint.host, self.endpoint.port
        try:
            infos = await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        except socket.gaierror as e:
            raise ConnectionFailed(f"地址解析失败 {host}:{port}: {e}") from e
        if not infos:
            raise ConnectionFailed(f"地址解析无结果 {host}:{port}")

        sockaddr = infos[0][4]
        return await asyncio.open_connection(sockaddr[0], sockaddr[1])


class TlsConnection(BaseConnection):
    """TLS 加密连接，不校验服务器证书。"""

    async def _open(self) -> Streams:
        return await asyncio.open_connection(
            self.endpoint.host, self.endpoint.port, ssl=create_tls_context()
        )


async def open_connection(
    endpoint: Endpoint,
    *,
    buffer_size: int = constants.BUFFER_SIZE,
    connect_timeout: float | None = constants.DEFAULT_CONNECT_TIMEOUT,
    read_timeout: float | None = None,
) -> BaseConnection:
    """根据加密标志选择连接类型并建连。

    Returns:
        BaseConnection: 已建立的连接，调用方负责关闭。

    Raises:
        ConnectionFailed: 建连失败。不做重试。
    """
    cls: type[BaseConnection] = TlsConnection if endpoint.encrypted else PlainConnection
    conn = cls(
        endpoint,
        buffer_size=buffer_size,
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
    )
    await conn.connect()
    return conn
