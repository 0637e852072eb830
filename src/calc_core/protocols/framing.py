# File: src/calc_core/protocols/framing.py
"""
消息封帧 (Framer)

负责把出站负载拼装成 `<prefix> <payload>\\n` 文本行，
以及在字节与文本之间转换。本模块是无状态的，不做任何 I/O。
"""

import logging

from . import constants

logger = logging.getLogger(__name__)


def build_message(prefix: str, payload: str) -> str:
    """构建一条出站消息。

    Args:
        prefix: 协议标记。
        payload: 消息负载。

    Returns:
        str: `<prefix> <payload>\\n`
    """
    return f"{prefix} {payload}\n"


def build_hello_message(prefix: str, identifier: str) -> str:
    """构建握手消息 `<prefix> HELLO <identifier>\\n`。"""
    return build_message(prefix, f"{constants.Keyword.HELLO} {identifier}")


def build_solution_message(prefix: str, solution: int) -> str:
    """构建答案消息 `<prefix> <solution>\\n`。"""
    return build_message(prefix, str(solution))


def encode_message(text: str) -> bytes:
    """将出站文本原样编码为 UTF-8 字节。"""
    return text.encode(constants.ENCODING)


def decode_message(data: bytes, buffer_size: int = constants.BUFFER_SIZE) -> str:
    """将一次读取到的字节解码为文本。

    不裁剪尾部填充，解析器负责容忍 NUL / 空白。
    读满整个缓冲区且没有换行时，消息可能已被截断，仅记录警告。

    Args:
        data: 本次读取到的字节。
        buffer_size: 读取缓冲区大小。

    Returns:
        str: 解码后的文本，无法解码的字节以替换字符表示。
    """
    if len(data) >= buffer_size and b"\n" not in data:
        logger.warning(f"响应长度达到缓冲区上限 ({buffer_size}B)，消息可能被截断")
    return data.decode(constants.ENCODING, errors="replace")
