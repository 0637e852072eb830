"""
Calc-Core 核心库 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .exceptions import ConfigError
from .protocols import constants

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("true", "1", "t", "yes", "y", "on")
_FALSE_VALUES = ("false", "0", "f", "no", "n", "off", "")


@dataclass(frozen=True)
class Endpoint:
    """连接目标。会话开始后不可变。"""

    host: str
    port: int
    encrypted: bool

    def __str__(self) -> str:
        scheme = "tls" if self.encrypted else "tcp"
        return f"{scheme}://{self.host}:{self.port}"


@dataclass(frozen=True)
class CalcConfig:
    """CalcCore 的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        host: 服务器主机名或 IP。
        port: 服务器端口 (明文 27998 / TLS 27999)。
        encrypted: 是否启用 TLS。
        identifier: HELLO 消息中携带的身份标识。
        prefix: 协议标记。
        buffer_size: 单次读取的缓冲区大小。
        connect_timeout: 建连超时 (秒)，None 表示不限。
        read_timeout: 读超时 (秒)，None 表示一直阻塞。
    """

    host: str
    port: int
    encrypted: bool
    identifier: str
    prefix: str = constants.MSG_PREFIX
    buffer_size: int = constants.BUFFER_SIZE
    connect_timeout: float | None = constants.DEFAULT_CONNECT_TIMEOUT
    read_timeout: float | None = None

    @property
    def endpoint(self) -> Endpoint:
        return Endpoint(host=self.host, port=self.port, encrypted=self.encrypted)

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} "
            f"endpoint={self.endpoint}, "
            f"identifier='{self.identifier}', "
            f"prefix='{self.prefix}'>"
        )


def resolve_port(port: int | None, encrypted: bool) -> int:
    """根据加密标志确定端口。

    未指定端口时使用对应模式的默认端口；
    TLS 模式下若端口恰为明文默认端口，视为用户未显式指定，改用 TLS 默认端口。
    """
    if port is None:
        return constants.DEFAULT_TLS_PORT if encrypted else constants.DEFAULT_PORT
    if encrypted and port == constants.DEFAULT_PORT:
        return constants.DEFAULT_TLS_PORT
    return port


def create_config_from_dict(raw_data: dict[str, Any]) -> CalcConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。

    Args:
        raw_data: 原始配置字典 (来自 TOML、Env 或命令行)。

    Returns:
        CalcConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """
    try:
        # --- 内部辅助函数 ---
        def _req(key: str) -> Any:
            """获取必要字段，缺失或为空则报错"""
            val = raw_data.get(key)
            if val is None or str(val).strip() == "":
                raise ConfigError(f"配置缺失: 缺少必要字段 '{key}'")
            return val

        def _to_bool(key: str, default: bool) -> bool:
            val = raw_data.get(key)
            if val is None:
                return default
            if isinstance(val, bool):
                return val
            text = str(val).strip().lower()
            if text in _TRUE_VALUES:
                return True
            if text in _FALSE_VALUES:
                return False
            raise ConfigError(f"布尔值无效 '{key}': {val}")

        def _to_port(key: str) -> int | None:
            val = raw_data.get(key)
            if val is None or str(val).strip() == "":
                return None
            try:
                port = int(val)
            except (TypeError, ValueError):
                raise ConfigError(f"端口格式无效 '{key}': {val}")
            if not 0 < port < 65536:
                raise ConfigError(f"端口超出范围 '{key}': {port}")
            return port

        def _to_timeout(key: str, default: float | None) -> float | None:
            if key not in raw_data:
                return default
            val = raw_data[key]
            if val is None or str(val).strip().lower() in ("", "none"):
                return None
            try:
                timeout = float(val)
            except (TypeError, ValueError):
                raise ConfigError(f"超时格式无效 '{key}': {val}")
            if timeout <= 0:
                raise ConfigError(f"超时必须为正数 '{key}': {val}")
            return timeout

        # 'ssl' 作为 'encrypted' 的别名
        if "encrypted" not in raw_data and "ssl" in raw_data:
            raw_data = {**raw_data, "encrypted": raw_data["ssl"]}

        encrypted = _to_bool("encrypted", False)

        buffer_size = int(raw_data.get("buffer_size", constants.BUFFER_SIZE))
        if buffer_size <= 0:
            raise ConfigError(f"缓冲区大小必须为正数: {buffer_size}")

        identifier = str(_req("identifier"))

        prefix = str(raw_data.get("prefix", constants.MSG_PREFIX))
        if not prefix or any(ch.isspace() for ch in prefix):
            raise ConfigError(f"协议标记无效: {prefix!r}")

        # --- 构建对象 ---
        return CalcConfig(
            host=str(_req("host")).strip(),
            port=resolve_port(_to_port("port"), encrypted),
            encrypted=encrypted,
            identifier=identifier,
            prefix=prefix,
            buffer_size=buffer_size,
            connect_timeout=_to_timeout(
                "connect_timeout", constants.DEFAULT_CONNECT_TIMEOUT
            ),
            read_timeout=_to_timeout("read_timeout", None),
        )

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"配置生成失败: {e}") from e


def read_toml_config(file_path: Path, profile: str = "default") -> dict[str, Any]:
    """从 TOML 文件读取原始配置字典。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [client]: 单一客户端配置块。
    3. Root: 根目录直接配置。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        return dict(data["profile"][profile])

    if "client" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [client] 节，忽略 profile='{profile}'。")
        return dict(data["client"])

    return dict(data)


def load_config_from_toml(file_path: Path, profile: str = "default") -> CalcConfig:
    """从 TOML 文件加载配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Returns:
        CalcConfig: 配置对象。

    Raises:
        ConfigError: 文件读取失败、Profile 不存在或字段无效。
    """
    return create_config_from_dict(read_toml_config(file_path, profile))


# 字段映射表 (Config Field -> Env Suffix)
ENV_MAP = {
    "host": "HOST",
    "port": "PORT",
    "encrypted": "ENCRYPTED",
    "identifier": "IDENTIFIER",
    "prefix": "PREFIX",
    "buffer_size": "BUFFER_SIZE",
    "connect_timeout": "CONNECT_TIMEOUT",
    "read_timeout": "READ_TIMEOUT",
}

ENV_PREFIX = "CALC_"


def read_env_config() -> dict[str, Any]:
    """读取所有以 `CALC_` 开头的环境变量，返回原始配置字典。"""
    raw_data = {}
    for cfg_key, env_suffix in ENV_MAP.items():
        val = os.environ.get(f"{ENV_PREFIX}{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val
    return raw_data


def load_config_from_env() -> CalcConfig:
    """从环境变量加载配置。

    例如: `CALC_HOST` -> `host`。

    Returns:
        CalcConfig: 配置对象。

    Raises:
        ConfigError: 未检测到任何相关环境变量。
    """
    raw_data = read_env_config()
    if not raw_data:
        raise ConfigError(f"未检测到 {ENV_PREFIX} 前缀的环境变量")
    return create_config_from_dict(raw_data)
