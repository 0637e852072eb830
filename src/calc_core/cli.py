# src/calc_core/cli.py
"""
命令行入口。

用法: calc-client [-p PORT] [-s] [-c CONFIG] [--profile NAME] [-v] hostname identifier

配置优先级: TOML (-c) < CALC_* 环境变量 (含 .env) < 命令行参数。
标准输出只打印完成令牌；日志与错误写入标准错误。
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from . import __version__
from .config import CalcConfig, create_config_from_dict, read_env_config, read_toml_config
from .core import CalcCore
from .exceptions import CalcError, ConfigError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

logger = logging.getLogger("CalcCLI")  # CLI 日志记录器


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calc-client",
        description="连接挑战服务器，求解全部算术挑战并输出完成令牌。",
    )
    parser.add_argument("hostname", help="服务器主机名或 IP")
    parser.add_argument("identifier", help="HELLO 消息中携带的身份标识")
    parser.add_argument(
        "-p", "--port", type=int, default=None, help="端口 (默认 27998，TLS 为 27999)"
    )
    parser.add_argument("-s", "--ssl", action="store_true", help="启用 TLS")
    parser.add_argument("-c", "--config", type=Path, default=None, help="TOML 配置文件")
    parser.add_argument("--profile", default="default", help="TOML 中的配置预设名")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_cli_config(args: argparse.Namespace) -> CalcConfig:
    """为 CLI 工具合并各来源的配置。

    Raises:
        ConfigError: 配置无效。
    """
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=True)
        logger.debug(f"已加载配置文件: {env_path}")

    raw: dict[str, Any] = {}
    if args.config is not None:
        raw.update(read_toml_config(args.config, args.profile))
    raw.update(read_env_config())

    raw["host"] = args.hostname
    raw["identifier"] = args.identifier
    if args.port is not None:
        raw["port"] = args.port
    if args.ssl:
        raw["encrypted"] = True

    config = create_config_from_dict(raw)
    logger.debug(f"CLI: 配置加载完成 {config!r}")
    return config


def run_cli(argv: list[str] | None = None) -> int:
    """解析参数并执行会话，返回进程退出码。"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    try:
        config = load_cli_config(args)
        token = asyncio.run(CalcCore(config).run())
    except ConfigError as ce:
        logger.error(f"配置错误: {ce}")
        return EXIT_FAILURE
    except CalcError as e:
        if e.cause is not None:
            logger.error(f"{e} (原因: {e.cause!r})")
        else:
            logger.error(f"{e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.info("收到用户中断信号 (Ctrl+C)，退出。")
        return EXIT_INTERRUPTED

    print(token)
    return EXIT_OK


def main() -> None:
    """程序主入口点。"""
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
