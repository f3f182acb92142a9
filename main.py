from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path

_log = logging.getLogger("socialcard.main")


def _filter_platform_startup_args(argv: list[str]) -> list[str]:
    """过滤平台启动器注入的参数，避免 GUI bundle 冷启动时被 argparse 误判。"""
    filtered_args: list[str] = []
    for arg in argv:
        if sys.platform == "darwin" and arg.startswith("-psn_"):
            continue
        filtered_args.append(arg)
    return filtered_args


def _install_exception_logging() -> None:
    """窗口版没有控制台时，未捕获异常也要进日志。"""

    def _log_uncaught_exception(exc_type, exc_value, exc_tb) -> None:
        message = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
        _log.error("uncaught exception\n%s", message.rstrip())
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _log_uncaught_exception


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    _install_exception_logging()
    _log.info("startup argv=%s", sys.argv[1:])

    parser = argparse.ArgumentParser(description="Launch the SocialCard preview window.")
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Open this card file (.yaml/.yml/.json) on startup.",
    )
    args = parser.parse_args(_filter_platform_startup_args(sys.argv[1:]))
    startup_file = args.file.resolve(strict=False) if args.file else None

    try:
        from socialcard.gui.preview import launch_gui
    except ImportError as exc:
        _log.error("GUI import failed: %s", exc)
        raise SystemExit(f"GUI is unavailable: {exc}") from exc

    _log.info("launching GUI startup_file=%s", startup_file)
    launch_gui(startup_file=startup_file)
    _log.info("GUI returned normally")


if __name__ == "__main__":
    main()
