"""
Command-line launcher for the Clarke & Park visualization window.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace

from .config import create_default_config
from .logging_utils import configure_logging
from .session import Session


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    defaults = create_default_config()
    parser = argparse.ArgumentParser(description="Animate the Clarke and Park transforms")
    parser.add_argument("--speed", type=float, default=defaults.speed, help="rotation speed (rev/s)")
    parser.add_argument("--amplitude", type=float, default=defaults.amplitude, help="phase peak amplitude")
    parser.add_argument("--paused", action="store_true", help="start paused")
    parser.add_argument("--hide-projections", action="store_true", help="start with projections hidden")
    parser.add_argument(
        "--history-length", type=int, default=defaults.history_length, help="samples per waveform trace"
    )
    parser.add_argument("--log-level", default="INFO", help="DEBUG/INFO/WARNING/ERROR")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace):
    return replace(
        create_default_config(),
        speed=args.speed,
        amplitude=args.amplitude,
        playing=not args.paused,
        show_projections=not args.hide_projections,
        history_length=args.history_length,
    ).validate()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    config = build_config(args)

    from PyQt5.QtWidgets import QApplication

    from .widget import ClarkeParkWidget, QtFrameScheduler

    app = QApplication(sys.argv[:1])
    session = Session(config)
    win = ClarkeParkWidget(session)
    win.show()
    session.start(QtFrameScheduler(config.frame_interval_ms))
    try:
        return app.exec_()
    finally:
        session.stop()


if __name__ == "__main__":
    sys.exit(main())
