# doorpanel/cli/main.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from doorpanel.app.config import DoorPanelConfig
from doorpanel.cli.args import parse_args
from doorpanel.core.errors import DoorPanelError
from doorpanel.panel.layout import load_layout
from doorpanel.runtime.session import PanelSession
from doorpanel.transport.url import SerialUrlTransport

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Console handler on the root logger, plus a file handler when asked (idempotent).
    """
    root = logging.getLogger()
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(type(h) is logging.StreamHandler for h in root.handlers):
        sh = logging.StreamHandler()
        sh.setFormatter(formatter)
        root.addHandler(sh)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        target = str(path.resolve())
        for h in root.handlers:
            if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target:
                return
        fh = logging.FileHandler(path, encoding="utf-8", delay=True)
        fh.setFormatter(formatter)
        root.addHandler(fh)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    try:
        cfg = DoorPanelConfig(endpoint=args.endpoint, layout_path=args.layout)
        layout = load_layout(cfg.layout_path)

        with PanelSession(cfg, layout, SerialUrlTransport(cfg.url)) as session:
            print(f"Connected to Zusi {session.sim_version or '?'} at {cfg.endpoint}")
            session.run()
        return 0
    except DoorPanelError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return 1
    except KeyboardInterrupt:
        return 0
