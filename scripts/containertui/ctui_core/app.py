"""Container management TUI entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone

from rich.console import Console

from ctui_core.collectors import snapshot
from ctui_core.config import resolve_config
from ctui_core.context import AppContext
from ctui_core.engine import DockerEngine, EngineClient, EngineError
from ctui_core.logs_setup import configure_logging
from ctui_core.models import KINDS
from ctui_core.panels import ResourcePanel
from ctui_core.panels.containers import ContainersPanel
from ctui_core.panels.images import ImagesPanel
from ctui_core.panels.networks import NetworksPanel
from ctui_core.panels.services import ServicesPanel
from ctui_core.panels.volumes import VolumesPanel
from ctui_core.router import TabRouter
from ctui_core.runtime import Program
from ctui_core.theme import Theme

logger = logging.getLogger(__name__)

PANEL_TYPES = (ContainersPanel, ImagesPanel, VolumesPanel, NetworksPanel, ServicesPanel)


def build_panels(context: AppContext) -> list[ResourcePanel]:
    return [panel_type(context) for panel_type in PANEL_TYPES]


def _json_output(engine: EngineClient) -> str:
    payload = {
        "collected_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    for kind in KINDS:
        payload[kind] = snapshot(kind, engine).to_dict()
    return json.dumps(payload, indent=2)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Terminal UI for containers, images, volumes, networks and compose services")
    parser.add_argument("--config", help="JSON config file (default: $XDG_CONFIG_HOME/containertui/config.json)")
    parser.add_argument("--no-nerd-fonts", action="store_true", help="Use plain ASCII selection markers")
    parser.add_argument(
        "--colors",
        action="append",
        metavar="KEY=VALUE[,KEY=VALUE]",
        help="Theme color overrides, e.g. primary=#8be9fd,error=red (repeatable)",
    )
    parser.add_argument("--json", action="store_true", help="Print a JSON snapshot of every resource kind and exit")
    parser.add_argument("--debug", action="store_true", help="Write debug logs to ./debug.log (also enabled by $DEBUG)")
    args = parser.parse_args(argv)

    configure_logging(args.debug)

    try:
        config = resolve_config(args.config, args.no_nerd_fonts, args.colors)
        theme = Theme.from_config(config.theme)
    except ValueError as exc:
        print(f"containertui: {exc}", file=sys.stderr)
        return 2

    try:
        engine = DockerEngine.from_env()
    except EngineError as exc:
        print(f"containertui: {exc}", file=sys.stderr)
        return 1

    try:
        if args.json:
            print(_json_output(engine))
            return 0

        context = AppContext(engine=engine, config=config, theme=theme, console=Console())
        router = TabRouter(context, build_panels(context))
        logger.debug("starting with refresh every %ss", config.refresh_seconds)
        return Program(context, router).run()
    finally:
        try:
            engine.close()
        except EngineError as exc:
            logger.warning("%s", exc)


if __name__ == "__main__":
    raise SystemExit(main())
