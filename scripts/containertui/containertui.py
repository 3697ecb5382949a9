#!/usr/bin/env python3
"""Thin entrypoint for the container management TUI."""

from __future__ import annotations

from ctui_core.app import main


if __name__ == "__main__":
    raise SystemExit(main())
