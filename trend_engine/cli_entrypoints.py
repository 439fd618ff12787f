#!/usr/bin/env python3
"""Console-script wrappers for the operator scripts.

After an editable install (``pip install -e .``) the following commands become
available system-wide:

* ``trend-pass``             – one scoring pass (``scripts/run_scoring_pass.py``)
* ``trend-collect-summary``  – collection summary / signal refresh
* ``trend-scheduler``        – interval loop triggering scoring passes

Arguments are forwarded unchanged, so ``trend-pass --state data/state.json``
behaves like the script itself.
"""
from __future__ import annotations

import sys
from pathlib import Path
from subprocess import run

PYTHON = sys.executable
ROOT = Path(__file__).resolve().parents[1]  # Repository root


def _exec(script: str) -> None:  # noqa: WPS421 (subprocess wrapper)
    """Run *script* with the current arguments and propagate its exit status."""
    completed = run([PYTHON, str(ROOT / "scripts" / script), *sys.argv[1:]])
    if completed.returncode != 0:
        sys.exit(completed.returncode)


# ---------------------------------------------------------------------------
# Entry-points
# ---------------------------------------------------------------------------

def run_pass() -> None:
    """Run a single scoring pass."""
    _exec("run_scoring_pass.py")


def collect_summary() -> None:
    """Summarize collected posts, optionally refreshing trend signals."""
    _exec("collect_summary.py")


def scheduler() -> None:
    """Trigger scoring passes on an interval."""
    _exec("refresh_scheduler.py")
