#!/usr/bin/env python3
"""
ESST forms run script.

- serve:  start the proxy under uvicorn, wait for /health, shut down cleanly on Ctrl+C
- submit: fill one record form in the terminal (validate, preview, copy, upload)
- view:   print one page of stored rows for a sheet
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import subprocess
import sys
import time
from dataclasses import dataclass
from typing import Optional

import requests

from esstforms import __version__
from esstforms.client import FormsApiClient, default_api_url
from esstforms.errors import EsstFormsError
from esstforms.forms import FORMS, FlowState, FormFlow
from esstforms.forms.records import unit_choices
from esstforms.logging import setup_logging
from esstforms.schemas import ListType
from esstforms.views import render_page

logger = logging.getLogger("esstforms.run")


@dataclass(frozen=True)
class ProcSpec:
    """Subprocess specification."""
    name: str
    cmd: list[str]
    cwd: Optional[str] = None
    env: Optional[dict[str, str]] = None


def _project_env() -> dict[str, str]:
    """
    Build an env for subprocesses.

    Ensures unbuffered output so logs appear immediately.
    """
    env = dict(os.environ)
    env["PYTHONUNBUFFERED"] = "1"
    return env


def _popen(spec: ProcSpec) -> subprocess.Popen:
    env = _project_env()
    if spec.env:
        env.update(spec.env)

    # Inherit stdout/stderr so uvicorn logs show in the terminal.
    return subprocess.Popen(spec.cmd, cwd=spec.cwd, env=env)


def _http_ok(url: str, timeout_s: float = 1.5) -> bool:
    """
    True if `url` answers with 2xx/3xx.
    """
    try:
        resp = requests.get(url, timeout=timeout_s)
    except requests.RequestException:
        return False
    return 200 <= resp.status_code < 400


def _wait_for_http(url: str, deadline_s: float = 20.0, poll_s: float = 0.25) -> None:
    """
    Wait for an HTTP endpoint to become reachable.

    Raises:
        RuntimeError: if the deadline expires.
    """
    start = time.time()
    while time.time() - start < deadline_s:
        if _http_ok(url):
            return
        time.sleep(poll_s)
    raise RuntimeError(f"Timed out waiting for {url}")


def _terminate_process(proc: subprocess.Popen, name: str, grace_s: float = 6.0) -> None:
    """
    Terminate a process gracefully, then force kill if needed.
    """
    if proc.poll() is not None:
        return

    try:
        if os.name == "nt":
            proc.terminate()
        else:
            proc.send_signal(signal.SIGTERM)
    except OSError as exc:
        logger.debug("Signal to %s failed: %s", name, exc)

    try:
        proc.wait(timeout=grace_s)
    except subprocess.TimeoutExpired:
        logger.warning("Process '%s' ignored SIGTERM; killing", name)
        proc.kill()


def _run_serve(host: str, port: int, reload: bool) -> int:
    """
    Start uvicorn with the proxy app and supervise it.

    Returns:
        Exit code.
    """
    cmd = ["uvicorn", "esstforms.proxy.run:app", "--host", host, "--port", str(port)]
    if reload:
        cmd.append("--reload")
    spec = ProcSpec(name="proxy", cmd=cmd)
    proc = _popen(spec)

    health_url = f"http://{host}:{port}/health"
    try:
        _wait_for_http(health_url, deadline_s=30.0)
    except RuntimeError as exc:
        logger.error("Proxy failed to become healthy: %s", exc)
        if proc.poll() is not None:
            logger.error("Proxy process exited early.")
        _terminate_process(proc, spec.name)
        return 1

    logger.info("Proxy is up at http://%s:%s", host, port)
    try:
        code = proc.wait()
    except KeyboardInterrupt:
        logger.info("Ctrl+C received; shutting down...")
        _terminate_process(proc, spec.name)
        return 0
    logger.info("Process '%s' exited with code %s", spec.name, code)
    return int(code)


def _prompt_field(flow: FormFlow, name: str) -> None:
    field = flow.schema.get_field(name)
    choices = field.choices
    if name == "unit":
        choices = unit_choices(flow.values.get("machine", ""))
    current = flow.values.get(name, "")
    hint = f" [{'/'.join(choices)}]" if choices else ""
    raw = input(f"{field.label}{hint} ({current}): ").strip()
    if not raw:
        return
    if choices and raw not in choices:
        print(f"  ! '{raw}' is not one of {', '.join(choices)}; keeping '{current}'.")
        return
    flow.set_field(name, raw)


def _run_submit(list_type: ListType, client: FormsApiClient) -> int:
    """
    Terminal version of a form page: edit, preview, (copy), upload.
    """
    flow = FormFlow(FORMS[list_type])
    print(flow.schema.title)

    while True:
        for spec in flow.schema.fields:
            _prompt_field(flow, spec.name)

        preview = flow.generate_preview()
        if preview is None:
            print(f"  ! {flow.message}")
            continue

        print("\n" + preview + "\n")
        if not flow.schema.copy_on_submit:
            if input("Copy text to clipboard? [y/N]: ").strip().lower() == "y":
                print(f"  {flow.copy_preview().message}")

        answer = input("Upload? [Y/n/e(dit)]: ").strip().lower()
        if answer == "e":
            continue
        if answer == "n":
            return 0

        flow.submit(client)
        print(f"  {flow.message}")
        return 0 if flow.state is FlowState.SUCCEEDED else 1


def _run_view(list_type: ListType, page: int, client: FormsApiClient) -> int:
    try:
        rows = client.read_rows(list_type)
    except (EsstFormsError, requests.RequestException) as exc:
        print(f"조회 실패 (Fail to Look Up): {exc}", file=sys.stderr)
        return 1
    print(render_page(list_type, rows, page))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="ESST maintenance forms")
    parser.add_argument("--version", action="version", version=f"esstforms {__version__}")
    parser.add_argument("--api-url", default=default_api_url(), help="Proxy base URL for submit/view")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the /forms proxy")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    types = [t.value for t in ListType]
    submit = sub.add_parser("submit", help="Fill and upload one record")
    submit.add_argument("type", choices=types)

    view = sub.add_parser("view", help="Show stored rows")
    view.add_argument("type", choices=types)
    view.add_argument("--page", type=int, default=1)

    args = parser.parse_args()
    setup_logging()

    if args.command == "serve":
        raise SystemExit(_run_serve(args.host, args.port, args.reload))

    client = FormsApiClient(args.api_url)
    if args.command == "submit":
        raise SystemExit(_run_submit(ListType(args.type), client))
    if args.command == "view":
        raise SystemExit(_run_view(ListType(args.type), args.page, client))

    parser.print_help()
    raise SystemExit(2)


if __name__ == "__main__":
    main()
