"""Startup preflight check"""
import logging
import shutil
from typing import Optional

import httpx
from rich.console import Console

from .config import BASE_ORIGIN, MPV_PATH, HTTP_TIMEOUT

console = Console()
logger = logging.getLogger(__name__)


async def run_preflight() -> bool:
    """
    Run all startup checks. Print results. Return True only if ALL pass.
    """
    checks = [
        ("Python deps", _check_python_deps),
        ("mpv", _check_mpv),
    ]

    results = []
    for i, (label, fn) in enumerate(checks, 1):
        ok, msg, fix = await fn()
        results.append((ok, label, msg, fix))
        icon = "[green]✓[/green]" if ok else "[red]✗[/red]"
        dots = "." * max(20 - len(label), 3)
        status = f"[green]{msg}[/green]" if ok else f"[red]{msg}[/red]"
        console.print(f"  [{i}/{len(checks)}] {label} {dots} {icon} {status}")

    failures = [(label, fix) for ok, label, _, fix in results if not ok and fix]
    if failures:
        console.print("")
        for label, fix in failures:
            console.print(f"  [yellow]Fix for {label}:[/yellow]")
            for line in fix.strip().splitlines():
                console.print(f"    {line}")
            console.print("")
        return False

    # Informational only: the sync loop retries on its own
    console.print(f"  {await origin_status()}")
    console.print("")
    return True


async def _check_python_deps() -> tuple[bool, str, str]:
    missing = []
    versions = []
    try:
        import httpx as hx
        versions.append(f"httpx {hx.__version__}")
    except ImportError:
        missing.append("httpx")

    try:
        import bs4
        versions.append(f"beautifulsoup4 {getattr(bs4, '__version__', 'ok')}")
    except ImportError:
        missing.append("beautifulsoup4")

    try:
        import dotenv
        versions.append("python-dotenv")
    except ImportError:
        missing.append("python-dotenv")

    if missing:
        return False, f"missing: {', '.join(missing)}", "Run: pip install -e ."
    return True, ", ".join(versions), ""


async def _check_mpv() -> tuple[bool, str, str]:
    path = shutil.which(MPV_PATH)
    if path:
        return True, path, ""
    fix = (
        f"'{MPV_PATH}' not found on PATH. Install it:\n"
        "  apt install mpv   (Debian/Ubuntu)\n"
        "  brew install mpv  (macOS)\n"
        "Or point MPV_PATH in .env at the binary."
    )
    return False, "not installed", fix


async def origin_status(transport: Optional[httpx.AsyncBaseTransport] = None) -> str:
    host = BASE_ORIGIN.replace("http://", "")
    try:
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, follow_redirects=True, transport=transport) as client:
            r = await client.get(BASE_ORIGIN)
        if r.status_code < 500:
            return f"[dim]{host} reachable[/dim]"
    except httpx.HTTPError as e:
        logger.debug("Origin check failed: %s", e)
    return f"[yellow]{host} not responding, will keep retrying[/yellow]"
