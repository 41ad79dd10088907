"""Convenience launcher for the FileDeck development server.

Usage:
    Windows: python start_dev.py
    Linux:   python3 start_dev.py

Runs Uvicorn with --reload against ./backend, preferring a virtual
environment at backend/.venv (or ./.venv). Press Ctrl+C to stop.
"""

from __future__ import annotations

import os
import signal
import subprocess
import sys
import time
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
BACKEND_DIR = ROOT_DIR / "backend"

_VENV_PYTHON = ".venv\\Scripts\\python.exe" if os.name == "nt" else ".venv/bin/python"

if os.name == "nt":
    os.system("")  # enable VT100 on Windows 10+

CYAN = "\033[36m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"


def log(level: str, msg: str) -> None:
    colors = {"info": CYAN, "start": GREEN, "stop": YELLOW, "error": RED}
    print(f"{colors.get(level, '')}[{level}]{RESET} {msg}")


def resolve_python() -> str:
    for base in (BACKEND_DIR, ROOT_DIR):
        candidate = base / _VENV_PYTHON
        if candidate.exists():
            return str(candidate)
    log("info", "No venv found, using system Python")
    return sys.executable


def check_dependencies(python: str) -> bool:
    """Verify the imaging and web stack is importable."""
    result = subprocess.run(
        [python, "-c", "import fastapi, uvicorn, PIL, blurhash, numpy"],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        log("error", "Missing dependencies. Run:")
        log("error", f"  cd {ROOT_DIR} && pip install -e '.[test]'")
        return False
    return True


def stop(proc: subprocess.Popen) -> None:
    if proc.poll() is not None:
        return
    log("stop", "backend")
    try:
        if os.name == "nt":
            proc.send_signal(signal.CTRL_BREAK_EVENT)
        else:
            os.killpg(os.getpgid(proc.pid), signal.SIGTERM)
        proc.wait(timeout=10)
    except ProcessLookupError:
        pass
    except subprocess.TimeoutExpired:
        proc.kill()


def main() -> int:
    python = resolve_python()
    log("info", f"Python:  {python}")
    log("info", f"Backend: {BACKEND_DIR}")

    if not check_dependencies(python):
        return 1

    os.environ.setdefault("FILEDECK_DEBUG", "true")
    os.environ.setdefault("FILEDECK_LOG_LEVEL", "DEBUG")
    os.environ.setdefault("FILEDECK_ENVIRONMENT", "development")

    cmd = [python, "-m", "uvicorn", "filedeck.main:app", "--reload", "--host", "0.0.0.0", "--port", "8000"]
    log("start", " ".join(cmd))
    if os.name == "nt":
        proc = subprocess.Popen(cmd, cwd=BACKEND_DIR, creationflags=subprocess.CREATE_NEW_PROCESS_GROUP)
    else:
        proc = subprocess.Popen(cmd, cwd=BACKEND_DIR, start_new_session=True)

    log("info", "")
    log("info", "  API:      http://localhost:8000/api")
    log("info", "  Listing:  POST http://localhost:8000/api/files/list")
    log("info", "  Docs:     http://localhost:8000/docs")
    log("info", "")

    try:
        while True:
            retcode = proc.poll()
            if retcode is not None:
                log("info", f"backend exited with code {retcode}")
                return retcode
            time.sleep(0.5)
    except KeyboardInterrupt:
        print()
        log("info", "Ctrl+C received, shutting down...")
        return 0
    finally:
        stop(proc)


if __name__ == "__main__":
    raise SystemExit(main())
