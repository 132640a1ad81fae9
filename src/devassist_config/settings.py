from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from devassist_common.errors import ConfigError


ENV_GOOGLE_SERVICE_ACCOUNT_KEY = "GOOGLE_SERVICE_ACCOUNT_KEY"
ENV_NOTION_TOKEN = "NOTION_TOKEN"
ENV_GITHUB_TOKEN = "GITHUB_TOKEN"


def _find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward until we find pyproject.toml or .git.
    """
    start = start.resolve()
    for p in (start, *start.parents):
        if (p / "pyproject.toml").exists() or (p / ".git").exists():
            return p
    return None


@lru_cache(maxsize=1)
def repo_root() -> Path:
    """Best-effort repository root discovery.

    Order of precedence:
      1) DEVASSIST_REPO_ROOT (explicit override)
      2) walk upward from current working directory
      3) walk upward from this module file's directory
    """
    explicit = os.getenv("DEVASSIST_REPO_ROOT")
    if explicit:
        p = Path(explicit).expanduser().resolve()
        if not p.exists() or not p.is_dir():
            raise ConfigError(f"DEVASSIST_REPO_ROOT does not exist or is not a directory: {p}")
        return p

    cwd = Path.cwd().resolve()
    root = _find_repo_root(cwd)
    if root:
        return root

    here_dir = Path(__file__).resolve().parent
    root = _find_repo_root(here_dir)
    if root:
        return root

    # repo/src/devassist_config/settings.py
    if len(here_dir.parents) >= 2:
        return here_dir.parents[1]

    return cwd


@lru_cache(maxsize=1)
def load_env_once() -> Optional[Path]:
    """
    Load dotenv exactly once. Precedence:
      1) DEVASSIST_ENV_FILE (explicit path)
      2) repo-root/.env
    """
    explicit = os.getenv("DEVASSIST_ENV_FILE")
    candidates = []

    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(repo_root() / ".env")

    for p in candidates:
        p = p.resolve()
        if p.exists() and p.is_file():
            # Do NOT override already-set environment variables
            load_dotenv(dotenv_path=str(p), override=False)
            return p

    return None


def telemetry_dir() -> Path:
    """
    Default telemetry dir. Override with DEVASSIST_TELEMETRY_DIR.
    """
    p = os.getenv("DEVASSIST_TELEMETRY_DIR")
    if p:
        return Path(p).expanduser().resolve()
    return (repo_root() / "artifacts" / "telemetry").resolve()


def telemetry_disabled() -> bool:
    return os.getenv("DEVASSIST_DISABLE_TELEMETRY", "0").strip().lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Credentials:
    """The three upstream credentials, resolved before any adapter is built."""
    google_service_account_key: str
    notion_token: str
    github_token: str


def load_credentials() -> Credentials:
    """Read credentials from the environment; any missing value is fatal."""
    missing = [
        n for n in (ENV_GOOGLE_SERVICE_ACCOUNT_KEY, ENV_NOTION_TOKEN, ENV_GITHUB_TOKEN)
        if not (os.getenv(n) or "").strip()
    ]
    if missing:
        raise ConfigError(f"Missing required environment variable(s): {', '.join(missing)}")

    return Credentials(
        google_service_account_key=os.environ[ENV_GOOGLE_SERVICE_ACCOUNT_KEY].strip(),
        notion_token=os.environ[ENV_NOTION_TOKEN].strip(),
        github_token=os.environ[ENV_GITHUB_TOKEN].strip(),
    )


def configure_logging() -> None:
    """
    Configure logging explicitly. No import-time side effects.
    Idempotent: if logging is already configured, do nothing.

    Always logs to stderr: stdout carries the MCP stdio protocol.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.getenv("DEVASSIST_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = os.getenv(
        "DEVASSIST_LOG_FORMAT",
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)


def init_runtime(*, configure_logs: bool = True, load_env: bool = True) -> None:
    """
    Call this from entrypoints only (servers, scripts).
    """
    if load_env:
        load_env_once()
    if configure_logs:
        configure_logging()
