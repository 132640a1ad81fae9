"""
Smoke script against the real upstream services (needs credentials in .env).

It performs:
 1) spawns the server over stdio and lists tools
 2) calls healthz
 3) calls get_calendar_events (maxResults from DEVASSIST_SMOKE_MAX_RESULTS)
 4) optionally query_notion_pages (DEVASSIST_SMOKE_NOTION_DB) and
    get_github_repo_info (DEVASSIST_SMOKE_GITHUB_REPO=owner/repo)
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any

from mcp import ClientSession
from mcp.client.stdio import StdioServerParameters, stdio_client

_REPO_ROOT = Path(__file__).resolve().parents[1]


def _pretty(x: Any) -> str:
    if isinstance(x, str):
        try:
            return json.dumps(json.loads(x), indent=2, ensure_ascii=False)
        except json.JSONDecodeError:
            return x
    return json.dumps(x, indent=2, ensure_ascii=False, default=str)


def _unwrap_tool_result(res: Any) -> str:
    content = getattr(res, "content", None) or []
    return getattr(content[0], "text", "") if content else ""


async def _call(session: ClientSession, name: str, args: dict) -> bool:
    res = await session.call_tool(name, args)
    status = "ERROR" if res.isError else "OK"
    print(f"\n[smoke] CALL {name}({args}) -> {status}")
    print(_pretty(_unwrap_tool_result(res)))
    return not res.isError


async def main() -> int:
    python_cmd = os.getenv("MCP_PYTHON") or sys.executable
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(p for p in (str(_REPO_ROOT / "src"), env.get("PYTHONPATH")) if p)

    print(f"[smoke] Repo root: {_REPO_ROOT}")
    print(f"[smoke] Python: {python_cmd}")

    server = StdioServerParameters(command=python_cmd, args=["-m", "devassist_mcp.server"], env=env, cwd=str(_REPO_ROOT))

    ok = True
    async with stdio_client(server) as (read, write):
        async with ClientSession(read, write) as session:
            await session.initialize()

            tools = await session.list_tools()
            print("\n[smoke] TOOLS:")
            for t in tools.tools:
                print(f" - {t.name}: {t.description}")

            ok &= await _call(session, "healthz", {})
            ok &= await _call(
                session,
                "get_calendar_events",
                {"maxResults": int(os.getenv("DEVASSIST_SMOKE_MAX_RESULTS", "5"))},
            )

            db = os.getenv("DEVASSIST_SMOKE_NOTION_DB")
            if db:
                ok &= await _call(session, "query_notion_pages", {"databaseId": db})

            repo = os.getenv("DEVASSIST_SMOKE_GITHUB_REPO")
            if repo and "/" in repo:
                owner, name = repo.split("/", 1)
                ok &= await _call(session, "get_github_repo_info", {"owner": owner, "repo": name})

    print("\n[smoke] OK" if ok else "\n[smoke] Completed with errors")
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
