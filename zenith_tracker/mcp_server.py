from __future__ import annotations

import anyio
from mcp.server.fastmcp import FastMCP

from zenith_tracker.ai.intents import resolve
from zenith_tracker.config import load_config
from zenith_tracker.tracker import open_tracker

server = FastMCP(name="Zenith", instructions="Verified spending figures from the Zenith expense tracker")


def _with_tracker(config_path: str | None, fn):
    tracker = open_tracker(load_config(config_path))
    try:
        return fn(tracker)
    finally:
        tracker.close()


@server.tool(
    name="get_snapshot",
    description="30-day summary, month total, category breakdown and recurring purchases",
)
async def get_snapshot(config_path: str | None = None) -> dict:
    """Return the analytics snapshot as a plain dict.

    Parameters
    ----------
    config_path:
        Optional path to a config.yaml; defaults to the user's config.
    """

    def _run() -> dict:
        return _with_tracker(config_path, lambda t: t.cache.get_snapshot().to_dict())

    return await anyio.to_thread.run_sync(_run)


@server.tool(
    name="get_recurring_purchases",
    description="Purchases repeated at least twice in the last 90 days",
)
async def get_recurring_purchases(config_path: str | None = None) -> list[dict]:
    def _run() -> list[dict]:
        return _with_tracker(
            config_path,
            lambda t: [g.to_dict() for g in t.cache.get_snapshot().recurring],
        )

    return await anyio.to_thread.run_sync(_run)


@server.tool(
    name="answer_question",
    description="Deterministic answer to a spending question, computed without a language model",
)
async def answer_question(question: str, config_path: str | None = None) -> str | None:
    """Return the direct answer for ``question`` or ``None`` when no rule applies."""

    if not question or not question.strip():
        raise ValueError("question must not be empty")

    def _run() -> str | None:
        return _with_tracker(
            config_path,
            lambda t: resolve(question, t.cache.get_snapshot, t.config.get("currency_symbol", "₹")),
        )

    return await anyio.to_thread.run_sync(_run)


def main() -> None:
    server.run()


if __name__ == "__main__":
    main()
