"""Typer app and command registration."""

from __future__ import annotations

import typer

app = typer.Typer(
    name="tiktok-automator",
    help="Daily TikTok video generation and publishing",
    add_completion=False,
)


def register_commands() -> None:
    """Register all commands."""
    from .commands import check, compose, content, generate, music_add, token

    app.command(name="generate")(generate)
    app.command(name="compose")(compose)
    app.command(name="content")(content)
    app.command(name="check")(check)
    app.command(name="music-add")(music_add)
    app.command(name="token")(token)


register_commands()


def main() -> None:
    """CLI entry point."""
    app()
