"""Display functions for CLI commands - pure functions for Rich output."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..content import VideoContent
from ..orchestrator import GenerationResult
from ..platforms import TokenData
from ..video import CompositionResult


def show_content(console: Console, content: VideoContent) -> None:
    """Display generated content: script, on-screen text and caption."""
    console.print(Panel(
        f"[bold]{escape(content.angle)}[/bold]\n"
        f"Niche: [yellow]{content.niche.label}[/yellow]\n"
        f"Estimated duration: [cyan]{content.estimated_duration:.1f}s[/cyan]",
        title="Content",
        border_style="cyan",
    ))
    console.print(Panel(escape(content.script), title="Script", border_style="dim"))

    table = Table(title="On-screen text")
    table.add_column("Type", style="magenta")
    table.add_column("Window", style="cyan")
    table.add_column("Text")
    table.add_column("Style", style="dim")
    for segment in content.segments:
        table.add_row(
            segment.kind.value,
            f"{segment.start:.1f}-{segment.end:.1f}s",
            escape(segment.text),
            segment.style_hint,
        )
    console.print(table)

    console.print(Panel(escape(content.full_caption), title="Caption", border_style="green"))


def show_generation_result(console: Console, result: GenerationResult) -> None:
    """Display the outcome of a generate run."""
    if not result.success:
        console.print(Panel(
            f"[red]Failed at stage: {result.stage}[/red]\n\n{escape(result.error or '')}",
            title=f"Post {result.post_id}",
            border_style="red",
        ))
        return

    lines = [
        "[bold green]Video generated![/bold green]",
        "",
        f"Topic: [yellow]{escape(result.topic.angle) if result.topic else '-'}[/yellow]",
        f"Video: [cyan]{result.video_path}[/cyan]",
        f"Time: {result.elapsed_seconds:.1f}s",
    ]
    if result.publish_result is not None:
        published = result.publish_result
        lines.append(f"TikTok: [green]{escape(published.reference)}[/green]")
    else:
        lines.append("TikTok: [dim]not published[/dim]")

    console.print(Panel("\n".join(lines), title=f"Post {result.post_id}", border_style="green"))


def show_composition_result(console: Console, result: CompositionResult) -> None:
    """Display the outcome of a standalone compose."""
    stages = " > ".join(stage.value for stage in result.stages)
    if result.success:
        console.print(Panel(
            f"[bold green]Composed {result.output_path}[/bold green]\n"
            f"Duration: [cyan]{result.duration_seconds:.2f}s[/cyan]\n"
            f"[dim]{stages}[/dim]",
            title="Compose",
            border_style="green",
        ))
    else:
        console.print(Panel(
            f"[red]{escape(result.message)}[/red]\n[dim]{stages}[/dim]",
            title=f"Compose failed ({result.failed_stage})",
            border_style="red",
        ))


def show_connections(console: Console, results: dict[str, tuple[bool, str]]) -> None:
    """Display a service connection table."""
    table = Table(title="Connections")
    table.add_column("Service", style="bold")
    table.add_column("Status")
    table.add_column("Details", style="dim")
    for name, (ok, message) in results.items():
        status = "[green]OK[/green]" if ok else "[red]FAIL[/red]"
        table.add_row(name, status, escape(message))
    console.print(table)


def show_token(console: Console, token: TokenData | None) -> None:
    """Display stored TikTok token status."""
    if token is None:
        console.print(Panel(
            "[yellow]No TikTok token stored[/yellow]\n\n"
            "Authorize the app, then run: token --code <code>",
            title="Token Status",
            border_style="yellow",
        ))
        return

    if token.is_expired():
        state = "[yellow]Access token expired[/yellow] (use --refresh)"
        border = "yellow"
    else:
        state = "[bold green]Access token is valid[/bold green]"
        border = "green"
    console.print(Panel(
        f"{state}\n\n"
        f"[dim]Expires: {token.expires_at:%Y-%m-%d %H:%M %Z}[/dim]\n"
        f"[dim]Open ID: {token.open_id or '-'}[/dim]\n"
        f"[dim]Scope: {token.scope or '-'}[/dim]",
        title="Token Status",
        border_style=border,
    ))
