"""
Tour Automation - CLI Entry Point.

Configuration Priority:
    1. CLI arguments (--headless, --config)
    2. Config file (tour-automation.yaml)
    3. Environment variables (TOUR_AUTOMATION__BROWSER__HEADLESS, etc.)

Usage:
    tour-automation record http://localhost:8000/#flashcards -o actions.json
    tour-automation replay http://localhost:8000/#flashcards actions.json
    tour-automation pick http://localhost:8000/#flashcards
    tour-automation validate tour-config.json
"""

import asyncio
import json
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tour_automation.bridge import ContentChannel, LoopbackTransport
from tour_automation.config import Settings, get_settings, load_config
from tour_automation.dom import SelectorEngine
from tour_automation.editor import TourEditor
from tour_automation.exceptions import InvalidActionShape, TourAutomationError
from tour_automation.recorder.validation import load_actions, validate_tour_config
from tour_automation.replay import ReplayReport
from tour_automation.surface import ContentSurface
from tour_automation.utils.logging import setup_logging_from_settings

app = typer.Typer(
    name="tour-automation",
    help="Record, pick and replay guided-tour actions in a browser",
    add_completion=False,
)

console = Console()


def _load_settings(config: Optional[Path], headless: Optional[bool], verbose: bool) -> Settings:
    settings = load_config(config_path=config) if config else get_settings()
    if headless is not None:
        settings = settings.merge_with({"browser": {"headless": headless}})
    setup_logging_from_settings(settings.logging, verbose=verbose)
    return settings


@asynccontextmanager
async def open_editor(settings: Settings, url: str) -> AsyncIterator[TourEditor]:
    """
    Open the target application and wire an editor to it.

    The page is only reachable through the content surface; the editor
    gets nothing but its end of the channel.
    """
    from tour_automation.browsers import PlaywrightPageDriver, launch_page

    recorder = settings.recorder
    async with launch_page(settings.browser, url) as page:
        controller_side, content_side = LoopbackTransport.pair()
        editor_channel = ContentChannel(controller_side, recorder.protocol_tag)
        content_channel = ContentChannel(content_side, recorder.protocol_tag)

        driver = PlaywrightPageDriver(
            page,
            capture_marker=recorder.capture_marker,
            action_timeout_ms=settings.browser.action_timeout_ms,
            highlight_color=settings.browser.highlight_color,
            double_click_window_ms=settings.browser.double_click_window_ms,
        )
        await driver.install()
        surface = ContentSurface(
            content_channel,
            driver,
            engine=SelectorEngine.from_settings(recorder),
            capture_marker=recorder.capture_marker,
            default_delay_ms=recorder.default_delay_ms,
        )
        surface.attach()

        editor = TourEditor(
            editor_channel,
            step_timeout_ms=recorder.step_timeout_ms,
            default_delay_ms=recorder.default_delay_ms,
        )
        editor.mount()
        try:
            yield editor
        finally:
            editor.teardown()
            # Let the stop commands reach the surface before it detaches
            await asyncio.sleep(0.05)
            await surface.detach()
            editor_channel.close()
            content_channel.close()


def _print_report(report: ReplayReport) -> None:
    table = Table(title="Replay")
    table.add_column("#", justify="right")
    table.add_column("Action")
    table.add_column("Target")
    table.add_column("Result")

    for outcome in report.outcomes:
        action = outcome.action
        if outcome.success:
            result = "[green]ok[/green]"
        elif outcome.timed_out:
            result = f"[yellow]timeout[/yellow] {escape(outcome.error or '')}"
        else:
            result = f"[red]failed[/red] {escape(outcome.error or '')}"
        table.add_row(str(outcome.index + 1), action.kind.value, escape(action.target or "-"), result)

    console.print(table)
    console.print(
        f"{len(report.outcomes)} step(s), {len(report.failed)} failed, "
        f"{report.duration_ms / 1000:.1f}s"
    )


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text())
    except (OSError, ValueError) as e:
        console.print(f"[red]Cannot read {path}: {escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.command()
def record(
    url: str = typer.Argument(..., help="URL of the application to record on"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write actions JSON here"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Record interactions in a visible browser until Enter is pressed.
    """
    settings = _load_settings(config, headless=False, verbose=verbose)
    console.print(Panel.fit(
        f"[bold blue]Recording[/bold blue]\n[dim]URL:[/dim] {url}\n"
        "Interact with the page, then press [bold]Enter[/bold] here to stop.",
        border_style="blue",
    ))
    try:
        data, warnings = asyncio.run(_record_async(settings, url))
    except TourAutomationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    for warning in warnings:
        console.print(
            f"[yellow]Ambiguous selector[/yellow] {escape(str(warning.get('selector')))} "
            f"({warning.get('matchCount')} matches)"
        )

    if data is None:
        console.print("[yellow]Nothing recorded.[/yellow]")
        raise typer.Exit(0)

    content = json.dumps(data, indent=2)
    if output:
        output.write_text(content)
        console.print(f"[green]Saved actions to {output}[/green]")
    else:
        console.print_json(content)


async def _record_async(settings: Settings, url: str):
    async with open_editor(settings, url) as editor:
        editor.toggle_recording()
        await asyncio.to_thread(input)
        editor.toggle_recording()
        return editor.actions_data(), editor.recording.warnings


@app.command()
def replay(
    url: str = typer.Argument(..., help="URL of the application to replay on"),
    actions_file: Path = typer.Argument(..., help="Actions JSON (object or array)"),
    headless: Optional[bool] = typer.Option(None, "--headless/--visible", help="Browser visibility"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Replay recorded actions and report which steps failed.
    """
    settings = _load_settings(config, headless=headless, verbose=verbose)
    try:
        actions = load_actions(_read_json(actions_file), path=actions_file.name)
    except InvalidActionShape as e:
        console.print(f"[red]Invalid actions: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    try:
        report = asyncio.run(_replay_async(settings, url, actions))
    except TourAutomationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    _print_report(report)
    if not report.success:
        raise typer.Exit(1)


async def _replay_async(settings: Settings, url: str, actions) -> ReplayReport:
    async with open_editor(settings, url) as editor:
        editor.load_actions([action.to_dict() for action in actions])
        return await editor.test_actions()


@app.command()
def pick(
    url: str = typer.Argument(..., help="URL of the application"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Click one element in the browser and print its selector.
    """
    settings = _load_settings(config, headless=False, verbose=verbose)
    console.print("Click an element in the browser window to select it.")
    try:
        selector = asyncio.run(_pick_async(settings, url))
    except TourAutomationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)
    console.print(f"[bold green]{escape(selector)}[/bold green]")


async def _pick_async(settings: Settings, url: str) -> str:
    async with open_editor(settings, url) as editor:
        picked: asyncio.Future = asyncio.get_running_loop().create_future()
        editor.pick(
            lambda selector: picked.done() or picked.set_result(selector),
            on_hover=lambda selector, rect: console.print(f"[dim]{escape(selector)}[/dim]"),
        )
        selector = await picked
        editor.highlight(selector)
        return selector


@app.command()
def validate(
    config_file: Path = typer.Argument(..., help="Tour configuration JSON"),
    actions_only: bool = typer.Option(False, "--actions", help="File holds a bare action list"),
):
    """
    Validate a tour configuration before publishing it.
    """
    raw = _read_json(config_file)

    if actions_only:
        try:
            actions = load_actions(raw, path=config_file.name)
        except InvalidActionShape as e:
            console.print(f"[red]✗ {escape(str(e))}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]✓ {len(actions)} valid action(s)[/green]")
        return

    report = validate_tour_config(raw)
    for warning in report.warnings:
        console.print(f"[yellow]! {escape(warning)}[/yellow]")
    for error in report.errors:
        console.print(f"[red]✗ {escape(error)}[/red]")

    if not report.valid:
        console.print(f"[red]{len(report.errors)} error(s)[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Configuration is valid[/green]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
