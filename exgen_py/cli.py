"""Command-line interface for exgen_py."""

from typing import Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .client import Difficulty, GenerationRequest, Judge0Client, PlatformClient, Visibility
from .client.judge import LANGUAGE_ID_MAP
from .config import LocalConfig
from .errors import ExgenError
from .utils.terminal import Notifier, choose_index, create_table, format_verdict_color, shorten
from .workflow import GenerationWorkflow, JudgeRunner, Step


console = Console()

INT_FIELDS = {"memory"}
FLOAT_FIELDS = {"time_limit"}
LIST_FIELDS = {"topic_ids"}
BOOL_FIELDS = {"is_public"}


def _ensure_login(client: PlatformClient) -> bool:
    if client.config.has_token():
        return True
    console.print("[yellow]Not logged in. Please login first.[/yellow]")
    return client.login()


def _load_workflow(client: PlatformClient, notifier: Notifier) -> GenerationWorkflow:
    session = LocalConfig.load()
    if session is None:
        return GenerationWorkflow(client, notifier)
    return GenerationWorkflow.restore(session, client, notifier)


def _save_workflow(workflow: GenerationWorkflow) -> None:
    workflow.snapshot().save()


def _open(debug: bool = False) -> Optional[GenerationWorkflow]:
    client = PlatformClient()
    if not _ensure_login(client):
        return None
    return _load_workflow(client, Notifier(console, debug=debug))


def _open_preview(debug: bool = False) -> Optional[GenerationWorkflow]:
    workflow = _open(debug)
    if workflow is None:
        return None
    if workflow.step != Step.PREVIEW:
        console.print("[yellow]Nothing to preview. Run 'exgen generate' first.[/yellow]")
        return None
    return workflow


def _coerce(name: str, value: str):
    """Turn a command-line string into the type a field holds."""
    if name in INT_FIELDS:
        return int(value)
    if name in FLOAT_FIELDS:
        return float(value)
    if name in LIST_FIELDS:
        return [item.strip() for item in value.split(",") if item.strip()]
    if name in BOOL_FIELDS:
        return value.lower() in ("1", "true", "yes", "y")
    return value


def _print_drafts(workflow: GenerationWorkflow) -> None:
    table = create_table(f"Generated exercises ({len(workflow.drafts)})", [
        "#", "Code", "Title", "Difficulty", "Language", "Test cases",
    ])
    for idx, draft in enumerate(workflow.drafts):
        marker = "*" if idx == workflow.active_index else ""
        table.add_row(
            f"{idx}{marker}",
            escape(draft.code),
            escape(draft.title or "Untitled"),
            draft.difficulty,
            draft.solution_language or workflow.request.solution_language,
            str(len(draft.test_cases)),
        )
    console.print(table)


def _print_run_results(workflow: GenerationWorkflow) -> None:
    state = workflow.run_state
    if state.error:
        console.print(f"[red]{state.error}[/red]")
        return
    if not state.has_run:
        console.print("[yellow]No trial run yet.[/yellow]")
        return
    if not state.results:
        console.print("[yellow]No test results were recorded.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Test", style="cyan")
    table.add_column("Verdict", style="white")
    table.add_column("Time", style="yellow")
    table.add_column("Expected", style="white")
    table.add_column("Output", style="white")
    table.add_column("Stderr", style="red")

    for result in state.results:
        table.add_row(
            f"#{result.index + 1}",
            format_verdict_color(result.status_description, result.is_passed, result.is_pending),
            f"{result.elapsed_time}s" if result.elapsed_time else "N/A",
            shorten(result.expected) or '""',
            shorten(result.actual_output) or '""',
            shorten(result.stderr),
        )

    console.print(table)
    passed = sum(1 for result in state.results if result.is_passed)
    color = "green" if passed == len(state.results) else "red"
    console.print(f"[bold {color}]Passed {passed}/{len(state.results)}[/bold {color}]")


@click.group()
@click.version_option(version=__version__)
def cli():
    """exgen_py - generate, review and publish judge exercises with AI."""
    pass


@cli.command()
@click.option("--email", help="Account email (prompted if omitted)")
def login(email: Optional[str]):
    """Log in and save the session token."""
    client = PlatformClient()
    client.login(email=email)


@cli.command()
def logout():
    """Forget the saved session token."""
    client = PlatformClient()
    client.logout()
    console.print("[green]Logged out[/green]")


@cli.command()
def topics():
    """List topics available for generation."""
    client = PlatformClient()
    if not _ensure_login(client):
        return

    try:
        items = client.get_topics()
    except ExgenError as e:
        console.print(f"[red]{e}[/red]")
        return

    if not items:
        console.print("[yellow]No topics found.[/yellow]")
        return

    table = create_table("Topics", ["#", "ID", "Name"])
    for idx, topic in enumerate(items):
        table.add_row(str(idx), topic.id, topic.name)
    console.print(table)


@cli.command()
@click.option("-t", "--topic", help="Topic ID (chosen interactively if omitted)")
@click.option(
    "-L",
    "--level",
    "levels",
    multiple=True,
    type=click.Choice([d.value for d in Difficulty]),
    help="Difficulty, repeatable",
)
@click.option("-n", "--count", type=int, default=2, show_default=True, help="Number of exercises (1-10)")
@click.option("--public", "public_cases", type=int, default=2, show_default=True, help="Public test cases per exercise")
@click.option("--private", "private_cases", type=int, default=2, show_default=True, help="Private test cases per exercise")
@click.option(
    "-l",
    "--language",
    type=click.Choice(list(LANGUAGE_ID_MAP)),
    default="Java",
    show_default=True,
    help="Solution language",
)
@click.option(
    "-v",
    "--visibility",
    type=click.Choice([v.value for v in Visibility]),
    default=Visibility.DRAFT.value,
    show_default=True,
)
@click.option("-p", "--prompt", help="Extra instructions for the generator")
@click.option("--debug", is_flag=True, default=False, help="Enable debug output")
def generate(
    topic: Optional[str],
    levels: Tuple[str, ...],
    count: int,
    public_cases: int,
    private_cases: int,
    language: str,
    visibility: str,
    prompt: Optional[str],
    debug: bool,
):
    """Generate exercise drafts with AI."""
    workflow = _open(debug)
    if workflow is None:
        return

    if workflow.step == Step.PREVIEW:
        if not click.confirm(
            f"Discard the {len(workflow.drafts)} unsaved exercises in the current preview?"
        ):
            return
        workflow.back()
        _save_workflow(workflow)

    if topic is None:
        try:
            items = workflow.client.get_topics()
        except ExgenError as e:
            console.print(f"[red]{e}[/red]")
            return
        if not items:
            console.print("[red]No topics found.[/red]")
            return
        table = create_table("Topics", ["#", "Name"])
        for idx, item in enumerate(items):
            table.add_row(str(idx), item.name)
        console.print(table)
        idx = choose_index("Select topic", items)
        if idx is None:
            return
        topic = items[idx].id

    request = GenerationRequest(
        topic=topic,
        levels=list(levels),
        number_of_exercise=count,
        number_of_public_test_cases=public_cases,
        number_of_private_test_cases=private_cases,
        solution_language=language,
        visibility=visibility,
        prompt=prompt,
    )
    console.print(
        f"[cyan]Generating {count} exercises with "
        f"{request.total_test_cases_per_exercise} test cases each...[/cyan]"
    )

    try:
        with console.status("[bold green]Generating..."):
            drafts = workflow.generate(request)
    except ExgenError as e:
        console.print(f"[red]{e}[/red]")
        return

    if drafts:
        _save_workflow(workflow)
        _print_drafts(workflow)


@cli.command(name="list")
def list_drafts():
    """List the drafts of the current preview."""
    workflow = _open_preview()
    if workflow is None:
        return
    if not workflow.drafts:
        console.print("[yellow]The preview is empty. Use 'exgen back' to start over.[/yellow]")
        return
    _print_drafts(workflow)


@cli.command()
@click.argument("index", type=int, required=False)
def show(index: Optional[int]):
    """Show one draft in full (default: the active one)."""
    workflow = _open_preview()
    if workflow is None:
        return
    if not workflow.drafts:
        console.print("[yellow]The preview is empty.[/yellow]")
        return

    if index is None:
        index = workflow.active_index
    if not 0 <= index < len(workflow.drafts):
        console.print(f"[red]Invalid exercise index: {index}[/red]")
        return

    draft = workflow.drafts[index]
    console.print(f"\n[bold cyan]{index}. {escape(draft.title or 'Untitled')}[/bold cyan] ({escape(draft.code)})")
    console.print(f"[bold]Difficulty:[/bold] {draft.difficulty}")
    console.print(f"[bold]Visibility:[/bold] {draft.visibility or workflow.request.visibility}")
    console.print(f"[bold]Time limit:[/bold] {draft.time_limit}s")
    console.print(f"[bold]Memory:[/bold] {draft.memory} bytes")
    console.print(f"[bold]Topics:[/bold] {', '.join(draft.topic_ids) or workflow.request.topic}")
    console.print()
    console.print(draft.description, markup=False)
    if draft.solution:
        console.print(f"\n[bold]Solution ({draft.solution_language}):[/bold]")
        console.print(draft.solution, markup=False)

    table = create_table("Test cases", ["#", "Public", "Input", "Output", "Note"])
    for idx, test_case in enumerate(draft.test_cases):
        table.add_row(
            str(idx),
            "yes" if test_case.is_public else "no",
            shorten(test_case.input, 60),
            shorten(test_case.output, 60),
            shorten(test_case.note, 40),
        )
    console.print(table)


@cli.command()
@click.argument("index", type=int)
def select(index: int):
    """Make a draft the active one."""
    workflow = _open_preview()
    if workflow is None:
        return
    selected = workflow.select_active(index)
    _save_workflow(workflow)
    console.print(f"[green]Active exercise: {selected}[/green]")


@cli.command(name="set")
@click.argument("field")
@click.argument("value")
@click.option("-i", "--index", type=int, help="Draft index (default: active)")
def set_field(field: str, value: str, index: Optional[int]):
    """Replace one field of a draft (e.g. title, time_limit, topic_ids)."""
    workflow = _open_preview()
    if workflow is None:
        return

    index = workflow.active_index if index is None else index
    try:
        editor = workflow.begin_edit(index)
        editor.update_field(field, _coerce(field, value))
    except (IndexError, AttributeError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        return
    finally:
        workflow.end_edit()

    _save_workflow(workflow)
    console.print(f"[green]Updated {field} of exercise {index}[/green]")


@cli.group()
def testcase():
    """Edit the test cases of a draft."""
    pass


@testcase.command(name="add")
@click.option("-i", "--index", type=int, help="Draft index (default: active)")
@click.option("--input", "input_", default="", help="Test input")
@click.option("--output", default="", help="Expected output")
@click.option("--private", is_flag=True, default=False, help="Hide from students")
def testcase_add(index: Optional[int], input_: str, output: str, private: bool):
    """Append a test case."""
    workflow = _open_preview()
    if workflow is None:
        return

    index = workflow.active_index if index is None else index
    try:
        editor = workflow.editor(index)
    except IndexError as e:
        console.print(f"[red]{e}[/red]")
        return

    editor.add_test_case()
    position = len(editor.draft.test_cases) - 1
    editor.update_test_case(position, "input", input_)
    editor.update_test_case(position, "output", output)
    if private:
        editor.update_test_case(position, "is_public", False)

    _save_workflow(workflow)
    console.print(f"[green]Added test case {position} to exercise {index}[/green]")


@testcase.command(name="set")
@click.argument("position", type=int)
@click.argument("field")
@click.argument("value")
@click.option("-i", "--index", type=int, help="Draft index (default: active)")
def testcase_set(position: int, field: str, value: str, index: Optional[int]):
    """Replace one field of a test case (input, output, note, is_public)."""
    workflow = _open_preview()
    if workflow is None:
        return

    index = workflow.active_index if index is None else index
    try:
        workflow.editor(index).update_test_case(position, field, _coerce(field, value))
    except (IndexError, AttributeError) as e:
        console.print(f"[red]{e}[/red]")
        return

    _save_workflow(workflow)
    console.print(f"[green]Updated test case {position} of exercise {index}[/green]")


@testcase.command(name="delete")
@click.argument("position", type=int)
@click.option("-i", "--index", type=int, help="Draft index (default: active)")
def testcase_delete(position: int, index: Optional[int]):
    """Remove a test case."""
    workflow = _open_preview()
    if workflow is None:
        return

    index = workflow.active_index if index is None else index
    try:
        workflow.editor(index).delete_test_case(position)
    except IndexError as e:
        console.print(f"[red]{e}[/red]")
        return

    _save_workflow(workflow)
    console.print(f"[green]Deleted test case {position} of exercise {index}[/green]")


@cli.command()
@click.argument("index", type=int)
def delete(index: int):
    """Delete a draft, with a chance to undo."""
    workflow = _open_preview()
    if workflow is None:
        return

    try:
        entry = workflow.delete_draft(index)
    except IndexError as e:
        console.print(f"[red]{e}[/red]")
        return

    # The undo offer lasts until this prompt is dismissed
    if click.confirm("Undo?", default=False):
        workflow.undo_delete(entry)

    _save_workflow(workflow)


@cli.command()
@click.option("--debug", is_flag=True, default=False, help="Enable debug output")
def run(debug: bool):
    """Try the active draft's solution against its test cases on Judge0."""
    workflow = _open_preview(debug)
    if workflow is None:
        return

    notifier = workflow.notifier
    runner = JudgeRunner(
        Judge0Client(workflow.client.config.judge0_url),
        on_debug=notifier.debug,
    )

    draft = workflow.active_draft
    if draft is not None:
        console.print(
            f"[cyan]Running {len(draft.test_cases)} test cases of "
            f"'{draft.title or 'Untitled'}'...[/cyan]"
        )

    if debug:
        workflow.run_active(runner)
    else:
        with console.status("[bold green]Judging..."):
            workflow.run_active(runner)

    _print_run_results(workflow)


@cli.command()
@click.option("-a", "--all", "commit_all", is_flag=True, default=False, help="Create every draft")
@click.option("-i", "--index", type=int, help="Draft index (default: active)")
def commit(commit_all: bool, index: Optional[int]):
    """Create the active draft (or all drafts) on the platform."""
    workflow = _open_preview()
    if workflow is None:
        return

    if commit_all:
        result = workflow.commit_all()
    else:
        result = workflow.commit_one(index)

    if result.ok:
        _save_workflow(workflow)


@cli.command()
def back():
    """Discard the preview and return to the configure step."""
    workflow = _open()
    if workflow is None:
        return
    workflow.back()
    _save_workflow(workflow)
    console.print("[green]Preview discarded[/green]")


@cli.command()
def version():
    """Show version information."""
    console.print(f"[bold cyan]exgen_py[/bold cyan] version [green]{__version__}[/green]")
    console.print("CLI client for AI exercise generation on a coding-judge platform")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
