"""Typer CLI for ACS."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Literal, NoReturn

import typer
from result import Err, Ok

from acs.config import Config
from acs.models.transcript import Message, ToolExecution, ToolStatus

app = typer.Typer(
    name="acs",
    help="Assistant Chat Session: rebuild and replay assistant session transcripts.",
    no_args_is_help=True,
)

CopilotDirOption = Annotated[
    Path | None,
    typer.Option("--copilot-dir", help="Path to the Copilot data directory"),
]

_STATUS_MARKERS = {
    ToolStatus.PENDING: "[..]",
    ToolStatus.SUCCEEDED: "[ok]",
    ToolStatus.FAILED: "[!!]",
}


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Assistant session transcript tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def replay(
    log_file: Annotated[Path, typer.Argument(help="JSONL event log", exists=True, dir_okay=False)],
    model: Annotated[
        str | None, typer.Option("--model", help="Model to assume when the log names none")
    ] = None,
) -> None:
    """Rebuild the transcript of a recorded event log and print it."""
    from acs.data.classifier import classify_log
    from acs.data.event_log import read_event_log
    from acs.services.reconstructor import reconstruct

    config = Config()
    transcript = reconstruct(
        classify_log(read_event_log(log_file)),
        session_id=log_file.stem,
        default_model=model,
        internal_tools=config.internal_tools,
    )
    for message in transcript.messages:
        _echo_message(message)
    if transcript.last_model:
        typer.echo(f"\nLast model: {transcript.last_model}")


@app.command()
def resume(
    session_id: Annotated[str, typer.Argument(help="Stored session id")],
    copilot_dir: CopilotDirOption = None,
) -> None:
    """Resume a stored session and print its transcript."""
    asyncio.run(_do_resume(_config(copilot_dir), session_id))


@app.command()
def stream(
    log_file: Annotated[Path, typer.Argument(help="JSONL event log", exists=True, dir_okay=False)],
) -> None:
    """Feed a recorded log through the live controller and print each UI update."""
    asyncio.run(_do_stream(Config(), log_file))


@app.command()
def sessions(copilot_dir: CopilotDirOption = None) -> None:
    """List stored sessions, recent ones first."""
    asyncio.run(_do_sessions(_config(copilot_dir)))


@app.command()
def models() -> None:
    """List the model ids the Copilot CLI accepts."""
    from acs.data.model_list import fetch_available_models

    match fetch_available_models(Config().model_list_command):
        case Ok(model_ids):
            for model_id in model_ids:
                typer.echo(model_id)
        case Err(message):
            _fail(message)


class EchoSink:
    """UI sink that prints every update as one line."""

    def open_message(self, message_id: str, role: Literal["user", "assistant"]) -> None:
        typer.echo(f"[open] {message_id} ({role})")

    def append_text(self, message_id: str, chunk: str) -> None:
        typer.echo(f"[delta] {chunk!r}")

    def set_full_text(self, message_id: str, text: str) -> None:
        typer.echo(f"[text] {text}")

    def stream_end(self, message_id: str) -> None:
        typer.echo(f"[end] {message_id}")

    def set_tool_status(self, message_id: str, execution: ToolExecution) -> None:
        typer.echo(f"[tool] {_format_tool(execution)}")

    def set_reasoning(self, message_id: str, text: str, complete: bool) -> None:
        if complete:
            typer.echo(f"[reasoning] {text}")

    def usage_update(self, tokens: int) -> None:
        typer.echo(f"[usage] {tokens} tokens")

    def generation_complete(self) -> None:
        typer.echo("[done]")

    def error(self, message: str) -> None:
        typer.echo(f"[error] {message}", err=True)

    def model_changed(self, model_id: str) -> None:
        typer.echo(f"[model] {model_id}")

    def transcript_ready(self, messages: list[Message]) -> None:
        for message in messages:
            _echo_message(message)


async def _do_resume(config: Config, session_id: str) -> None:
    from acs.services.container import ServiceContainer

    container = ServiceContainer.create(config, EchoSink())
    result = await container.chat_service.resume(session_id)
    if isinstance(result, Err):
        _fail(result.err_value)


async def _do_stream(config: Config, log_file: Path) -> None:
    from acs.data.replay import ReplayBackend
    from acs.data.store import SessionLogStore
    from acs.services.container import ServiceContainer

    backend = ReplayBackend.from_file(SessionLogStore(config), log_file)
    container = ServiceContainer.create(config, EchoSink(), backend)
    service = container.chat_service

    for prompt in backend.prompts:
        typer.echo(f"> {prompt}")
        result = await service.send(prompt)
        if isinstance(result, Err):
            _fail(result.err_value)
        await service.pump()


async def _do_sessions(config: Config) -> None:
    from acs.services.container import ServiceContainer

    container = ServiceContainer.create(config, EchoSink())
    result = await container.chat_service.list_sessions()
    if isinstance(result, Err):
        _fail(result.err_value)

    groups = result.ok_value
    if not groups.recent and not groups.other:
        typer.echo(f"No sessions found in {config.session_state_dir}")
        return
    for title, group in (("Recent", groups.recent), ("Older", groups.other)):
        if not group:
            continue
        typer.echo(f"{title}:")
        for session in group:
            stamp = session.modified_time.strftime("%Y-%m-%d %H:%M")
            typer.echo(f"  {session.session_id}  {stamp}  {session.summary}")


def _config(copilot_dir: Path | None) -> Config:
    return Config(copilot_dir=copilot_dir or Path.home() / ".copilot")


def _echo_message(message: Message) -> None:
    header = f"[{message.role}]"
    if message.model:
        header = f"[{message.role} - {message.model}]"
    typer.echo(f"{header} {message.text}")
    for execution in message.tool_executions:
        typer.echo(f"    {_format_tool(execution)}")


def _format_tool(execution: ToolExecution) -> str:
    line = f"{_STATUS_MARKERS[execution.status]} {execution.label}"
    if execution.detail:
        line += f" ({execution.detail})"
    return line


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)
