# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run one compiler invocation and collect the diagnostics it reports."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import ClassVar, Final

from .config import Config
from .errors import CompilerOutputError, InvocationError, InvocationTimeoutError
from .logging import Notifier
from .models import Diagnostic, synthetic_region
from .parsers import JsonReportParser, LegacyReportParser, LineParser, ParseContext
from .project import ToolchainGeneration, detect_project_root_and_generation, is_test_file
from .severity import Severity

LOGGER = logging.getLogger(__name__)

IS_WINDOWS: Final[bool] = os.name == "nt"
REPORT_FLAGS: Final[tuple[str, ...]] = ("--report", "json")
# Compiler reports arrive as one JSON document per line and can be very long.
STREAM_LINE_LIMIT: Final[int] = 64 * 1024 * 1024
_CHUNK_SIZE: Final[int] = 64 * 1024

ProjectDetector = Callable[[str, str | None], tuple[Path, ToolchainGeneration]]
TestClassifier = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class PreparedCommand:
    """Command line selected for one invocation."""

    program: str
    args: tuple[str, ...]
    cwd: Path
    shell: bool = False

    @property
    def argv(self) -> tuple[str, ...]:
        """Return the program followed by its arguments, as passed to exec."""

        return (self.program, *self.args)

    def command_line(self) -> str:
        """Return the command joined into one string, as run through a shell."""

        program = f'"{self.program}"' if " " in self.program else self.program
        return " ".join((program, *self.args))

    def resolved(self) -> PreparedCommand:
        """Return a copy whose program is an absolute path.

        Raises:
            FileNotFoundError: If the program cannot be located.
        """

        program_path = Path(self.program).expanduser()
        if program_path.is_absolute():
            candidate: str | None = str(program_path) if program_path.exists() else None
        elif len(program_path.parts) > 1:
            candidate = shutil.which(str(self.cwd / program_path))
        else:
            candidate = shutil.which(self.program)
        if candidate is None:
            raise FileNotFoundError(f"Executable '{self.program}' was not found on PATH")
        return PreparedCommand(program=candidate, args=self.args, cwd=self.cwd, shell=self.shell)


@dataclass(frozen=True, slots=True)
class LegacyOutput:
    """Elm 0.18: JSON issue arrays on stdout, whole-project failures on stderr."""

    generation: ClassVar[ToolchainGeneration] = ToolchainGeneration.LEGACY
    parses_stderr: ClassVar[bool] = False
    collects_raw_stderr: ClassVar[bool] = True
    parser: LineParser = field(default_factory=LegacyReportParser)

    def program(self, config: Config, *, is_test: bool) -> str:
        return config.make_command

    def arguments(self, file_arg: str, config: Config) -> tuple[str, ...]:
        return (file_arg, *REPORT_FLAGS, "--output", config.null_device)


@dataclass(frozen=True, slots=True)
class JsonReportOutput:
    """Elm 0.19: one JSON report document per stderr line."""

    generation: ClassVar[ToolchainGeneration] = ToolchainGeneration.JSON_REPORT
    parses_stderr: ClassVar[bool] = True
    collects_raw_stderr: ClassVar[bool] = False
    parser: LineParser = field(default_factory=JsonReportParser)

    def program(self, config: Config, *, is_test: bool) -> str:
        return config.test_compiler if is_test else config.compiler

    def arguments(self, file_arg: str, config: Config) -> tuple[str, ...]:
        return ("make", file_arg, *REPORT_FLAGS, "--output", config.null_device)


OutputGeneration = LegacyOutput | JsonReportOutput


def output_for(generation: ToolchainGeneration) -> OutputGeneration:
    """Return the output variant handling ``generation``."""

    if generation is ToolchainGeneration.LEGACY:
        return LegacyOutput()
    return JsonReportOutput()


def prepare_command(
    file: str,
    output: OutputGeneration,
    *,
    cwd: Path,
    is_test: bool,
    config: Config,
    shell: bool = IS_WINDOWS,
) -> PreparedCommand:
    """Select program and arguments for compiling ``file``.

    Args:
        file: Source file handed to the compiler.
        output: Output variant for the detected toolchain generation.
        cwd: Project root the compiler runs in.
        is_test: Whether ``file`` belongs to the test suite.
        config: Commands and the null output device.
        shell: Run through the shell; the file argument is quoted so paths with
            spaces survive.

    Returns:
        PreparedCommand: The command, not yet resolved against ``PATH``.
    """

    file_arg = f'"{file}"' if shell else file
    return PreparedCommand(
        program=output.program(config, is_test=is_test),
        args=output.arguments(file_arg, config),
        cwd=cwd,
        shell=shell,
    )


@dataclass(frozen=True, slots=True)
class InvocationResult:
    """Outcome of one compiler invocation."""

    diagnostics: tuple[Diagnostic, ...]
    project_root: Path
    generation: ToolchainGeneration
    command: PreparedCommand
    compiler_missing: bool = False


class OutputCollector:
    """Route compiler output to the parser for the active generation."""

    def __init__(self, output: OutputGeneration, context: ParseContext) -> None:
        self._output = output
        self._context = context
        self.diagnostics: list[Diagnostic] = []
        self.raw_stderr: list[bytes] = []

    async def consume_lines(self, stream: asyncio.StreamReader) -> None:
        """Parse ``stream`` line by line until EOF."""

        while True:
            try:
                raw = await stream.readline()
            except ValueError as exc:
                raise CompilerOutputError(f"Compiler output line too long: {exc}", line="") from exc
            if not raw:
                return
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            self.diagnostics.extend(self._output.parser.parse_line(line, self._context))

    async def collect_raw(self, stream: asyncio.StreamReader) -> None:
        """Accumulate ``stream`` verbatim, in arrival order."""

        while chunk := await stream.read(_CHUNK_SIZE):
            self.raw_stderr.append(chunk)

    @staticmethod
    async def drain(stream: asyncio.StreamReader) -> None:
        """Discard ``stream`` so the process never blocks on a full pipe."""

        while await stream.read(_CHUNK_SIZE):
            pass

    def whole_project_failure(self) -> Diagnostic | None:
        """Return the diagnostic built from raw stderr, if any was written."""

        if not self.raw_stderr:
            return None
        return Diagnostic(
            tag="error",
            overview="",
            subregion="",
            details=b"".join(self.raw_stderr).decode("utf-8", errors="replace"),
            region=synthetic_region(),
            type=Severity.ERROR.value,
            file=self._context.target_file,
        )


async def _spawn(command: PreparedCommand) -> asyncio.subprocess.Process:
    pipes = {
        "stdin": asyncio.subprocess.DEVNULL,
        "stdout": asyncio.subprocess.PIPE,
        "stderr": asyncio.subprocess.PIPE,
        "cwd": str(command.cwd),
        "limit": STREAM_LINE_LIMIT,
    }
    if command.shell:
        return await asyncio.create_subprocess_shell(command.command_line(), **pipes)
    return await asyncio.create_subprocess_exec(*command.argv, **pipes)


@asynccontextmanager
async def supervised(process: asyncio.subprocess.Process) -> AsyncIterator[list[asyncio.Task[None]]]:
    """Own ``process`` and its reader tasks until every one has finished.

    The yielded list collects reader tasks. On exit, on any path, unfinished
    readers are cancelled and a process still running is killed and reaped.
    """

    readers: list[asyncio.Task[None]] = []
    try:
        yield readers
    finally:
        for task in readers:
            task.cancel()
        await asyncio.gather(*readers, return_exceptions=True)
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()


class CompilerInvocation:
    """Run the compiler once for a file and resolve its diagnostics.

    Args:
        file: Source file that was saved.
        workspace_root: Fallback root when the file belongs to no Elm project.
        config: Commands, null device and the optional timeout.
        notifier: Receives the message shown when the compiler is missing.
        detect: Project root and toolchain generation detector.
        classify: Test-file classifier; defaults to checking for a ``tests``
            directory below the detected project root.
    """

    def __init__(
        self,
        file: str | Path,
        *,
        workspace_root: str | Path | None = None,
        config: Config | None = None,
        notifier: Notifier | None = None,
        detect: ProjectDetector = detect_project_root_and_generation,
        classify: TestClassifier | None = None,
    ) -> None:
        self.file = os.path.abspath(file)
        self.workspace_root = str(workspace_root) if workspace_root is not None else None
        self.config = config or Config()
        self._notifier = notifier
        self._detect = detect
        self._classify = classify

    def prepare(self) -> tuple[PreparedCommand, OutputGeneration]:
        """Detect the project and select the command without running it."""

        root, generation = self._detect(self.file, self.workspace_root)
        classify = self._classify or partial(is_test_file, project_root=root)
        output = output_for(generation)
        command = prepare_command(
            self.file,
            output,
            cwd=Path(root),
            is_test=classify(self.file),
            config=self.config,
        )
        return command, output

    async def run(self) -> InvocationResult:
        """Run the compiler and return its diagnostics.

        Returns:
            InvocationResult: Diagnostics in arrival order. When the legacy
            compiler wrote anything to stderr the result is a single
            whole-project diagnostic instead. A missing compiler yields an
            empty result after notifying the user.

        Raises:
            CompilerOutputError: If a line of output cannot be parsed.
            InvocationError: If the process cannot be started.
            InvocationTimeoutError: If the configured timeout elapses.
        """

        command, output = self.prepare()
        LOGGER.debug("command=%s cwd=%s generation=%s", command.command_line(), command.cwd, output.generation.value)
        try:
            process = await _spawn(command.resolved())
        except FileNotFoundError:
            return self._compiler_missing(command, output)
        except OSError as exc:
            raise InvocationError(f"Unable to start '{command.program}': {exc}", command=command.argv) from exc

        collector = OutputCollector(output, ParseContext(target_file=self.file))
        async with supervised(process) as readers:
            parsed, other = (process.stderr, process.stdout) if output.parses_stderr else (process.stdout, process.stderr)
            assert parsed is not None and other is not None
            readers.append(asyncio.create_task(collector.consume_lines(parsed)))
            if output.collects_raw_stderr:
                readers.append(asyncio.create_task(collector.collect_raw(other)))
            else:
                readers.append(asyncio.create_task(collector.drain(other)))
            try:
                returncode = await asyncio.wait_for(self._finish(process, readers), self.config.timeout)
            except asyncio.TimeoutError as exc:
                raise InvocationTimeoutError(command.argv, self.config.timeout or 0.0) from exc

        # The exit status is informational; only reported problems count.
        LOGGER.debug("command=%s exited returncode=%s", command.program, returncode)
        failure = collector.whole_project_failure()
        diagnostics = (failure,) if failure is not None else tuple(collector.diagnostics)
        return InvocationResult(
            diagnostics=diagnostics,
            project_root=command.cwd,
            generation=output.generation,
            command=command,
        )

    @staticmethod
    async def _finish(process: asyncio.subprocess.Process, readers: Sequence[asyncio.Task[None]]) -> int:
        await asyncio.gather(*readers)
        return await process.wait()

    def _compiler_missing(self, command: PreparedCommand, output: OutputGeneration) -> InvocationResult:
        message = f"The elm compiler is not available ({command.program}). Install Elm from https://elm-lang.org."
        LOGGER.info(message)
        if self._notifier is not None:
            self._notifier.notify(message)
        return InvocationResult(
            diagnostics=(),
            project_root=command.cwd,
            generation=output.generation,
            command=command,
            compiler_missing=True,
        )


async def check_for_errors(
    file: str | Path,
    workspace_root: str | Path | None = None,
    config: Config | None = None,
    *,
    notifier: Notifier | None = None,
) -> list[Diagnostic]:
    """Compile ``file`` once and return the diagnostics it produced."""

    invocation = CompilerInvocation(file, workspace_root=workspace_root, config=config, notifier=notifier)
    result = await invocation.run()
    return list(result.diagnostics)


__all__ = [
    "CompilerInvocation",
    "InvocationResult",
    "JsonReportOutput",
    "LegacyOutput",
    "OutputCollector",
    "OutputGeneration",
    "PreparedCommand",
    "check_for_errors",
    "output_for",
    "prepare_command",
    "supervised",
]
