"""Task result sink — diagnostics and the task-level status.

Messages are written as pipeline agent logging commands
(``##vso[task.logissue type=warning]...``) so that warnings and errors
surface on the run summary, mirrored to the ``logging`` module, and kept
in memory for the final report.

Once the status is set to ``Failed`` it stays ``Failed``: later
``Succeeded`` results never mask an earlier artifact failure.
"""

from __future__ import annotations

import logging
import sys
from typing import Protocol, TextIO, runtime_checkable

from refsync.models.reports import TaskStatus

logger = logging.getLogger(__name__)


@runtime_checkable
class TaskResultSink(Protocol):
    """Where the core reports diagnostics and the task result."""

    def debug(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def set_result(self, status: TaskStatus, message: str) -> None:
        ...


def _escape_data(value: str) -> str:
    return value.replace("%", "%AZP25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace("]", "%5D").replace(";", "%3B")


def format_command(command: str, message: str, **properties: str) -> str:
    """Render one logging command line.

    >>> format_command("task.logissue", "careful", type="warning")
    '##vso[task.logissue type=warning;]careful'
    """
    props = "".join(f"{k}={_escape_property(v)};" for k, v in properties.items())
    head = f"{command} {props}" if props else command
    return f"##vso[{head}]{_escape_data(message)}"


class PipelineResultSink:
    """Records diagnostics and writes them as agent logging commands.

    Parameters
    ----------
    stream:
        Where logging commands are written.  Defaults to ``sys.stdout``
        as it is at construction time.
    echo:
        Set to ``False`` to keep messages in memory only.
    """

    def __init__(self, stream: TextIO | None = None, *, echo: bool = True) -> None:
        self._stream = (stream or sys.stdout) if echo else None
        self.status: TaskStatus = TaskStatus.SUCCEEDED
        self.messages: list[tuple[str, str]] = []
        self.failures: list[str] = []

    @property
    def failed(self) -> bool:
        return self.status == TaskStatus.FAILED

    def debug(self, message: str) -> None:
        logger.debug(message)
        self._record("debug", message, format_command("task.debug", message))

    def warning(self, message: str) -> None:
        logger.warning(message)
        self._record(
            "warning",
            message,
            format_command("task.logissue", message, type="warning"),
        )

    def error(self, message: str) -> None:
        logger.error(message)
        self._record(
            "error",
            message,
            format_command("task.logissue", message, type="error"),
        )

    def set_result(self, status: TaskStatus, message: str) -> None:
        if status == TaskStatus.FAILED:
            self.status = TaskStatus.FAILED
            self.failures.append(message)
            logger.error("Task failed: %s", message)
        else:
            logger.info("Task result %s: %s", status.value, message)
        self._record(
            "result",
            message,
            format_command("task.complete", message, result=self.status.value),
        )

    def _record(self, level: str, message: str, line: str) -> None:
        self.messages.append((level, message))
        if self._stream is not None:
            self._stream.write(line + "\n")
            self._stream.flush()
