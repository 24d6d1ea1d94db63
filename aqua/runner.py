"""Host task runner.

Tasks register a body under a name. A body receives a ``done`` callback and
may kick off asynchronous pipelines with ``spawn``; the body signals
completion as soon as the pipeline is started, and the runner waits for
every spawned pipeline before it reports the invocation as finished.

Invocations of different tasks run concurrently on one event loop.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Coroutine, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from aqua.events import Reporter
from aqua.pipeline.stream import file_stream, pipe
from aqua.pipeline.structures import FileStream, TaskResult, TaskStatus, Transform
from aqua.utils.logging import logger

TaskBody = Callable[[Callable[[], None]], Any]


@dataclass
class RegisteredTask:
    name: str
    deps: list[str]
    body: TaskBody
    about: str | None = None


@dataclass
class _Invocation:
    spawned: list[asyncio.Task] = field(default_factory=list)


class TaskRunner:
    """Registry and scheduler for named tasks."""

    def __init__(self, root: str | Path = ".", reporter: Reporter | None = None):
        self.root = Path(root)
        self.reporter = reporter
        self.tasks: dict[str, RegisteredTask] = {}
        self._current: _Invocation | None = None

    # Registration

    def register_task(self, name: str, deps: Iterable[str], body: TaskBody, about: str | None = None) -> None:
        if name in self.tasks:
            raise ValueError(f"Task already registered: {name}")
        self.tasks[name] = RegisteredTask(name=name, deps=list(deps), body=body, about=about)
        logger.debug(f"Registered task {name}")

    # Stream capabilities used by task bodies

    def src(self, patterns: str | list[str] | tuple[str, ...], cwd: str | Path | None = None) -> FileStream:
        return file_stream(patterns, cwd if cwd is not None else self.root)

    async def pipe(self, stream: FileStream, *transforms: Transform) -> FileStream:
        return await pipe(stream, *transforms)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Start a pipeline that belongs to the task invocation currently running."""
        task = asyncio.ensure_future(coro)
        if self._current is not None:
            self._current.spawned.append(task)
        else:
            logger.warning("spawn() called outside of a task body; pipeline is not tracked")
        return task

    # Execution

    async def run_task(self, name: str, _started: dict[str, Awaitable[TaskResult]] | None = None) -> TaskResult:
        """Run a task after its dependencies; each task runs once per call tree."""
        if name not in self.tasks:
            raise KeyError(f"Unknown task: {name}")

        started = _started if _started is not None else {}
        task = self.tasks[name]

        for dep in task.deps:
            if dep not in started:
                started[dep] = asyncio.ensure_future(self.run_task(dep, started))
            await started[dep]

        return await self._invoke(task)

    async def _invoke(self, task: RegisteredTask) -> TaskResult:
        start = time.perf_counter()
        invocation = _Invocation()
        done_called = False

        def done() -> None:
            nonlocal done_called
            done_called = True

        # Bodies are synchronous: spawn() calls during this block belong to this invocation
        self._current = invocation
        try:
            task.body(done)
        except Exception as e:
            logger.opt(exception=True).error(f"Task {task.name} raised: {e}")
            self._report(e)
            return TaskResult(task.name, TaskStatus.FAILED, time.perf_counter() - start, str(e))
        finally:
            self._current = None

        if not done_called:
            logger.warning(f"Task {task.name} returned without signalling completion")

        error = None
        if invocation.spawned:
            results = await asyncio.gather(*invocation.spawned, return_exceptions=True)
            for result in results:
                if isinstance(result, BaseException):
                    logger.opt(exception=result).error(f"Pipeline for {task.name} crashed: {result}")
                    self._report(result)
                    error = str(result)

        status = TaskStatus.FAILED if error else TaskStatus.SUCCESS
        elapsed = time.perf_counter() - start
        logger.debug(f"Task {task.name} finished ({status.value}) in {elapsed:.2f}s")
        return TaskResult(task.name, status, elapsed, error)

    async def run_tasks(self, names: Iterable[str]) -> list[TaskResult]:
        """Run several tasks concurrently."""
        started: dict[str, Awaitable[TaskResult]] = {}
        for name in names:
            if name not in started:
                started[name] = asyncio.ensure_future(self.run_task(name, started))
        return list(await asyncio.gather(*started.values()))

    def _report(self, err: BaseException) -> None:
        if self.reporter is not None:
            self.reporter.error(err)

    def for_project(self, project_id: str, cwd: str | Path | None = None) -> "ProjectRunner":
        return ProjectRunner(self, project_id, cwd)


class ProjectRunner:
    """Project-scoped view of a TaskRunner.

    Task names and dependencies are namespaced as ``<project id>-<name>``
    and streams resolve relative to the project's directory.
    """

    def __init__(self, runner: TaskRunner, project_id: str, cwd: str | Path | None = None):
        self.runner = runner
        self.project_id = project_id
        self.root = Path(cwd) if cwd is not None else runner.root

    def task_name(self, name: str) -> str:
        return f"{self.project_id}-{name}"

    def register_task(self, name: str, deps: Iterable[str], body: TaskBody, about: str | None = None) -> None:
        self.runner.register_task(
            self.task_name(name), [self.task_name(d) for d in deps], body, about=about
        )

    def src(self, patterns: str | list[str] | tuple[str, ...], cwd: str | Path | None = None) -> FileStream:
        return self.runner.src(patterns, cwd if cwd is not None else self.root)

    async def pipe(self, stream: FileStream, *transforms: Transform) -> FileStream:
        return await self.runner.pipe(stream, *transforms)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        return self.runner.spawn(coro)
