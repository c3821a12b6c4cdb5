from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Generic, NamedTuple, TypeVar

from .logger import getLogger

T = TypeVar("T")

_logger = getLogger("concurrency")

DEFAULT_MAX_WORKERS = 8


class Outcome(NamedTuple, Generic[T]):
    index: int
    result: T | None
    error: BaseException | None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_with_concurrency(
    limit: int,
    tasks: Iterable[Callable[[], T]],
    task_callback: Callable[[Outcome[T]], object] | None = None,
) -> list[Outcome[T]]:
    """
    Runs the provided callables on at most ``limit`` worker threads.

    Returns one Outcome per task in submission order, whatever order the tasks
    finish in. A task that raises an ``Exception`` does not stop the others;
    its exception is recorded on its Outcome.

    ``task_callback`` receives each Outcome in completion order, once every
    task has finished. An exception from the callback propagates to the
    caller.
    """
    if limit < 1:
        raise ValueError(f"Concurrency limit must be at least 1, got {limit}")
    task_list = list(tasks)
    outcomes: list[Outcome[T] | None] = [None] * len(task_list)
    if not task_list:
        return []

    completed: list[Outcome[T]] = []
    with ThreadPoolExecutor(max_workers=min(limit, len(task_list))) as executor:
        futures = {executor.submit(task): index for index, task in enumerate(task_list)}
        for future in as_completed(futures):
            index = futures[future]
            error = future.exception()
            if error is not None:
                _logger.debug("Task %d failed: %r", index, error)
                outcome = Outcome(index, None, error)
            else:
                outcome = Outcome(index, future.result(), None)
            outcomes[index] = outcome
            completed.append(outcome)

    if task_callback:
        for outcome in completed:
            task_callback(outcome)

    return [outcome for outcome in outcomes if outcome is not None]
