"""
Progress display helpers for BMK.

Everything here degrades to a no-op when stdout is not a terminal or
BMK_NO_PROGRESS is set, so output stays clean when piped.
"""
import os
import sys
from contextlib import contextmanager
from functools import wraps
from typing import Callable, Iterable, Optional

from rich.progress import Progress, SpinnerColumn, TextColumn, track


def progress_enabled(no_progress: bool = False) -> bool:
    if no_progress or os.environ.get("BMK_NO_PROGRESS"):
        return False
    return sys.stdout.isatty()


def track_progress(sequence: Iterable, description: str, no_progress: bool = False) -> Iterable:
    """
    Iterate ``sequence`` behind a transient progress bar.

    Unsized iterables are returned untouched since the bar needs a total.

    Example:
        for url in track_progress(urls, "Importing links"):
            ...
    """
    if not progress_enabled(no_progress) or not hasattr(sequence, "__len__"):
        return sequence
    return track(sequence, description=description, total=len(sequence), transient=True)


@contextmanager
def spinning(description: str):
    """Show an indeterminate spinner for the duration of the block."""
    if not progress_enabled():
        yield
        return

    columns = (SpinnerColumn(), TextColumn("[progress.description]{task.description}"))
    with Progress(*columns, transient=True) as progress:
        progress.add_task(description, total=None)
        yield


def spinner(description: Optional[str] = None) -> Callable:
    """
    Decorator form of :func:`spinning`.

    Without a description the function name is used, e.g. ``fetch_page``
    shows as "Fetch Page".
    """
    def decorator(func: Callable) -> Callable:
        label = description or func.__name__.replace("_", " ").title()

        @wraps(func)
        def wrapper(*args, **kwargs):
            with spinning(label):
                return func(*args, **kwargs)

        return wrapper
    return decorator
