"""
Scoped environment variables for successive kernel builds.

Each apply() first unsets every variable the previous apply() set, then sets
the new ones. This keeps one build's custom flags from leaking into the next
build. Changes are best effort: a variable that cannot be set or unset is
logged and skipped.
"""

from __future__ import annotations

import os
import threading
from collections.abc import MutableMapping

from archinstall import debug, error, warn

from .errors import MalformedAssignmentError
from .utils import split_lines


def parse_assignments(text: str) -> tuple[list[tuple[str, str]], list[MalformedAssignmentError]]:
    """Parse newline separated NAME=VALUE records.

    Blank lines are skipped. The first '=' splits name from value, so values may
    contain '='. There is no quoting or escaping.

    Returns:
        The parsed (name, value) pairs in order, and one error per malformed line
    """
    assignments: list[tuple[str, str]] = []
    errors: list[MalformedAssignmentError] = []
    for number, line in split_lines(text):
        name, sep, value = line.partition("=")
        if not sep:
            errors.append(MalformedAssignmentError(number, line))
            continue
        assignments.append((name, value))
    return assignments, errors


class EnvironmentScope:
    """Tracks which variables it set so the next apply can undo them."""

    def __init__(self, environ: MutableMapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ
        self._previously_set: list[str] = []
        self._lock = threading.Lock()

    @property
    def previously_set(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._previously_set)

    def _unset_previous(self) -> None:
        for name in self._previously_set:
            try:
                self._environ.pop(name, None)
            except (ValueError, OSError) as e:
                error(f"Cannot unset environment variable {name}: {e}")
        self._previously_set = []

    def apply(self, text: str) -> list[str]:
        """Replace the previously applied variables with the ones in text.

        Args:
            text: NAME=VALUE lines

        Returns:
            Names of the variables that were set
        """
        assignments, errors = parse_assignments(text)
        with self._lock:
            self._unset_previous()
            for err in errors:
                warn(str(err))

            for name, value in assignments:
                try:
                    self._environ[name] = value
                except (ValueError, OSError) as e:
                    error(f"Cannot set environment variable {name!r}: {e}")
                    continue
                if name not in self._previously_set:
                    self._previously_set.append(name)

            debug(f"Build environment variables: {self._previously_set}")
            return list(self._previously_set)

    def clear(self) -> None:
        """Unset everything the last apply set."""
        self.apply("")


_global_scope: EnvironmentScope | None = None
_global_scope_lock = threading.Lock()


def get_environment_scope() -> EnvironmentScope:
    """Get the process-wide environment scope."""
    global _global_scope
    with _global_scope_lock:
        if _global_scope is None:
            _global_scope = EnvironmentScope()
        return _global_scope
