"""Process-wide options.

Call configure() once during application setup:

    bindx.configure(unsafe_bindings="warn")

Options:
- unsafe_bindings: what a one-way binding does when its target property is
  missing or has no declared type to check against. "error" raises, "warn"
  logs and then skips (missing) or binds unchecked, "ignore" does the same
  silently.
- strict_mode: when True, two-way bindings must declare a type or guard.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, fields, replace

UNSAFE_BINDING_MODES = ("error", "warn", "ignore")


@dataclass(frozen=True)
class Options:
    unsafe_bindings: str = "error"
    strict_mode: bool = True


_options = Options()


def options() -> Options:
    return _options


def configure(**changes) -> Options:
    """Update the global options. Unknown names or bad values raise ValueError."""
    global _options
    _options = _validated(replace(_options, **_checked_names(changes)))
    return _options


@contextmanager
def overrides(**changes):
    """Temporarily change options, e.g. inside a test:

        with overrides(strict_mode=False):
            ...
    """
    global _options
    previous = _options
    _options = _validated(replace(_options, **_checked_names(changes)))
    try:
        yield _options
    finally:
        _options = previous


def _checked_names(changes: dict) -> dict:
    known = {f.name for f in fields(Options)}
    unknown = set(changes) - known
    if unknown:
        raise ValueError(f"Unknown option(s): {', '.join(sorted(unknown))}")
    return changes


def _validated(opts: Options) -> Options:
    if opts.unsafe_bindings not in UNSAFE_BINDING_MODES:
        raise ValueError(
            f"unsafe_bindings must be one of {', '.join(UNSAFE_BINDING_MODES)}, "
            f"not {opts.unsafe_bindings!r}"
        )
    if not isinstance(opts.strict_mode, bool):
        raise ValueError(f"strict_mode must be a bool, not {opts.strict_mode!r}")
    return opts
