"""
Process-wide settings read from environment variables.

Recognized variables
--------------------
STRIDELITE_OOM_POLICY
    ``abort`` (default): an allocation failure prints a diagnostic to stderr
    and halts the process.
    ``raise``: an allocation failure raises `AllocationFailure` instead.
STRIDELITE_DEBUG
    Enables DEBUG-level tracing of storage lifecycle events (allocate,
    acquire, release, free). Off by default; the usual falsy spellings
    (``0``, empty, ``false``) keep it off.

Settings are loaded lazily on first use and cached. Tests use
`override_settings` to change them temporarily.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Mapping, Optional

_FALSY = ("0", "", "false", "False", "FALSE")


class OOMPolicy(Enum):
    """What the allocation entry point does when memory cannot be obtained."""

    ABORT = "abort"
    RAISE = "raise"


@dataclass(frozen=True)
class Settings:
    """
    Immutable snapshot of stridelite configuration.

    Attributes
    ----------
    oom_policy : OOMPolicy
        Out-of-memory policy used by the allocation entry point.
    debug : bool
        Whether storage lifecycle tracing is enabled.
    """

    oom_policy: OOMPolicy = OOMPolicy.ABORT
    debug: bool = False


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build `Settings` from an environment mapping.

    Parameters
    ----------
    environ : Mapping[str, str], optional
        Variables to read. Defaults to `os.environ`.

    Returns
    -------
    Settings
        Parsed settings.

    Raises
    ------
    ValueError
        If ``STRIDELITE_OOM_POLICY`` is set to an unknown value.
    """
    env = os.environ if environ is None else environ

    raw_policy = env.get("STRIDELITE_OOM_POLICY", OOMPolicy.ABORT.value).strip()
    try:
        policy = OOMPolicy(raw_policy.lower())
    except ValueError:
        choices = ", ".join(p.value for p in OOMPolicy)
        raise ValueError(
            f"Invalid STRIDELITE_OOM_POLICY {raw_policy!r}; expected one of: {choices}"
        ) from None

    debug = env.get("STRIDELITE_DEBUG", "0") not in _FALSY
    return Settings(oom_policy=policy, debug=debug)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the cached process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None


@contextmanager
def override_settings(**changes) -> Iterator[Settings]:
    """
    Temporarily replace fields of the process-wide settings.

    Examples
    --------
    >>> with override_settings(oom_policy=OOMPolicy.RAISE):
    ...     ...
    """
    global _settings
    previous = get_settings()
    _settings = replace(previous, **changes)
    try:
        yield _settings
    finally:
        _settings = previous
