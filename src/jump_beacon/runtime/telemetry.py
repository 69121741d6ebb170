"""Telelog-backed logging for the beacon plugin.

Output is described by a ``LogProfile``. Named presets cover the usual
cases; ``tui`` keeps the terminal clean for the Textual demo. Without a
preset the profile is read from ``JUMP_BEACON_*`` environment variables.

``configure(...)`` -- adopt a preset, a profile or a raw telelog config
``get_logger(name)`` -- cached logger bound to the active config
``record_event(name, ...)`` -- one structured ``event::<name>`` line
``span(name, ...)`` -- profile a block, optionally tracked as a component
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "JUMP_BEACON_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "jump_beacon")

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional[Any] = None
_ACTIVE_PROFILE: Optional["LogProfile"] = None


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class LogProfile:
    """Where log lines go and how they look."""

    name: str
    level: str = "INFO"
    console: bool = True
    colored: bool = True
    json: bool = False
    log_file: str = ""
    buffer_size: Optional[int] = None


PRESETS: Dict[str, LogProfile] = {
    "development": LogProfile("development", level="DEBUG"),
    # A TUI owns the terminal; only a file may receive its logs.
    "tui": LogProfile("tui", console=False, colored=False),
    "production": LogProfile(
        "production", console=False, log_file="jump_beacon.log", buffer_size=2048
    ),
    "performance": LogProfile(
        "performance",
        level="DEBUG",
        console=False,
        json=True,
        log_file="jump_beacon-performance.log",
        buffer_size=2048,
    ),
}


def preset_profile(preset: str) -> LogProfile:
    """Resolve ``preset``; ``JUMP_BEACON_LOG_FILE`` overrides its file."""

    try:
        profile = PRESETS[preset.lower()]
    except KeyError:
        known = ", ".join(sorted(PRESETS))
        raise ValueError(f"Unknown log preset '{preset}' (expected one of {known})") from None
    log_file = _env("LOG_FILE")
    return replace(profile, log_file=log_file) if log_file else profile


def env_profile() -> LogProfile:
    buffer_size = None
    if _env_flag("LOG_BUFFERED", False):
        buffer_size = int(_env("LOG_BUFFER_SIZE") or "2048")
    return LogProfile(
        "environment",
        level=(_env("LOG_LEVEL") or "INFO").upper(),
        console=not _env_flag("DISABLE_CONSOLE", False),
        colored=not _env_flag("NO_COLOR", False),
        json=_env_flag("LOG_JSON", False),
        log_file=_env("LOG_FILE") or "",
        buffer_size=buffer_size,
    )


def build_config(profile: LogProfile) -> Any:
    config = tl.Config()
    config.with_min_level(profile.level)
    config.with_console_output(profile.console)
    if profile.console:
        config.with_colored_output(profile.colored)
    if profile.json:
        config.with_json_format(True)
    if profile.log_file:
        config.with_file_output(profile.log_file)
    if profile.buffer_size:
        config.with_buffering(True)
        config.with_buffer_size(profile.buffer_size)
    config.with_profiling(True)
    return config


def configure(
    *,
    config: Optional[Any] = None,
    preset: Optional[str] = None,
    profile: Optional[LogProfile] = None,
) -> None:
    """Replace the active telelog configuration.

    At most one of ``config``, ``preset`` or ``profile`` may be given. With
    none, ``JUMP_BEACON_LOG_PRESET`` names a preset, else the profile comes
    from the environment. Cached loggers are dropped either way.
    """

    global _ACTIVE_CONFIG, _ACTIVE_PROFILE
    if sum(choice is not None for choice in (config, preset, profile)) > 1:
        raise ValueError("Provide only one of `config`, `preset` or `profile`.")

    if config is not None:
        config.with_profiling(True)
        _ACTIVE_PROFILE = None
    else:
        preset = preset or _env("LOG_PRESET")
        if profile is None:
            profile = preset_profile(preset) if preset else env_profile()
        config = build_config(profile)
        _ACTIVE_PROFILE = profile

    _ACTIVE_CONFIG = config
    _LOGGER_CACHE.clear()


def active_profile() -> Optional[LogProfile]:
    """Profile behind the active config; ``None`` for a raw telelog config."""

    _ensure_config()
    return _ACTIVE_PROFILE


def _ensure_config() -> Any:
    if _ACTIVE_CONFIG is None:
        configure()
    return _ACTIVE_CONFIG


def get_logger(name: Optional[str] = None) -> Any:
    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGER_CACHE:
        _LOGGER_CACHE[logger_name] = tl.Logger.with_config(
            logger_name, _ensure_config()
        )
    return _LOGGER_CACHE[logger_name]


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _level_method(logger: Any, level: Any) -> Tuple[Any, bool]:
    name = str(level).lower()
    with_attr = getattr(logger, f"{name}_with", None)
    if with_attr is not None:
        return with_attr, True
    attr = getattr(logger, name, None)
    if attr is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return attr, False


def _write(logger: Any, level: Any, message: str, payload: Dict[str, Any]) -> None:
    method, accepts_pairs = _level_method(logger, level)
    if accepts_pairs:
        method(message, [(str(key), _stringify(val)) for key, val in payload.items()])
    else:
        method(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str | Any = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit ``event::<name>`` with ``data`` attached as key/value pairs."""

    _write(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Yielded by ``span``; collects metadata reported on cancel or failure."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def fail(self, reason: str) -> None:
        self._report("error", "span::fail", reason)

    def cancel(self, reason: str | None = None) -> None:
        self._report("warning", "span::cancel", reason)

    def _report(self, level: str, message: str, reason: Optional[str]) -> None:
        payload: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        if reason:
            payload["reason"] = reason
        _write(self.logger, level, message, payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block under ``name``.

    ``component=True`` tracks the block as a component named ``name``; a
    string names the component. ``metadata`` is logger context for the
    duration of the block.
    """

    log = get_logger(logger_name)
    component_name = name if component is True else component or None
    context = {key: _stringify(value) for key, value in (metadata or {}).items()}

    with ExitStack() as stack:
        for key, value in context.items():
            log.add_context(key, value)
            stack.callback(log.remove_context, key)
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))

        handle = SpanHandle(log, name, component_name, dict(context))
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise


__all__ = [
    "LogProfile",
    "PRESETS",
    "SpanHandle",
    "active_profile",
    "build_config",
    "configure",
    "env_profile",
    "get_logger",
    "preset_profile",
    "record_event",
    "span",
]
