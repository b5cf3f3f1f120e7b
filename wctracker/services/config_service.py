"""Apply tracking option changes to a loaded configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from ..config import (
    SUPPORTED_OPTIONS,
    Config,
    coerce_interval,
    normalize_option_name,
    parse_clock_start,
)
from ..errors import ConfigValidationError
from ..text import Messages


@dataclass(slots=True)
class ConfigUpdateResult:
    interval_set: bool = False
    clock_start_set: bool = False
    rejected: list[ConfigValidationError] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return any((self.interval_set, self.clock_start_set))


def apply_config_updates(
    config: Config,
    options: Mapping[str, object] | None,
) -> ConfigUpdateResult:
    """Apply *options* to *config* in place and report what changed.

    Bad names and values never raise: each one is recorded in ``rejected``
    and the previous value stays in effect. ``None`` values are skipped so
    callers can pass unset CLI flags straight through.
    """

    result = ConfigUpdateResult()
    if not options:
        return result
    for raw_key, value in options.items():
        if value is None:
            continue
        key = normalize_option_name(raw_key)
        if key is None:
            result.rejected.append(
                ConfigValidationError(
                    raw_key,
                    value,
                    Messages.ERROR_OPTION_UNSUPPORTED.format(
                        key=raw_key, allowed=", ".join(SUPPORTED_OPTIONS)
                    ),
                )
            )
            continue
        try:
            if key == "interval":
                interval = coerce_interval(value)
                if interval != config.interval:
                    config.interval = interval
                    result.interval_set = True
            else:
                clock_start = parse_clock_start(value)
                if clock_start != config.clock_start:
                    config.clock_start = clock_start
                    result.clock_start_set = True
        except ValueError as exc:
            result.rejected.append(ConfigValidationError(key, value, str(exc)))
    return result
