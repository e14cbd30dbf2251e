"""Project-wide constants."""

from os import getenv


def _env_bool(name: str, default: str | None = None) -> bool:
    """Return a boolean flag read from the environment."""

    value = getenv(name)
    if value is None:
        value = default if default is not None else "0"
    value = str(value).strip().lower()
    return value not in {"0", "false", "no", "off", ""}


def _env_str(name: str, default: str) -> str:
    """Return a stripped string read from the environment."""

    raw = getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    return str(raw).strip()


# Log every extracted field (``[TRACE UBL]`` lines at WARNING level).
TRACE = _env_bool("EINV_TRACE", "0")

# Level used by the CLI when it configures logging.
LOG_LEVEL = _env_str("EINV_LOG_LEVEL", "INFO").upper()

# Emit ``UnknownPresetWarning`` for unrecognised ``CustomizationID`` values.
WARN_UNKNOWN_PRESET = _env_bool("EINV_WARN_UNKNOWN_PRESET", "1")
