"""Central configuration helper for the knowledge bridge."""

import logging
import os
from collections.abc import Mapping


class HelperConfig:
    """Central configuration helper. Reads all settings from environment variables.

    An explicit ``env`` mapping can be passed instead of the process environment,
    which keeps jobs and tests from depending on global state.
    """

    def __init__(self, logger: logging.Logger, env: Mapping[str, str] | None = None) -> None:
        self._logger = logger
        self._env = env

    def _read_raw(self, key: str) -> str | None:
        """Return the raw value for a key, treating empty strings as unset."""
        source = self._env if self._env is not None else os.environ
        raw = source.get(key.upper())
        if raw is None or not raw.strip():
            return None
        return raw.strip()

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Read a string setting.

        Args:
            key (str): Setting name (case-insensitive).
            default (str | None): Fallback value if the setting is not set.

        Returns:
            str: The resolved value.

        Raises:
            ValueError: If the setting is not set and no default is provided.
        """
        val = self._read_raw(key)
        if val is None and default is None:
            raise ValueError(f"Environment variable '{key.upper()}' is not set.")
        return val if val is not None else default

    def get_number_val(
        self,
        key: str,
        default: float | int | None = None,
        min_val: float | None = None,
        max_val: float | None = None,
    ) -> float | int:
        """Read a numeric setting, optionally bounded.

        Args:
            key (str): Setting name (case-insensitive).
            default (float | int | None): Fallback value if the setting is not set.
            min_val (float | None): Inclusive lower bound.
            max_val (float | None): Inclusive upper bound.

        Returns:
            float | int: The resolved numeric value.

        Raises:
            ValueError: If the setting is missing without default, not a number, or out of bounds.
        """
        raw = self._read_raw(key)
        if raw is None:
            if default is None:
                raise ValueError(f"Environment variable '{key.upper()}' is not set.")
            value = default
        else:
            try:
                value = int(raw) if "." not in raw else float(raw)
            except ValueError:
                raise ValueError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.")

        if min_val is not None and value < min_val:
            raise ValueError(f"Environment variable '{key.upper()}' must be >= {min_val}, got {value}.")
        if max_val is not None and value > max_val:
            raise ValueError(f"Environment variable '{key.upper()}' must be <= {max_val}, got {value}.")
        return value

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        """Read a boolean setting ("true", "1" and "yes" are truthy).

        Raises:
            ValueError: If the setting is not set and no default is provided.
        """
        raw = self._read_raw(key)
        if raw is None:
            if default is None:
                raise ValueError(f"Environment variable '{key.upper()}' is not set.")
            return default
        return raw.lower() in ("true", "1", "yes")

    def get_list_val(self, key: str, default: list[str] | None = None, separator: str = ",") -> list[str]:
        """Read a list setting in the form "[elem1,elem2,...]".

        Args:
            key (str): Setting name (case-insensitive).
            default (list[str] | None): Fallback value if the setting is not set.
            separator (str): The delimiter between elements.

        Returns:
            list[str]: The stripped, non-empty elements.

        Raises:
            ValueError: If the setting is missing without default or not wrapped in brackets.
        """
        raw_val = self._read_raw(key)
        if raw_val is None:
            if default is None:
                raise ValueError(f"Environment variable '{key.upper()}' is not set.")
            return default
        if not raw_val.startswith("[") or not raw_val.endswith("]"):
            raise ValueError(
                f"Environment variable '{key.upper()}' must be in the format "
                f"'[elem1{separator}elem2{separator}...]'. Got: '{raw_val}'"
            )
        return [v.strip() for v in raw_val[1:-1].split(separator) if v.strip()]

    def get_logger(self) -> logging.Logger:
        """Return the application logger.

        Returns:
            logging.Logger: The configured logger instance.
        """
        return self._logger
