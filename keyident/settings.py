import os
from dataclasses import dataclass, field

DEFAULT_MAX_INPUT_SIZE = 1024 * 1024


@dataclass(frozen=True)
class Settings:
    LOG_LEVEL: str = field(default="INFO")
    MAX_INPUT_SIZE: int = field(default=DEFAULT_MAX_INPUT_SIZE)

    @staticmethod
    def from_env() -> "Settings":
        log_level = os.getenv("KEYIDENT_LOG_LEVEL", "INFO").upper()
        try:
            max_size = int(os.getenv("KEYIDENT_MAX_INPUT_SIZE", str(DEFAULT_MAX_INPUT_SIZE)))
            if max_size <= 0:
                raise ValueError
        except ValueError:
            max_size = DEFAULT_MAX_INPUT_SIZE
        return Settings(LOG_LEVEL=log_level, MAX_INPUT_SIZE=max_size)
