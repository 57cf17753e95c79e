import logging
import os
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when the runtime environment does not satisfy the ops rules."""


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.

    Raises:
        ConfigurationError: If the data dir is unusable or env vars are missing
    """
    ops = rules.ops

    # 1. Data dir must exist (created on demand) and be writable
    if ops.data_dir_required:
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"Cannot create data dir {data_dir}: {e}") from e
        if not os.access(data_dir, os.W_OK):
            raise ConfigurationError(f"Data dir {data_dir} is not writable")

    # 2. Required env
    missing = [env_var for env_var in ops.required_env if env_var not in os.environ]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    logger.info("Configuration validated (data dir: %s)", data_dir)
