import logging
import os

from postlab.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when the environment does not satisfy the ops rules."""


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.
    """
    missing = [env_var for env_var in rules.ops.required_env if env_var not in os.environ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    if os.environ.get("POSTLAB_SECRET_KEY") is None:
        logger.warning("POSTLAB_SECRET_KEY is not set; using the development signing key")

    logger.info("Configuration validated.")
