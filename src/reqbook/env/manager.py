"""Loads the environment files of a workspace and tracks the active one."""

import logging
from pathlib import Path

from .base import Environment
from .parser import DEFAULT_ENVIRONMENT, load_env_file

logger = logging.getLogger(__name__)

ENV_FILENAMES = (".env", ".env.local", ".env.development", ".env.production", ".env.test")


class EnvironmentManager:
    """Environments found in one workspace root.

    Each instance owns its own state; create one per workspace.
    """

    def __init__(self, root: Path):
        self.root = root
        self._environments: dict[str, Environment] = {}
        self._current: Environment | None = None

    def load(self) -> None:
        """Parse every known env file under the root. Bad files are skipped."""
        for filename in ENV_FILENAMES:
            path = self.root / filename
            if not path.is_file():
                continue
            try:
                result = load_env_file(path)
            except OSError as e:
                logger.error("Error reading %s: %s", filename, e)
                continue

            if not result.success:
                logger.error(
                    "Failed to parse %s: %s", filename, ", ".join(err.message for err in result.errors)
                )
                continue

            env = result.environment
            self._environments[env.name] = env
            logger.info("Loaded environment: %s from %s", env.name, filename)

        if self._environments:
            self._current = self._environments.get(DEFAULT_ENVIRONMENT) or next(
                iter(self._environments.values())
            )
            logger.info("Current environment: %s", self._current.name)
        else:
            logger.warning("No environment files found in %s", self.root)

    @property
    def current(self) -> Environment | None:
        return self._current

    @property
    def available(self) -> list[str]:
        return list(self._environments)

    def switch(self, name: str) -> bool:
        env = self._environments.get(name)
        if env is None:
            return False
        self._current = env
        logger.info("Switched to environment: %s", name)
        return True

    def get_variable(self, key: str) -> str | None:
        if self._current is None:
            return None
        return self._current.variables.get(key)

    def all_variables(self) -> dict[str, str]:
        if self._current is None:
            return {}
        return dict(self._current.variables)
