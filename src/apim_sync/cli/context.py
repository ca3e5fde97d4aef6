"""
CLI context for APIM Sync.

This module provides the context object that is passed to all CLI commands,
holding the configuration and the sync coordinator built from it.
"""

from dataclasses import dataclass, field
from pathlib import Path

from apim_sync.client.exceptions import ConfigurationError
from apim_sync.config import SyncConfig, config_from_env, load_config_from_yaml
from apim_sync.migration.coordinator import SyncCoordinator
from apim_sync.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@dataclass
class SyncContext:
    """
    Context object for CLI commands.

    Attributes:
        config_path: Path to configuration file; the conventional environment
            variables are used when it is not given
        log_level: Logging level
        log_file: Optional log file path
    """

    config_path: Path | None = None
    log_level: str = "WARNING"
    log_file: Path | None = None

    # Lazy-loaded attributes
    _config: SyncConfig | None = field(default=None, init=False, repr=False)
    _coordinator: SyncCoordinator | None = field(default=None, init=False, repr=False)

    @property
    def config(self) -> SyncConfig:
        """Get or load the sync configuration."""
        if self._config is None:
            try:
                if self.config_path is not None:
                    logger.debug("config_loading", config_path=str(self.config_path))
                    self._config = load_config_from_yaml(self.config_path)
                else:
                    logger.debug("config_loading", source="environment")
                    self._config = config_from_env()
            except (FileNotFoundError, ValueError) as e:
                raise ConfigurationError(str(e)) from e

            # --log-file on the command line takes precedence
            logging_config = self._config.logging
            if self.log_file is None and logging_config.file:
                configure_logging(
                    level=self.log_level,
                    log_format=logging_config.format,
                    log_file=logging_config.file,
                    file_level=logging_config.file_level,
                )

        return self._config

    @property
    def coordinator(self) -> SyncCoordinator:
        """Get or create the sync coordinator."""
        if self._coordinator is None:
            self._coordinator = SyncCoordinator(self.config)

        return self._coordinator
