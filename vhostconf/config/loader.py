"""
Configuration loader: read, parse and validate in one step.
"""

from pathlib import Path

from ..logging import get_logger
from .errors import ParseError, ValidationError
from .fs import FileSystem
from .parser import parse_config, parse_config_file
from .schema import Config
from .validator import ConfigValidator

logger = get_logger("config.loader")


class ConfigLoader:
    """
    Loads and validates configuration from files or strings.

    A load either returns a complete, validated Config or raises; the last
    good Config stays available in last_config so a caller reloading after
    a failure can keep serving it.

    Usage:
        loader = ConfigLoader()
        config = loader.load_file("conf/default.conf")
        # or
        config = loader.load_string(config_text, base_dir="/srv")
    """

    def __init__(self, fs: FileSystem | None = None):
        self.validator = ConfigValidator(fs)
        self.last_config: Config | None = None

    def _finish(self, config: Config, name: str, base_dir: str | Path | None, validate: bool) -> Config:
        if validate:
            try:
                self.validator.validate(config, str(base_dir) if base_dir is not None else None)
            except ValidationError as e:
                logger.debug(f"Validation of {name} failed: {e}")
                raise

        self.last_config = config
        logger.info(f"Loaded configuration from {name} ({len(config.servers)} server(s))")
        return config

    def load_file(
        self,
        path: str | Path,
        base_dir: str | Path | None = None,
        validate: bool = True,
    ) -> Config:
        """
        Load configuration from a file.

        Args:
            path: Path to the configuration file
            base_dir: Directory that plain relative server roots are joined under
            validate: Run the filesystem/port validation pass

        Returns:
            Parsed (and by default validated) Config

        Raises:
            OSError: If the file cannot be read
            ParseError: If the file is malformed
            ValidationError: If a port or path is invalid
        """
        try:
            config = parse_config_file(path)
        except ParseError as e:
            logger.debug(f"Parsing {path} failed: {e}")
            raise

        return self._finish(config, str(path), base_dir, validate)

    def load_string(
        self,
        source: str,
        filename: str = "<string>",
        base_dir: str | Path | None = None,
        validate: bool = True,
    ) -> Config:
        """
        Load configuration from a string.

        Args:
            source: Configuration source text
            filename: Name used in log messages
            base_dir: Directory that plain relative server roots are joined under
            validate: Run the filesystem/port validation pass

        Returns:
            Parsed (and by default validated) Config

        Raises:
            ParseError: If the source is malformed
            ValidationError: If a port or path is invalid
        """
        config = parse_config(source, filename)
        return self._finish(config, filename, base_dir, validate)


def load_config(path: str | Path, base_dir: str | Path | None = None) -> Config:
    """
    Convenience function to load and validate configuration from a file.

    Args:
        path: Path to the configuration file
        base_dir: Directory that plain relative server roots are joined under

    Returns:
        Validated Config object
    """
    return ConfigLoader().load_file(path, base_dir)
