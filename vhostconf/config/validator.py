"""
Post-parse validation of a configuration tree.

Checks listen ports and resolves every configured path (server roots,
error pages, location roots, upload stores) against the filesystem.
Validation stops at the first problem found.
"""

from ..const import MAX_PORT, MIN_PORT
from ..logging import get_logger
from .errors import ValidationError
from .fs import FileSystem, LocalFileSystem
from .schema import Config, LocationBlock, ServerBlock

logger = get_logger("config.validator")


def is_valid_port(port: int) -> bool:
    return MIN_PORT <= port <= MAX_PORT


def join_path(base: str, path: str) -> str:
    """Join two path fragments with exactly the separator they need."""
    if not base:
        return path
    if not path:
        return base
    if base.endswith("/"):
        return base + path
    return f"{base}/{path}"


def strip_leading_slash(path: str) -> str:
    return path[1:] if path.startswith("/") else path


def normalize_root(base: str, root: str) -> str:
    """
    Resolve a configured path against a base directory.

    Absolute paths ("/...") and explicitly relative ones ("./...", "../...")
    are returned unchanged, as is everything when there is no base. Other
    paths are joined under the base.

    Examples:
        normalize_root("/srv", "www")     -> "/srv/www"
        normalize_root("/srv", "./www")   -> "./www"
        normalize_root("", "www")         -> "www"
    """
    if not base:
        return root
    if root.startswith(("/", "./", "../")):
        return root
    return join_path(base, root)


class ConfigValidator:
    """
    Validates a parsed Config against the filesystem.

    Usage:
        validator = ConfigValidator()
        validator.validate(config, base_dir="/etc/webserv")
    """

    def __init__(self, fs: FileSystem | None = None):
        self.fs = fs if fs is not None else LocalFileSystem()

    def _is_dir(self, path: str) -> bool:
        return self.fs.exists(path) and self.fs.is_dir(path)

    def _is_file(self, path: str) -> bool:
        return self.fs.exists(path) and self.fs.is_file(path)

    def validate(self, config: Config, base_dir: str | None = None) -> None:
        """
        Validate every server block in declaration order.

        Args:
            config: Parsed configuration
            base_dir: Directory that plain relative server roots are joined under

        Raises:
            ValidationError: On the first invalid port or path
        """
        if not config.servers:
            raise ValidationError("No servers defined in configuration")

        for index, server in enumerate(config.servers):
            self.validate_server(server, index, base_dir or "")

        logger.debug(f"Validated {len(config.servers)} server block(s)")

    def validate_server(self, server: ServerBlock, index: int, base_dir: str = "") -> None:
        """Validate listens, root, error pages and locations of one server."""
        if not server.listens:
            raise ValidationError(
                f"Server #{index}: no 'listen' directives", server_index=index
            )

        for listen in server.listens:
            if not is_valid_port(listen.port):
                raise ValidationError(
                    f"Server #{index}: invalid port {listen.port}", server_index=index
                )

        root = normalize_root(base_dir, server.root)
        if not root:
            raise ValidationError(f"Server #{index}: 'root' is empty", server_index=index)

        if not self._is_dir(root):
            raise ValidationError(
                f"Server #{index}: root directory not found or not a directory: {root}",
                server_index=index,
                path=root,
            )

        self._validate_error_pages(server, root, index)

        for location in server.locations:
            self._validate_location(location, root, index)

        logger.debug(f"Server #{index}: effective root {root}")

    def _validate_error_pages(self, server: ServerBlock, root: str, index: int) -> None:
        # Error page paths always live under the root, leading slash or not
        for code, page in sorted(server.error_pages.items()):
            path = join_path(root, strip_leading_slash(page))
            if not self._is_file(path):
                raise ValidationError(
                    f"Server #{index}: error_page {code} points to missing file: {path}",
                    server_index=index,
                    path=path,
                )

    def _validate_location(self, location: LocationBlock, server_root: str, index: int) -> None:
        prefix = location.path_prefix
        root = normalize_root(server_root, location.root) if location.root else server_root

        if not self._is_dir(root):
            raise ValidationError(
                f"Server #{index} location '{prefix}': root not found or not a directory: {root}",
                server_index=index,
                location=prefix,
                path=root,
            )

        if location.upload_store:
            store = normalize_root(root, location.upload_store)
            if not self._is_dir(store):
                raise ValidationError(
                    f"Server #{index} location '{prefix}': upload_store directory not found "
                    f"or not a directory: {store}",
                    server_index=index,
                    location=prefix,
                    path=store,
                )


def validate_config(
    config: Config,
    base_dir: str | None = None,
    fs: FileSystem | None = None,
) -> None:
    """
    Convenience function to validate a configuration.

    Args:
        config: Parsed configuration
        base_dir: Directory that plain relative server roots are joined under
        fs: Filesystem to probe (the real one if None)

    Raises:
        ValidationError: On the first invalid port or path
    """
    ConfigValidator(fs).validate(config, base_dir)
