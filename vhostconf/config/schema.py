"""
Configuration model for virtual-server definitions.

The parser fills mutable builders (ServerBuilder, LocationBuilder) and
freezes them into the read-only dataclasses below. A Config is never
modified after construction and can be shared as a snapshot.

Blocks and Config compare by value but are not hashable: their maps are
read-only views, not hashable values.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..const import WILDCARD_ADDRESS


def _frozen_map(values: dict) -> Mapping:
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class ListenEntry:
    """One listening endpoint of a server block."""
    host: str = WILDCARD_ADDRESS
    port: int = 0

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class Redirect:
    """A `return` directive: status code and target (empty when omitted)."""
    code: str
    target: str = ""


@dataclass(frozen=True)
class LocationBlock:
    """
    A location block nested in a server.

    An empty root means the location inherits the server's root; an empty
    upload_store means uploads are not configured.
    """
    path_prefix: str
    root: str = ""
    methods: frozenset[str] = frozenset()
    autoindex: bool = False
    index_files: tuple[str, ...] = ()
    upload_store: str = ""
    cgi_map: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    redirect: Redirect | None = None

    __hash__ = None  # type: ignore[assignment]

    @property
    def has_redirect(self) -> bool:
        return self.redirect is not None


@dataclass(frozen=True)
class ServerBlock:
    """A server block: listen endpoints, document root, error pages and locations."""
    listens: tuple[ListenEntry, ...] = ()
    root: str = ""
    index_files: tuple[str, ...] = ()
    server_name: str = ""
    client_max_body_size: int = 0  # bytes, 0 = unset
    error_pages: Mapping[int, str] = field(default_factory=lambda: MappingProxyType({}))
    locations: tuple[LocationBlock, ...] = ()

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class Config:
    """Root of the configuration tree: all server blocks in declaration order."""
    servers: tuple[ServerBlock, ...] = ()

    __hash__ = None  # type: ignore[assignment]

    def collect_all_listens(self) -> list[ListenEntry]:
        """
        Flatten the listen entries of all servers.

        Returns:
            Listen entries in server-then-listen order
        """
        return [listen for server in self.servers for listen in server.listens]

    @property
    def listens(self) -> tuple[ListenEntry, ...]:
        return tuple(self.collect_all_listens())


@dataclass
class LocationBuilder:
    """Mutable state of a location block while its directives are parsed."""
    path_prefix: str
    root: str = ""
    methods: set[str] = field(default_factory=set)
    autoindex: bool = False
    index_files: list[str] = field(default_factory=list)
    upload_store: str = ""
    cgi_map: dict[str, str] = field(default_factory=dict)
    redirect: Redirect | None = None

    def build(self) -> LocationBlock:
        return LocationBlock(
            path_prefix=self.path_prefix,
            root=self.root,
            methods=frozenset(self.methods),
            autoindex=self.autoindex,
            index_files=tuple(self.index_files),
            upload_store=self.upload_store,
            cgi_map=_frozen_map(self.cgi_map),
            redirect=self.redirect,
        )


@dataclass
class ServerBuilder:
    """Mutable state of a server block while its directives are parsed."""
    listens: list[ListenEntry] = field(default_factory=list)
    root: str = ""
    index_files: list[str] = field(default_factory=list)
    server_name: str = ""
    client_max_body_size: int = 0
    error_pages: dict[int, str] = field(default_factory=dict)
    locations: list[LocationBlock] = field(default_factory=list)

    def build(self) -> ServerBlock:
        return ServerBlock(
            listens=tuple(self.listens),
            root=self.root,
            index_files=tuple(self.index_files),
            server_name=self.server_name,
            client_max_body_size=self.client_max_body_size,
            error_pages=_frozen_map(self.error_pages),
            locations=tuple(self.locations),
        )
