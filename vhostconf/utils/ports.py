"""
Preflight check for listen endpoints already taken on this host.

Uses psutil.net_connections() to find sockets in LISTEN state.
"""

from collections.abc import Iterable
from dataclasses import dataclass

import psutil

from ..config.schema import ListenEntry
from ..logging import get_logger

logger = get_logger("utils.ports")

ANY_ADDRESSES = {"0.0.0.0", "::", ""}


@dataclass
class BusyListen:
    """A configured listen entry that clashes with an existing listening socket."""
    listen: ListenEntry
    address: str
    pid: int | None = None

    def __str__(self) -> str:
        owner = f"pid {self.pid}" if self.pid is not None else "unknown process"
        return f"{self.listen} already bound at {self.address}:{self.listen.port} by {owner}"


def _listening_sockets() -> list[tuple[str, int, int | None]]:
    """Return (ip, port, pid) of every local socket in LISTEN state."""
    try:
        connections = psutil.net_connections(kind="inet")
    except psutil.AccessDenied:
        logger.warning("Not allowed to inspect network connections, skipping port check")
        return []

    sockets = []
    for conn in connections:
        if conn.status != psutil.CONN_LISTEN or not conn.laddr:
            continue
        sockets.append((conn.laddr.ip, conn.laddr.port, conn.pid))
    return sockets


def _overlaps(host: str, ip: str) -> bool:
    return host == ip or host in ANY_ADDRESSES or ip in ANY_ADDRESSES


def find_busy_listens(listens: Iterable[ListenEntry]) -> list[BusyListen]:
    """
    Find listen entries whose port is already in use.

    An entry clashes with a listening socket on the same port when the
    addresses are equal or either side is a wildcard address.

    Args:
        listens: Listen entries, typically Config.collect_all_listens()

    Returns:
        One BusyListen per clashing entry, in input order
    """
    sockets = _listening_sockets()
    busy = []
    for listen in listens:
        for ip, port, pid in sockets:
            if port == listen.port and _overlaps(listen.host, ip):
                busy.append(BusyListen(listen, ip, pid))
                break
    return busy
