"""
Mapping of request paths onto a document root.
"""


def resolve_path(root: str, request_path: str) -> str:
    """
    Build the filesystem path a request path refers to under a root.

    Empty and "." segments are dropped and ".." removes the previous
    segment, never climbing above the root.

    Examples:
        resolve_path("/var/www", "/images/../css/.")    -> "/var/www/css"
        resolve_path("./www/site1", "/../../etc/passwd") -> "./www/site1/etc/passwd"
        resolve_path("/", "")                           -> ""

    Args:
        root: Effective root directory
        request_path: URL path of the request

    Returns:
        Normalized path under root

    Raises:
        ValueError: If root is empty
    """
    if not root:
        raise ValueError("resolve_path: root is empty")

    clean_root = root[:-1] if root.endswith("/") else root

    segments: list[str] = []
    for segment in request_path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
        else:
            segments.append(segment)

    return "".join([clean_root, *(f"/{segment}" for segment in segments)])
