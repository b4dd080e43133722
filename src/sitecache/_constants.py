"""Internal constants shared across the library."""

USER_AGENT = "sitecache/1"

VERSION_PATH = "/version.txt"
CACHE_PREFIX = "spw-v"
SHELL_PATH = "/index.html"
FORCE_CHECK_PARAM = "vcheck"
WS_PATH = "/__sitecache__/ws"

#: Headers that ask every intermediate cache to revalidate with the origin.
NO_CACHE_HEADERS: dict[str, str] = {
    "cache-control": "no-cache",
    "pragma": "no-cache",
}

#: Hop-by-hop headers that must not be copied between connections.
HOP_BY_HOP_HEADERS: frozenset[str] = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "content-length",
        "content-encoding",
    }
)
