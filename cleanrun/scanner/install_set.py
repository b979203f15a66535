"""Install set builder — turn require() specifiers into installable package names."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

# require('module').builtinModules as shipped by current Node.js releases.
# Sub-path built-ins (fs/promises, stream/web, ...) are covered by their
# top-level name since specifiers are normalized before the lookup.
NODE_BUILTINS: frozenset[str] = frozenset(
    {
        "_http_agent",
        "_http_client",
        "_http_common",
        "_http_incoming",
        "_http_outgoing",
        "_http_server",
        "_stream_duplex",
        "_stream_passthrough",
        "_stream_readable",
        "_stream_transform",
        "_stream_wrap",
        "_stream_writable",
        "_tls_common",
        "_tls_wrap",
        "assert",
        "async_hooks",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "constants",
        "crypto",
        "dgram",
        "diagnostics_channel",
        "dns",
        "domain",
        "events",
        "fs",
        "http",
        "http2",
        "https",
        "inspector",
        "module",
        "net",
        "os",
        "path",
        "perf_hooks",
        "process",
        "punycode",
        "querystring",
        "readline",
        "repl",
        "stream",
        "string_decoder",
        "sys",
        "timers",
        "tls",
        "trace_events",
        "tty",
        "url",
        "util",
        "v8",
        "vm",
        "wasi",
        "worker_threads",
        "zlib",
    }
)

# node:test, node:sqlite, ... only exist behind the scheme prefix
_NODE_SCHEME = "node:"

# install without touching package.json / package-lock.json
INSTALL_FLAGS = ("--no-save", "--no-package-lock")


class ImportKind(str, Enum):
    RELATIVE = "relative"
    ABSOLUTE = "absolute"
    SCOPED = "scoped"
    BARE = "bare"
    BUILTIN = "builtin"


def package_name(specifier: str) -> str:
    """Reduce an import specifier to the name npm installs.

    ``@scope/pkg/deep/path`` -> ``@scope/pkg``, ``pkg/sub`` -> ``pkg``.
    """
    parts = specifier.split("/")
    if specifier.startswith("@"):
        return "/".join(parts[:2])
    return parts[0]


def is_builtin(name: str) -> bool:
    return name.startswith(_NODE_SCHEME) or name in NODE_BUILTINS


def classify(specifier: str) -> ImportKind:
    if specifier.startswith("."):
        return ImportKind.RELATIVE
    if specifier.startswith("/"):
        return ImportKind.ABSOLUTE
    if is_builtin(package_name(specifier)):
        return ImportKind.BUILTIN
    if specifier.startswith("@"):
        return ImportKind.SCOPED
    return ImportKind.BARE


def install_command(packages: Iterable[str], npm: str = "npm") -> list[str]:
    """Build the installer argv for *packages* (deduplicated, sorted)."""
    return [npm, "install", *INSTALL_FLAGS, *sorted(set(packages))]
