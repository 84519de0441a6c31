"""File path helpers shared by the extractors."""

import re

# Build artifacts, dependencies, VCS and editor directories never stored as files
IGNORED_PATHS = (
    ".git",
    "node_modules",
    ".next",
    ".nuxt",
    "dist",
    "build",
    ".output",
    ".cache",
    ".turbo",
    ".parcel-cache",
    ".DS_Store",
    "Thumbs.db",
    ".idea",
    ".vscode",
)

JS_EXTENSIONS = frozenset({"ts", "tsx", "js", "jsx", "mjs", "cjs"})

_EXTENSION_RE = re.compile(r"\.[a-z0-9]+$", re.IGNORECASE)


def normalize_path(file_path: str) -> str:
    """Use forward slashes, collapse repeats and drop a trailing slash."""
    path = file_path.replace("\\", "/")
    path = re.sub(r"/+", "/", path)
    return path.rstrip("/")


def is_ignored_path(file_path: str) -> bool:
    """
    Check whether a path points into VCS, dependency or build output.

    Examples:
        is_ignored_path(".git/config") -> True
        is_ignored_path("node_modules/react/index.js") -> True
        is_ignored_path("src/App.tsx") -> False
    """
    path = normalize_path(file_path)
    return any(
        path == ignored
        or path.startswith(ignored + "/")
        or f"/{ignored}/" in path
        or path.endswith("/" + ignored)
        for ignored in IGNORED_PATHS
    )


def get_file_extension(file_path: str) -> str:
    """Lower-case extension without the dot, or "" when there is none."""
    path = normalize_path(file_path)
    last_dot = path.rfind(".")
    if last_dot == -1 or last_dot < path.rfind("/"):
        return ""
    return path[last_dot + 1 :].lower()


def looks_like_file_path(key: str) -> bool:
    """Heuristic for JSON keys: has an extension like ``.tsx`` or ``.css``."""
    return bool(_EXTENSION_RE.search(key))


def is_js_path(file_path: str) -> bool:
    """True for JavaScript/TypeScript sources."""
    return get_file_extension(file_path) in JS_EXTENSIONS
