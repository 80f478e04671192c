"""Discovery, scanning, build and search."""

from .builder import BuildProfile, IndexBuilder, WorldScanner
from .codec import (
    ENTRY_SEPARATOR,
    EntryFormatError,
    format_entry,
    is_representable,
    parse_entry,
    read_index_file,
    write_index_file,
)
from .scanner import scan_world
from .search import normalize_name, search_actor, search_actors
from .worlds import (
    MANIFEST_FILE_NAME,
    WorldDiscovery,
    WorldDiscoveryError,
    discover_worlds,
    list_worlds,
    read_manifest,
)

__all__ = [
    "BuildProfile",
    "ENTRY_SEPARATOR",
    "EntryFormatError",
    "IndexBuilder",
    "MANIFEST_FILE_NAME",
    "WorldDiscovery",
    "WorldDiscoveryError",
    "WorldScanner",
    "discover_worlds",
    "format_entry",
    "is_representable",
    "list_worlds",
    "normalize_name",
    "parse_entry",
    "read_index_file",
    "read_manifest",
    "scan_world",
    "search_actor",
    "search_actors",
    "write_index_file",
]
