"""Path-list variable normalization.

Configuration scripts prepend their directories to list-valued variables without
checking whether they are already present, so repeated invocations keep growing
them until the environment block overflows. Deduplication keeps the first
occurrence of each entry so earlier entries keep shadowing later ones.
"""

from __future__ import annotations

PATH_LIST_VARIABLES = frozenset({"PATH", "INCLUDE", "LIB", "LIBPATH"})


def is_path_list_variable(name: str) -> bool:
    """Return whether a variable name (any case) holds a delimited path list."""

    return name.upper() in PATH_LIST_VARIABLES


def normalize(value: str, separator: str = ";") -> str:
    """Remove duplicate list entries, keeping first occurrences in original order."""

    entries = value.split(separator)
    return separator.join(dict.fromkeys(entries))
