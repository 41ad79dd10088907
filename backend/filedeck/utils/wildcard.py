"""Shell-style wildcard matching for allow/deny lists and filters."""

from fnmatch import fnmatchcase


def matches(pattern: str, text: str, case_insensitive: bool = False) -> bool:
    """``*``, ``?`` and ``[...]`` wildcards over the whole name."""
    if case_insensitive:
        return fnmatchcase(text.lower(), pattern.lower())
    return fnmatchcase(text, pattern)


def matches_any(patterns: list[str], text: str, case_insensitive: bool = False) -> bool:
    return any(matches(p, text, case_insensitive) for p in patterns)
