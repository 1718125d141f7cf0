import re
from typing import List, Pattern

DEFAULT_FILTER_SEPARATOR = ";"

# Optional path segment, placed where "/**/" or "/*/" may collapse to "/".
OPTIONAL_SEGMENT = "{0,1}"

_FILTER_TOKEN = re.compile(r"\{0,1\}|\*|\?|[^*?{}]+|[{}]")


def compile_filter(pattern: str, case_sensitive: bool = False) -> Pattern:
    """
    Turns a glob-like class filter into a regular expression.

    ``**`` matches across path segments, ``*`` stays within one segment and
    ``?`` matches a single character. ``/**/`` and ``/*/`` may also match a
    single ``/``, so ``de/**/java`` accepts ``de/java``. Everything else is
    literal. The result is anchored at the end only and is meant to be
    used with ``search`` against slash-form class names.

    Args:
        pattern (str): The filter, e.g. ``**/internal/**``.
        case_sensitive (bool): Matching ignores case unless set.

    Returns:
        Pattern: The compiled expression.
    """
    pattern = pattern.replace("/**/", OPTIONAL_SEGMENT + "**/")
    pattern = pattern.replace("/*/", OPTIONAL_SEGMENT + "*/" + OPTIONAL_SEGMENT)

    tokens = _FILTER_TOKEN.findall(pattern)
    parts = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token == "*":
            if i + 1 < len(tokens) and tokens[i + 1] == "*":
                parts.append(".*")
                i += 1
            else:
                parts.append("[^/]*")
        elif token == "?":
            parts.append(".")
        elif token == OPTIONAL_SEGMENT:
            parts.append("/" + OPTIONAL_SEGMENT)
        else:
            parts.append(re.escape(token))
        i += 1

    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile("".join(parts) + "$", flags)


def split_filters(text: str, separator: str = DEFAULT_FILTER_SEPARATOR) -> List[str]:
    """Splits a separator-joined filter list, dropping blanks."""
    if not text: return []
    return [part.strip() for part in text.split(separator) if part.strip()]


def to_slash_name(class_name: str) -> str:
    """Dotted or internal class name to the slash form filters are written against."""
    return class_name.replace(".", "/")
