"""Channel-name normalization and edit distance."""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(name: str | None) -> str:
    """Lowercase and drop everything outside ``[a-z0-9]``."""
    if not name:
        return ""
    return _NON_ALNUM.sub("", name.lower())


def levenshtein(a: str, b: str) -> int:
    """Classic Levenshtein distance using a single rolling row."""
    if a == b:
        return 0
    # Keep the row over the shorter string
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    row = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        diagonal, row[0] = row[0], i
        for j, cb in enumerate(b, 1):
            above = row[j]
            row[j] = min(
                above + 1,
                row[j - 1] + 1,
                diagonal + (ca != cb),
            )
            diagonal = above
    return row[-1]


def is_similar(query: str, candidate: str, max_distance: int) -> bool:
    """Match two normalized names by containment either way or edit distance.

    An empty name never matches: it would contain-match everything and sit
    within edit distance of every short name. A distance that reaches the
    length of the shorter name rewrites it entirely and is not a near-match.
    """
    if not query or not candidate:
        return False
    if query in candidate or candidate in query:
        return True
    distance = levenshtein(query, candidate)
    return distance <= max_distance and distance < min(len(query), len(candidate))
