"""
"Did you mean" lookup over sibling names.

Levenshtein distance with a two-row table; candidates within the threshold are
ranked by ascending distance, then alphabetically.
"""
import functools

DISTANCE = 2


@functools.lru_cache(maxsize=1024)
def levenshtein(source, target, /):
    """
    Return the edit distance between two strings.

    Insertions, deletions and substitutions all cost 1.

    >>> levenshtein("gett", "get")
    1
    """
    if len(source) < len(target):
        source, target = target, source
    if not target:
        return len(source)

    previous = list(range(len(target) + 1))
    for row, left in enumerate(source, 1):
        current = [row]
        for column, right in enumerate(target, 1):
            current.append(min(
                previous[column] + 1,
                current[column - 1] + 1,
                previous[column - 1] + (left != right),
            ))
        previous = current
    return previous[-1]


def suggest(name, candidates, /, distance=DISTANCE):
    """
    Return the candidates within `distance` edits of `name`.

    Exact matches are excluded; duplicates are reported once. The result is
    sorted by (distance, name) so the closest name comes first.
    """
    if not isinstance(distance, int) or distance < 0:
        raise ValueError("suggest() distance must be a non-negative integer")
    ranked = set()
    for candidate in candidates:
        if candidate == name:
            continue
        if (score := levenshtein(name, candidate)) <= distance:
            ranked.add((score, candidate))
    return [candidate for _, candidate in sorted(ranked)]


__all__ = (
    "levenshtein",
    "suggest",
)
