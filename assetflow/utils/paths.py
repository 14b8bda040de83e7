"""
Glob path helpers shared by tasks and watchers.

Patterns are always handled in forward-slash form, which is what wcmatch
expects on every platform.
"""
import os
from typing import Iterator, List, Sequence, Union

from wcmatch import glob


GLOB_FLAGS = glob.GLOBSTAR | glob.EXTGLOB | glob.BRACE | glob.NEGATE

NEGATION_MARKER = "!"

_MAGIC_CHARS = set("*?[]{}()!+@")


def _to_forward_slashes(path: str) -> str:
    return path.replace("\\", "/")


def _join_one(base: str, pattern: str) -> str:
    if pattern.startswith(NEGATION_MARKER):
        joined = os.path.join(NEGATION_MARKER + base, pattern[1:])
    else:
        joined = os.path.join(base, pattern)
    return _to_forward_slashes(os.path.normpath(joined))


def path_join(base: str, patterns: Union[str, Sequence[str]]) -> Union[str, List[str]]:
    """
    Join a base directory with one glob pattern or an ordered list of them.

    A leading negation marker is moved in front of the base so the result
    is still a negated glob rooted at ``base``.

    Args:
        base: Directory the patterns are relative to
        patterns: A single pattern or a sequence of patterns

    Returns:
        A string for a single pattern, a list (same order) otherwise
    """
    base = str(base)
    if isinstance(patterns, str):
        return _join_one(base, patterns)
    return [_join_one(base, pattern) for pattern in patterns]


def as_pattern_list(patterns: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(patterns, str):
        return [patterns]
    return list(patterns)


def is_negated(pattern: str) -> bool:
    return pattern.startswith(NEGATION_MARKER)


def is_magic(segment: str) -> bool:
    return any(char in _MAGIC_CHARS for char in segment)


def glob_base(pattern: str) -> str:
    """
    Return the static directory prefix of a glob pattern.

    ``src/pug/**/*.pug`` gives ``src/pug``; a pattern without magic gives
    its parent directory.
    """
    pattern = _to_forward_slashes(pattern)
    if is_negated(pattern):
        pattern = pattern[1:]
    segments = pattern.split("/")
    static = []
    for segment in segments[:-1]:
        if is_magic(segment):
            break
        static.append(segment)
    if not static:
        return "/" if pattern.startswith("/") else "."
    base = "/".join(static)
    return base or "/"


def first_directory(pattern: str) -> str:
    """First path segment of a relative pattern, without negation marker"""
    pattern = _to_forward_slashes(pattern)
    if is_negated(pattern):
        pattern = pattern[1:]
    return pattern.split("/", 1)[0]


def matches(path: str, patterns: Union[str, Sequence[str]]) -> bool:
    """Check a forward-slash path against patterns, honouring negations"""
    return glob.globmatch(_to_forward_slashes(path), as_pattern_list(patterns), flags=GLOB_FLAGS)


def iter_matching_files(patterns: Union[str, Sequence[str]]) -> Iterator[str]:
    """
    Yield the files matching a resolved pattern list.

    Every positive pattern's static base directory is walked once; each
    candidate is then tested against the full list so negations apply to
    all positives. Paths are yielded sorted, in forward-slash form and
    without duplicates.
    """
    pattern_list = as_pattern_list(patterns)
    bases = []
    for pattern in pattern_list:
        if is_negated(pattern):
            continue
        base = glob_base(pattern)
        if base not in bases:
            bases.append(base)

    seen = set()
    for base in bases:
        if not os.path.isdir(base):
            continue
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames.sort()
            for filename in sorted(filenames):
                candidate = _to_forward_slashes(os.path.join(dirpath, filename))
                if base == ".":
                    candidate = candidate[2:] if candidate.startswith("./") else candidate
                if candidate in seen:
                    continue
                if matches(candidate, pattern_list):
                    seen.add(candidate)
                    yield candidate
