"""File streams and pipe composition.

A stage only starts once the previous stage has consumed its whole input,
so awaiting ``pipe`` gives the same ordering as waiting for a stream's
finish/end event.
"""

import glob
import os
from pathlib import Path

from aqua.utils.logging import logger

from .structures import FileStream, Transform

GLOB_CHARS = set("*?[")


def _is_glob(pattern: str) -> bool:
    return any(c in GLOB_CHARS for c in pattern)


def _normalize(path: str) -> str:
    return Path(os.path.normpath(path)).as_posix()


def resolve_patterns(patterns: list[str], cwd: Path) -> list[str]:
    """Resolve glob patterns to files, keeping pattern order.

    - Patterns prefixed with '!' remove earlier matches.
    - Duplicates keep their first position.
    - Literal paths that don't exist are dropped (with a debug log).
    - Entries are normalized ("./a.js" and "a.js" are the same file).
    """
    resolved: list[str] = []
    seen: set[str] = set()

    for pattern in patterns:
        if pattern.startswith("!"):
            excluded = {_normalize(m) for m in glob.glob(pattern[1:], root_dir=cwd, recursive=True)}
            excluded.add(_normalize(pattern[1:]))
            resolved = [f for f in resolved if f not in excluded]
            seen -= excluded
            continue

        if _is_glob(pattern):
            matches = sorted(_normalize(m) for m in glob.glob(pattern, root_dir=cwd, recursive=True))
        elif (cwd / pattern).exists():
            matches = [_normalize(pattern)]
        else:
            logger.debug(f"Pattern matched nothing: {pattern}")
            matches = []

        for match in matches:
            if match not in seen:
                seen.add(match)
                resolved.append(match)

    return resolved


def file_stream(patterns: str | list[str] | tuple[str, ...], cwd: str | Path = ".") -> FileStream:
    """Open a stream over the files matched by patterns."""
    if isinstance(patterns, str):
        patterns = [patterns]
    patterns = list(patterns)
    root = Path(cwd).resolve()
    return FileStream(patterns=patterns, files=resolve_patterns(patterns, root), cwd=root)


async def pipe(stream: FileStream, *transforms: Transform) -> FileStream:
    """Run stream through transforms in order; StageError stops the chain."""
    for transform in transforms:
        logger.debug(f"[{transform.name}] processing {len(stream.files)} files")
        stream = await transform.process(stream)
    return stream
