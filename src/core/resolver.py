"""Module reference resolution (core domain).

Maps a ``require()`` reference to the canonical identity of an existing file.
Nothing is cached here; the loader caches on the resolved identity instead.
"""

from __future__ import annotations

import logging
import os
from typing import Iterator, Optional, Tuple

from core.errors import ResolutionError
from core.ports import FileSystemPort

LOGGER = logging.getLogger(__name__)

RELATIVE_PREFIXES = ("./", "../")


def canonical_identity(path: str) -> str:
    """Return the absolute, normalized form of a path used as a cache key."""

    return os.path.normpath(os.path.abspath(path))


def is_relative_reference(reference: str) -> bool:
    return reference.startswith(RELATIVE_PREFIXES)


class ModuleResolver:
    """Resolve references against one extension package.

    Relative references (``./x``, ``../x``) resolve against the issuing file's
    directory. Anything else resolves against the package root first and the
    shared module repository second.
    """

    def __init__(
        self,
        filesystem: FileSystemPort,
        package_root: str,
        repository_root: Optional[str] = None,
        suffixes: Tuple[str, ...] = (".js", ".ts", ".json"),
    ) -> None:
        self._filesystem = filesystem
        self.package_root = canonical_identity(package_root)
        self.repository_root = canonical_identity(repository_root) if repository_root else None
        self._suffixes = tuple(suffixes)

    def _search_roots(self, reference: str, issuer: Optional[str]) -> Iterator[str]:
        if is_relative_reference(reference):
            if issuer is None:
                yield self.package_root
            else:
                yield os.path.dirname(issuer)
            return
        yield self.package_root
        if self.repository_root:
            yield self.repository_root

    def candidates(self, reference: str) -> Tuple[str, ...]:
        """Return the file names to try for a reference, in order."""

        _, suffix = os.path.splitext(reference)
        if suffix in self._suffixes:
            return (reference,)
        return (reference,) + tuple(f"{reference}{candidate}" for candidate in self._suffixes)

    def resolve(self, reference: str, issuer: Optional[str] = None) -> str:
        """Return the canonical identity of the first existing candidate.

        Raises ResolutionError when no candidate exists under any search root.
        """

        if not reference:
            raise ResolutionError(reference, issuer)

        # Non-relative references are rooted at the package, never the filesystem.
        relative_name = reference if is_relative_reference(reference) else reference.lstrip("/")
        for root in self._search_roots(reference, issuer):
            for candidate in self.candidates(relative_name):
                path = canonical_identity(os.path.join(root, candidate))
                if self._filesystem.exists(path):
                    LOGGER.debug("Resolved %s from %s to %s", reference, issuer, path)
                    return path
        raise ResolutionError(reference, issuer)
