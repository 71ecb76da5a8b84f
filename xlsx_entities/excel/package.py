from __future__ import annotations

import io
import os
import zipfile
import zlib
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import IO, Union
from xml.etree import ElementTree as ET

"""Archive accessor for OOXML spreadsheet packages.

A package is a zip container holding XML parts (workbook, relationships,
shared strings, worksheets). ``open_package`` scopes the container handle so it
is released on every exit path; parts are looked up by their OPC part name
(case-insensitive, leading ``/`` optional).
"""

__all__ = [
    "MissingPart",
    "Package",
    "PackageCorrupt",
    "Source",
    "UNREADABLE_PART_ERRORS",
    "local_name",
    "open_package",
]

Source = Union[str, os.PathLike, bytes, bytearray, IO[bytes]]


class PackageCorrupt(Exception):
    """Raised when the source cannot be opened as a zip container."""


class MissingPart(Exception):
    """Raised when a part the caller requires is absent from the container."""


# Errors a damaged part raises while it is opened or parsed
UNREADABLE_PART_ERRORS = (ET.ParseError, zipfile.BadZipFile, zlib.error, EOFError, PackageCorrupt)


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on qualified tags."""
    return tag.rsplit("}", 1)[-1]


def _part_key(path: str) -> str:
    return path.lstrip("/").casefold()


class Package:
    """An opened spreadsheet container. Valid only inside ``open_package``."""

    def __init__(self, archive: zipfile.ZipFile, name: str) -> None:
        self._archive = archive
        self.name = name
        self._members = {_part_key(n): n for n in archive.namelist() if not n.endswith("/")}

    def part_names(self) -> list[str]:
        return sorted(self._members.values())

    def has_part(self, path: str) -> bool:
        return _part_key(path) in self._members

    def get_part(self, path: str) -> IO[bytes] | None:
        """Open a part for reading, or return None when it is absent."""
        member = self._members.get(_part_key(path))
        if member is None:
            return None
        try:
            return self._archive.open(member)
        except (zipfile.BadZipFile, NotImplementedError, RuntimeError) as e:
            raise PackageCorrupt(f"cannot read part '{path}' in {self.name}: {e}") from e

    def require_part(self, path: str) -> IO[bytes]:
        stream = self.get_part(path)
        if stream is None:
            raise MissingPart(f"part '{path}' not found in {self.name}")
        return stream

    def read_xml(self, path: str) -> ET.Element:
        """Parse a whole part into an element tree.

        Raises:
            MissingPart: the part is absent
            UNREADABLE_PART_ERRORS: the part is damaged or not well-formed XML
        """
        with self.require_part(path) as stream:
            return ET.parse(stream).getroot()


def _describe(source: Source) -> str:
    if isinstance(source, (bytes, bytearray)):
        return "<bytes>"
    if isinstance(source, (str, os.PathLike)):
        return Path(source).name
    return str(getattr(source, "name", "<stream>"))


@contextmanager
def open_package(source: Source) -> Iterator[Package]:
    """Open ``source`` as a zip container for the duration of the ``with`` block.

    Path sources are opened (and closed) here. Caller-supplied streams are left
    open; only the zip handle wrapped around them is released.

    Raises:
        PackageCorrupt: the source is not a readable zip container
    """
    name = _describe(source)
    with ExitStack() as stack:
        if isinstance(source, (bytes, bytearray)):
            fh: IO[bytes] = io.BytesIO(bytes(source))
        elif isinstance(source, (str, os.PathLike)):
            fh = stack.enter_context(Path(source).open("rb"))
        else:
            fh = source
        try:
            archive = zipfile.ZipFile(fh)
        except (zipfile.BadZipFile, EOFError, ValueError, OSError) as e:
            raise PackageCorrupt(f"cannot open package {name}: {e}") from e
        stack.enter_context(archive)
        yield Package(archive, name)
