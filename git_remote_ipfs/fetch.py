# fetch.py -- Fetching objects of a repository published on IPFS
# Copyright (C) 2026 git-remote-ipfs contributors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# git-remote-ipfs is dual-licensed under the Apache License, Version 2.0 and
# the GNU General Public License as published by the Free Software Foundation;
# version 2.0 or (at your option) any later version. You can redistribute it
# and/or modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Retrieving git objects from the object store.

A published repository keeps its objects either loose, one zlib-compressed
file per object under ``objects/<xx>/<rest>``, or consolidated in packs under
``objects/pack`` (listed in ``objects/info/packs``, each with an index of
the objects it holds). Which representation
holds a given object is not known up front, so :meth:`ObjectFetcher.fetch_object`
asks for the loose object first and falls back to the packs when that fails
for any reason.
"""

import zlib
from collections.abc import Iterator
from io import BytesIO
from typing import Optional

from dulwich.errors import ChecksumMismatch, ObjectFormatException
from dulwich.objects import (
    S_ISGITLINK,
    Blob,
    Commit,
    ObjectID,
    ShaFile,
    Tag,
    Tree,
    hex_to_sha,
)
from dulwich.pack import PackIndex, load_pack_index_file

from . import log_utils
from .errors import FetchExhausted, StoreNotFound

__all__ = [
    "ObjectFetcher",
    "loose_object_path",
    "parse_info_packs",
    "parse_loose_object",
]

logger = log_utils.getLogger(__name__)

_TYPE_MAP = {
    b"blob": Blob.type_num,
    b"tree": Tree.type_num,
    b"commit": Commit.type_num,
    b"tag": Tag.type_num,
}


def loose_object_path(sha: ObjectID) -> tuple[str, str, str]:
    """Return the path parts of the loose object ``sha``."""
    hex_sha = sha.decode("ascii")
    return ("objects", hex_sha[:2], hex_sha[2:])


def parse_loose_object(sha: ObjectID, compressed: bytes) -> ShaFile:
    """Decode the contents of a loose object file.

    Args:
      sha: Object id the file was stored under
      compressed: Raw file contents
    Returns: The parsed object
    Raises:
      ObjectFormatException: if the file is not a valid loose object
      ChecksumMismatch: if the contents do not hash to ``sha``
    """
    try:
        decompressed = zlib.decompress(compressed)
    except zlib.error as e:
        raise ObjectFormatException(f"Invalid compressed object: {e}") from e

    header, sep, content = decompressed.partition(b"\x00")
    if not sep:
        raise ObjectFormatException("Invalid object header")
    parts = header.split(b" ", 1)
    if len(parts) != 2 or not parts[1].isdigit():
        raise ObjectFormatException("Invalid object header")
    obj_type, obj_size = parts
    if len(content) != int(obj_size):
        raise ObjectFormatException("Object size mismatch")
    try:
        type_num = _TYPE_MAP[obj_type]
    except KeyError as exc:
        raise ObjectFormatException(f"Unknown object type: {obj_type!r}") from exc

    obj = ShaFile.from_raw_string(type_num, content)
    if obj.id != sha:
        raise ChecksumMismatch(sha, obj.id)
    return obj


def parse_info_packs(data: bytes) -> list[str]:
    """Return the pack names (without extension) listed in ``objects/info/packs``."""
    packs = []
    for line in data.splitlines():
        if not line.startswith(b"P "):
            continue
        name = line[2:].decode("utf-8").strip().rsplit("/", 1)[-1]
        if name.endswith(".pack"):
            name = name[: -len(".pack")]
        packs.append(name)
    return packs


def _referenced_shas(obj: ShaFile) -> Iterator[ObjectID]:
    """Yield the ids of the objects ``obj`` refers to."""
    if isinstance(obj, Commit):
        yield obj.tree
        yield from obj.parents
    elif isinstance(obj, Tree):
        for _, mode, sha in obj.items():
            # Submodule commits live in another repository.
            if not S_ISGITLINK(mode):
                yield sha
    elif isinstance(obj, Tag):
        yield obj.object[1]


class ObjectFetcher:
    """Copies objects from the remote into the local object store."""

    def __init__(self, context) -> None:
        """Initialize an ObjectFetcher.

        Args:
          context: A :class:`git_remote_ipfs.remote.RemoteContext`
        """
        self.context = context
        self.object_store = context.object_store
        self._pack_names: Optional[list[str]] = None
        self._pack_indexes: dict[str, PackIndex] = {}
        # Indexes of the packs copied into the local object store.
        self._copied_packs: dict[str, PackIndex] = {}
        # Objects whose whole closure is known to be present locally.
        self._complete: set[ObjectID] = set()

    def fetch_loose(self, sha: ObjectID) -> ShaFile:
        """Retrieve ``sha`` as a loose object."""
        return parse_loose_object(sha, self.context.get(*loose_object_path(sha)))

    def _load_pack_names(self) -> list[str]:
        if self._pack_names is None:
            data = self.context.get("objects", "info", "packs")
            self._pack_names = parse_info_packs(data)
        return self._pack_names

    def _get_pack_index(self, name: str) -> PackIndex:
        """Get or fetch the index of the remote pack ``name``."""
        try:
            return self._pack_indexes[name]
        except KeyError:
            pass
        filename = f"{name}.idx"
        data = self.context.get("objects", "pack", filename)
        object_format = getattr(self.object_store, "object_format", None)
        if object_format is None:
            idx = load_pack_index_file(filename, BytesIO(data))
        else:
            idx = load_pack_index_file(filename, BytesIO(data), object_format)
        self._pack_indexes[name] = idx
        return idx

    def _copy_pack(self, name: str, idx: PackIndex) -> None:
        data = self.context.get("objects", "pack", f"{name}.pack")
        f, commit, abort = self.object_store.add_pack()
        try:
            f.write(data)
        except BaseException:
            abort()
            raise
        else:
            commit()
        self._copied_packs[name] = idx
        logger.info("copied pack %s (%d bytes)", name, len(data))

    def _in_copied_pack(self, sha: ObjectID) -> bool:
        binsha = hex_to_sha(sha)
        for idx in self._copied_packs.values():
            try:
                idx.object_offset(binsha)
            except KeyError:
                continue
            return True
        return False

    def fetch_packed(self, sha: ObjectID) -> ShaFile:
        """Retrieve ``sha`` by copying the remote pack that contains it.

        The pack indexes listed in ``objects/info/packs`` are fetched (once
        per process) to find the pack holding ``sha``; only that pack is
        copied into the local object store.

        Raises:
          StoreNotFound: if no pack contains the object
        """
        binsha = hex_to_sha(sha)
        for name in self._load_pack_names():
            idx = self._get_pack_index(name)
            try:
                idx.object_offset(binsha)
            except KeyError:
                continue
            if name not in self._copied_packs:
                self._copy_pack(name, idx)
            return self.object_store[sha]
        raise StoreNotFound(
            self.context.locator.join("objects", "pack"),
            f"object {sha.decode('ascii')} is not in any pack",
        )

    def fetch_object(self, sha: ObjectID) -> ShaFile:
        """Retrieve a single object, loose first and packed second.

        Raises:
          FetchExhausted: if neither representation could be retrieved; only
            the error of the packed attempt is kept
        """
        try:
            return self.fetch_loose(sha)
        except Exception as e:
            logger.debug("loose object %s unavailable: %s", sha.decode("ascii"), e)
        try:
            return self.fetch_packed(sha)
        except Exception as e:
            raise FetchExhausted(sha, e) from e

    def fetch(self, sha: ObjectID) -> int:
        """Copy ``sha`` and everything reachable from it into the local store.

        Objects the local store already had are taken to be complete and are
        not descended into. Objects that arrived in a copied pack are walked,
        as a pack need not contain everything its objects refer to.

        Returns: Number of objects retrieved
        Raises:
          FetchExhausted: if any of the objects cannot be retrieved
        """
        todo = [sha]
        seen: set[ObjectID] = set()
        count = 0
        while todo:
            sha = todo.pop()
            if sha in seen or sha in self._complete:
                continue
            seen.add(sha)
            if sha in self.object_store:
                if not self._in_copied_pack(sha):
                    continue
                obj = self.object_store[sha]
            else:
                obj = self.fetch_object(sha)
                if sha not in self.object_store:
                    self.object_store.add_object(obj)
                count += 1
            todo.extend(_referenced_shas(obj))
        self._complete.update(seen)
        logger.debug("fetched %d objects", count)
        return count
