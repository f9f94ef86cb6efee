# utils.py -- Utility functions common to git-remote-ipfs tests
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

"""Utility functions common to git-remote-ipfs tests."""

import os
import shutil
import tempfile
import zlib

from dulwich.objects import Blob, Commit, ShaFile, Tree
from dulwich.repo import Repo

from git_remote_ipfs.errors import StoreNotFound, StoreTransport
from git_remote_ipfs.fetch import loose_object_path
from git_remote_ipfs.remote import RemoteContext, RepositoryLocator

LOCATOR = RepositoryLocator("QmTestHash", "/repo.git")


class MemoryStoreClient:
    """Object store client serving files from a dict.

    Every path asked for is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.broken: set[str] = set()
        self.requests: list[str] = []

    def add(self, path: str, data: bytes, locator: RepositoryLocator = LOCATOR) -> None:
        self.files[locator.join(path)] = data

    def break_path(self, path: str, locator: RepositoryLocator = LOCATOR) -> None:
        self.broken.add(locator.join(path))

    def cat(self, path: str) -> bytes:
        self.requests.append(path)
        if path in self.broken:
            raise StoreTransport(path, "connection refused")
        try:
            return self.files[path]
        except KeyError:
            raise StoreNotFound(path, "no link named") from None


def make_loose_object(obj: ShaFile) -> bytes:
    """Return the contents of the loose object file for ``obj``."""
    content = obj.as_raw_string()
    header = obj.type_name + b" " + str(len(content)).encode("ascii") + b"\x00"
    return zlib.compress(header + content)


def add_loose(client: MemoryStoreClient, obj: ShaFile) -> None:
    client.add("/".join(loose_object_path(obj.id)), make_loose_object(obj))


def make_blob(data: bytes) -> Blob:
    return Blob.from_string(data)


def make_tree(entries) -> Tree:
    """Create a tree from (name, mode, sha) tuples."""
    tree = Tree()
    for name, mode, sha in entries:
        tree.add(name, mode, sha)
    return tree


def make_commit(tree: Tree, parents=(), message: bytes = b"Commit\n") -> Commit:
    commit = Commit()
    commit.tree = tree.id
    commit.parents = [p.id for p in parents]
    commit.author = commit.committer = b"Test Author <test@example.com>"
    commit.author_time = commit.commit_time = 1700000000
    commit.author_timezone = commit.commit_timezone = 0
    commit.message = message
    return commit


def make_pack(objects) -> tuple[bytes, bytes]:
    """Return the contents of a pack file holding ``objects`` and its index."""
    path = tempfile.mkdtemp()
    try:
        repo = Repo.init_bare(path)
        try:
            repo.object_store.add_objects([(obj, None) for obj in objects])
            pack_dir = repo.object_store.pack_dir
            (name,) = [n for n in os.listdir(pack_dir) if n.endswith(".pack")]
            basename = os.path.join(pack_dir, name[: -len(".pack")])
            with open(basename + ".pack", "rb") as f:
                pack_data = f.read()
            with open(basename + ".idx", "rb") as f:
                idx_data = f.read()
            return pack_data, idx_data
        finally:
            repo.close()
    finally:
        shutil.rmtree(path)


def open_temp_repo(testcase) -> Repo:
    """Create a bare repository that is removed after ``testcase``."""
    path = tempfile.mkdtemp()
    testcase.addCleanup(shutil.rmtree, path)
    repo = Repo.init_bare(path)
    testcase.addCleanup(repo.close)
    return repo


def make_context(testcase, client=None) -> RemoteContext:
    """Create a context for LOCATOR with a fresh local repository."""
    if client is None:
        client = MemoryStoreClient()
    repo = open_temp_repo(testcase)
    return RemoteContext(LOCATOR, client, repo.object_store)
