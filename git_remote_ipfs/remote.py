# remote.py -- Locating a repository inside IPFS
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

"""Repository locators and the per-process remote context."""

import posixpath
from dataclasses import dataclass
from urllib.parse import urlparse

from .errors import UsageError

__all__ = [
    "SCHEME",
    "RemoteContext",
    "RepositoryLocator",
    "parse_remote_url",
]

SCHEME = "ipfs"


@dataclass(frozen=True)
class RepositoryLocator:
    """Root of a repository snapshot inside the object store.

    Attributes:
        root: Content hash the repository is published under.
        path: Sub-path of the repository below ``root`` (may be empty).
    """

    root: str
    path: str = ""

    @property
    def base(self) -> str:
        """Store path of the repository, e.g. ``/ipfs/<root>/repo.git``."""
        path = posixpath.join("/ipfs", self.root, self.path.lstrip("/"))
        return posixpath.normpath(path)

    def join(self, *parts: str) -> str:
        """Return the store path of ``parts`` inside the repository."""
        return posixpath.join(self.base, *parts)

    def __str__(self) -> str:
        return self.base


def parse_remote_url(url: str) -> RepositoryLocator:
    """Turn an ``ipfs://<hash>/<path>`` URL into a locator.

    Raises:
        UsageError: for any other scheme or a URL without a hash.
    """
    parsed = urlparse(url)
    if parsed.scheme != SCHEME:
        raise UsageError(f"only the {SCHEME} scheme is supported, got {url!r}")
    if not parsed.netloc:
        raise UsageError(f"missing content hash in {url!r}")
    return RepositoryLocator(parsed.netloc, parsed.path)


class RemoteContext:
    """Everything the protocol handlers need to serve one remote.

    Args:
        locator: Where the repository lives in the object store.
        client: Object store client; must provide ``cat(path) -> bytes``.
        object_store: dulwich object store of the local repository that
            fetched objects are written to.
    """

    def __init__(self, locator: RepositoryLocator, client, object_store) -> None:
        self.locator = locator
        self.client = client
        self.object_store = object_store

    def get(self, *parts: str) -> bytes:
        """Read the file at ``parts`` below the repository root."""
        return self.client.cat(self.locator.join(*parts))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.locator)!r})"
