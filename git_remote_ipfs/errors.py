# errors.py -- exceptions raised by git-remote-ipfs
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

"""Exception classes for git-remote-ipfs.

Every failure that ends the helper process is one of these. They are raised
where the problem is detected and travel up to the coordinator, which hands
the first one to :func:`git_remote_ipfs.cli.main`.
"""

import signal

from dulwich.errors import GitProtocolError

__all__ = [
    "FetchExhausted",
    "Interrupted",
    "MalformedHead",
    "MalformedManifest",
    "ProtocolViolation",
    "RemoteHelperError",
    "StoreError",
    "StoreNotFound",
    "StoreTransport",
    "UnresolvedHead",
    "UsageError",
]


class RemoteHelperError(Exception):
    """Base class for all git-remote-ipfs errors."""


class UsageError(RemoteHelperError):
    """The helper was invoked with bad arguments or environment."""


class ProtocolViolation(RemoteHelperError, GitProtocolError):
    """git sent a command line the helper does not understand."""

    def __init__(self, line: bytes, reason: str = "unexpected command") -> None:
        """Initialize a ProtocolViolation.

        Args:
            line: The offending input line, without its newline.
            reason: Short description of what is wrong with it.
        """
        self.line = line
        GitProtocolError.__init__(self, f"{reason}: {line!r}")


class StoreError(RemoteHelperError):
    """Reading from the object store failed."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class StoreNotFound(StoreError):
    """The object store has nothing at the requested path."""


class StoreTransport(StoreError):
    """The object store could not be reached or answered with an error."""


class MalformedManifest(RemoteHelperError):
    """A line of ``info/refs`` is not ``<oid>\\t<refname>``."""

    def __init__(self, line: bytes) -> None:
        self.line = line
        super().__init__(f"processing info/refs: malformed line {line!r}")


class MalformedHead(RemoteHelperError):
    """The HEAD file is not a symbolic ref."""

    def __init__(self, content: bytes) -> None:
        self.content = content
        super().__init__(f"illegal HEAD file: {content!r}")


class UnresolvedHead(RemoteHelperError):
    """HEAD points at a ref that is not listed in ``info/refs``."""

    def __init__(self, ref: bytes) -> None:
        self.ref = ref
        super().__init__(f"unknown HEAD reference {ref!r}")


class FetchExhausted(RemoteHelperError):
    """An object could be retrieved neither loose nor from a pack."""

    def __init__(self, oid: bytes, cause: Exception) -> None:
        """Initialize a FetchExhausted exception.

        Args:
            oid: Hex object id that was requested.
            cause: The error of the packed retrieval, which was tried last.
        """
        self.oid = oid
        self.cause = cause
        super().__init__(f"unable to fetch {oid.decode('ascii')}: {cause}")


class Interrupted(RemoteHelperError):
    """The process received a termination signal."""

    def __init__(self, signum: int) -> None:
        self.signum = signum
        try:
            name = signal.Signals(signum).name
        except ValueError:
            name = str(signum)
        super().__init__(f"interrupted by {name}")
