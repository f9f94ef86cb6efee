# protocol.py -- The git remote helper protocol
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

"""The command loop of the git remote helper protocol.

git writes one command per line to the helper's standard input and reads
the answers from its standard output. See gitremote-helpers(7) for the
protocol. Only the ``fetch`` side is served:

================  ==================================================
``capabilities``  ``fetch`` and ``push``, then a blank line
``list ...``      ``<sha> HEAD``, ``<sha> <ref>`` per ref, blank line
``fetch <s> <n>`` copy ``<s>`` into the local repository, blank line
(empty line)      end of the batch: two blank lines, then stop
================  ==================================================

Anything else is a :class:`ProtocolViolation` and stops the loop.
"""

from typing import BinaryIO, Optional

from dulwich.objects import valid_hexsha

from . import log_utils
from .errors import ProtocolViolation
from .fetch import ObjectFetcher
from .refs import resolve_references

__all__ = [
    "CAPABILITIES",
    "RemoteHelper",
]

logger = log_utils.getLogger(__name__)

CAPABILITIES = [b"fetch", b"push"]


class RemoteHelper:
    """Serves the remote helper protocol for one remote."""

    def __init__(self, context, coordinator=None) -> None:
        """Initialize a RemoteHelper.

        Args:
          context: A :class:`git_remote_ipfs.remote.RemoteContext`
          coordinator: Optional :class:`git_remote_ipfs.coordinator.Coordinator`;
            once it holds a result no further commands are dispatched
        """
        self.context = context
        self.coordinator = coordinator
        self.fetcher = ObjectFetcher(context)
        self._wfile: Optional[BinaryIO] = None

    def _write_lines(self, *lines: bytes) -> None:
        assert self._wfile is not None
        for line in lines:
            logger.debug("git<< %r", line)
            self._wfile.write(line + b"\n")
        self._wfile.flush()

    def cmd_capabilities(self, line: bytes) -> None:
        self._write_lines(*CAPABILITIES, b"")

    def cmd_list(self, line: bytes) -> None:
        # Resolve everything before writing so a failure leaves no output.
        refs, head_sha = resolve_references(self.context)
        out = [head_sha + b" HEAD"]
        out.extend(sha + b" " + name for name, sha in refs.items())
        self._write_lines(*out, b"")

    def cmd_fetch(self, line: bytes) -> None:
        fields = line.split(b" ")
        if len(fields) != 3 or not valid_hexsha(fields[1]) or not fields[2]:
            raise ProtocolViolation(line, "malformed 'fetch' command")
        _, sha, name = fields
        logger.info("fetch %s %s", sha.decode("ascii"), name.decode("utf-8", "replace"))
        count = self.fetcher.fetch(sha)
        logger.info("fetched %s (%d objects)", sha.decode("ascii"), count)
        self._write_lines(b"")

    def cmd_end_of_batch(self, line: bytes) -> None:
        logger.debug("got empty line (end of fetch batch)")
        self._write_lines(b"", b"")

    def _lookup(self, line: bytes):
        if line == b"capabilities":
            return self.cmd_capabilities
        if line.startswith(b"list"):
            return self.cmd_list
        if line.startswith(b"fetch "):
            return self.cmd_fetch
        if line == b"":
            return self.cmd_end_of_batch
        return None

    def _cancelled(self) -> bool:
        return self.coordinator is not None and self.coordinator.done()

    def serve(self, rfile: BinaryIO, wfile: BinaryIO) -> None:
        """Process commands from ``rfile`` until the batch ends.

        Returns normally after an empty line or at end of input.

        Raises:
          ProtocolViolation: for a malformed or unknown command
          RemoteHelperError: if serving a command fails
        """
        self._wfile = wfile
        while not self._cancelled():
            raw = rfile.readline()
            if not raw:
                logger.info("end of input, leaving command loop")
                return
            line = raw.rstrip(b"\r\n")
            logger.debug("git>> %r", line)
            if self._cancelled():
                return
            handler = self._lookup(line)
            if handler is None:
                raise ProtocolViolation(line)
            handler(line)
            if handler == self.cmd_end_of_batch:
                return
