# ipfs.py -- Reading files through the IPFS HTTP API
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

"""Client for the HTTP API of an IPFS daemon.

Only ``cat`` is needed: the helper never writes to the store. There is no
caching and no retrying; every failure is reported straight away as either
:class:`StoreNotFound` or :class:`StoreTransport`.
"""

import json
from typing import Optional
from urllib.parse import quote

import urllib3
import urllib3.exceptions

from . import __version__, log_utils
from .config import DEFAULT_API_URL
from .errors import StoreNotFound, StoreTransport

__all__ = [
    "IPFSClient",
    "default_pool_manager",
    "default_user_agent_string",
]

logger = log_utils.getLogger(__name__)

# Fragments of daemon error messages that mean "there is nothing there"
# rather than "something went wrong".
_NOT_FOUND_MARKERS = (
    "no link named",
    "not found",
    "does not exist",
)

CHUNK_SIZE = 64 * 1024


def default_user_agent_string() -> str:
    return "git-remote-ipfs/{}".format(".".join(map(str, __version__)))


def default_pool_manager(timeout: Optional[float] = None) -> urllib3.PoolManager:
    """Return the urllib3 connection pool manager used to reach the daemon.

    Args:
      timeout: Timeout for HTTP requests in seconds, None for no timeout
    """
    kwargs = {}
    if timeout is not None:
        kwargs["timeout"] = timeout
    return urllib3.PoolManager(
        headers={"User-agent": default_user_agent_string()}, **kwargs
    )


def _error_message(body: bytes) -> str:
    """Extract the message from a daemon error response."""
    try:
        payload = json.loads(body)
    except ValueError:
        return body.decode("utf-8", "replace").strip()
    if isinstance(payload, dict) and "Message" in payload:
        return str(payload["Message"])
    return body.decode("utf-8", "replace").strip()


class IPFSClient:
    """Read-only access to an IPFS daemon."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        pool_manager: Optional[urllib3.PoolManager] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Initialize an IPFSClient.

        Args:
          api_url: Base URL of the daemon API, e.g. "http://127.0.0.1:5001"
          pool_manager: urllib3 pool manager to use; one is created if omitted
          timeout: Timeout for HTTP requests in seconds
        """
        self.api_url = api_url.rstrip("/")
        if pool_manager is None:
            pool_manager = default_pool_manager(timeout)
        self.pool_manager = pool_manager

    def _url(self, command: str, path: str) -> str:
        return f"{self.api_url}/api/v0/{command}?arg={quote(path, safe='/')}"

    def cat(self, path: str) -> bytes:
        """Return the contents of the file at ``path``.

        Args:
          path: IPFS path, e.g. "/ipfs/<hash>/repo.git/HEAD"
        Raises:
          StoreNotFound: if there is no file at ``path``
          StoreTransport: if the daemon cannot be reached or fails
        """
        url = self._url("cat", path)
        logger.debug("cat %s", path)
        try:
            resp = self.pool_manager.request("POST", url, preload_content=False)
        except urllib3.exceptions.HTTPError as e:
            raise StoreTransport(path, str(e)) from e
        try:
            chunks = []
            while True:
                chunk = resp.read(CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
        except urllib3.exceptions.HTTPError as e:
            raise StoreTransport(path, f"error reading response: {e}") from e
        finally:
            resp.release_conn()
        body = b"".join(chunks)

        if resp.status == 200:
            return body
        message = _error_message(body)
        if resp.status == 404 or any(
            marker in message.lower() for marker in _NOT_FOUND_MARKERS
        ):
            raise StoreNotFound(path, message or "not found")
        raise StoreTransport(path, f"HTTP error {resp.status}: {message}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.api_url!r})"
