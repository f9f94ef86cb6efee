# cli.py -- Command line entry point of git-remote-ipfs
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

"""Command line entry point of the helper.

git runs ``git-remote-ipfs <remote> <url>`` with ``GIT_DIR`` set whenever a
remote URL starts with ``ipfs://``, e.g.::

    $ git clone ipfs://QmSomeHash/repo.git

Exit status is 2 for usage errors, 1 if serving the remote failed and 0 once
git ends the batch.
"""

__all__ = [
    "main",
    "open_remote",
]

import argparse
import os
import sys
import threading
from collections.abc import Mapping, Sequence
from typing import BinaryIO, Optional

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from . import log_utils
from .config import HelperConfig
from .coordinator import (
    Coordinator,
    install_signal_handlers,
    restore_signal_handlers,
)
from .errors import UsageError
from .ipfs import IPFSClient
from .protocol import RemoteHelper
from .remote import RemoteContext, parse_remote_url

logger = log_utils.getLogger(__name__)


def open_remote(
    url: str, environ: Optional[Mapping[str, str]] = None
) -> tuple[Repo, RemoteContext]:
    """Open the local repository and set up access to the remote at ``url``.

    Raises:
      UsageError: if GIT_DIR is unset or invalid, the URL is not an IPFS URL
        or the configuration is invalid
    """
    if environ is None:
        environ = os.environ
    git_dir = environ.get("GIT_DIR")
    if not git_dir:
        raise UsageError("could not get GIT_DIR env var")
    logger.debug("GIT_DIR=%s", git_dir)
    locator = parse_remote_url(url)
    try:
        repo = Repo(git_dir)
    except NotGitRepository as e:
        raise UsageError(f"GIT_DIR {git_dir} is not a git repository") from e
    try:
        config = HelperConfig.from_config(repo.get_config_stack(), environ)
    except UsageError:
        repo.close()
        raise
    client = IPFSClient(config.api_url, timeout=config.timeout)
    logger.debug("serving %s through %s", locator, config.api_url)
    return repo, RemoteContext(locator, client, repo.object_store)


def main(
    argv: Optional[Sequence[str]] = None,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
) -> int:
    """Run the remote helper.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])
        stdin: Stream git writes commands to (defaults to standard input)
        stdout: Stream answers are written to (defaults to standard output)

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]
    if stdin is None:
        stdin = sys.stdin.buffer
    if stdout is None:
        stdout = sys.stdout.buffer

    log_utils.default_logging_config()

    parser = argparse.ArgumentParser(
        prog="git-remote-ipfs",
        description="git remote helper for repositories published on IPFS",
        epilog="supports ipfs://<hash>/<path> URLs",
    )
    parser.add_argument("repository", help="Name of the remote")
    parser.add_argument("url", help="URL of the remote")
    args = parser.parse_args(argv)
    logger.debug("repo: %s url: %s", args.repository, args.url)

    try:
        repo, context = open_remote(args.url)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        logger.error("%s", e)
        return 2

    coordinator = Coordinator()
    helper = RemoteHelper(context, coordinator)
    previous_handlers = {}
    if threading.current_thread() is threading.main_thread():
        previous_handlers = install_signal_handlers(coordinator)
    try:
        coordinator.spawn(helper.serve, stdin, stdout, name="remote-helper")
        error = coordinator.wait()
    finally:
        restore_signal_handlers(previous_handlers)
        repo.close()

    if error is not None:
        logger.error("closing error: %s", error)
        return 1
    return 0


def _main() -> None:
    sys.exit(main())


if __name__ == "__main__":
    _main()
