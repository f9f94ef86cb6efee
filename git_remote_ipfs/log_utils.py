# log_utils.py -- Logging support for git-remote-ipfs
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

"""Logging utilities for git-remote-ipfs.

The package logs through the standard logging module under the
``git_remote_ipfs`` logger. A null handler is attached at import time so that
nothing is printed unless the embedding program (or :func:`default_logging_config`,
which the helper's entry point calls) configures logging.

Standard output belongs to the remote helper protocol, so every handler set
up here writes to standard error or to a trace file.
"""

import logging
import os
import sys
from typing import Optional, Union

getLogger = logging.getLogger

TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"
DEFAULT_FORMAT = "git-remote-ipfs: %(levelname)s: %(message)s"

_HELPER_LOGGER = getLogger("git_remote_ipfs")
_NULL_HANDLER = logging.NullHandler()
_HELPER_LOGGER.addHandler(_NULL_HANDLER)
_installed_handler: Optional[logging.Handler] = None


def _get_trace_target(environ=None) -> Optional[Union[str, int]]:
    """Work out where GIT_TRACE wants trace output to go.

    Returns:
        - None if tracing is disabled
        - 2 for stderr (values "1", "2", "true")
        - an int between 3 and 9 for an already open file descriptor
        - a str for an absolute file or directory path
    """
    if environ is None:
        environ = os.environ
    value = environ.get("GIT_TRACE", "")
    if not value or value.lower() in ("0", "false"):
        return None
    if value.lower() in ("1", "2", "true"):
        return 2
    if value.isdigit():
        fd = int(value)
        return fd if 3 <= fd <= 9 else None
    if os.path.isabs(value):
        return value
    return None


def _trace_handler(target: Union[str, int]) -> Optional[logging.Handler]:
    if target == 2:
        return logging.StreamHandler(sys.stderr)
    try:
        if isinstance(target, int):
            return logging.StreamHandler(os.fdopen(target, "w", buffering=1))
        if os.path.isdir(target):
            target = os.path.join(target, f"trace.{os.getpid()}")
        return logging.FileHandler(target, mode="a")
    except OSError as e:
        sys.stderr.write(f"Warning: Failed to open GIT_TRACE target {target}: {e}\n")
        return None


def default_logging_config(environ=None) -> None:
    """Set up logging for the helper process.

    With GIT_TRACE enabled everything down to DEBUG (including the protocol
    traffic) goes to the trace target. Otherwise only warnings and errors
    are written to stderr, where git shows them to the user.
    """
    global _installed_handler

    remove_null_handler()
    if _installed_handler is not None:
        _HELPER_LOGGER.removeHandler(_installed_handler)
        _installed_handler.close()
    target = _get_trace_target(environ)
    handler = _trace_handler(target) if target is not None else None
    if handler is not None:
        handler.setFormatter(logging.Formatter(TRACE_FORMAT))
        level = logging.DEBUG
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        level = logging.WARNING
    _HELPER_LOGGER.addHandler(handler)
    _HELPER_LOGGER.setLevel(level)
    _installed_handler = handler


def remove_null_handler() -> None:
    """Remove the null handler from the git_remote_ipfs logger."""
    _HELPER_LOGGER.removeHandler(_NULL_HANDLER)
