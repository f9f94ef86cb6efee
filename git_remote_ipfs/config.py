# config.py -- Configuration of the IPFS remote helper
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

"""Configuration of the IPFS remote helper.

Settings are looked up in the environment first and then in the git
configuration of the local repository::

    [ipfs]
        api = http://127.0.0.1:5001
        timeout = 30
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from .errors import UsageError

__all__ = [
    "API_ENV",
    "DEFAULT_API_URL",
    "TIMEOUT_ENV",
    "HelperConfig",
]

DEFAULT_API_URL = "http://127.0.0.1:5001"

API_ENV = "GIT_REMOTE_IPFS_API"
TIMEOUT_ENV = "GIT_REMOTE_IPFS_TIMEOUT"

SECTION = (b"ipfs",)


def _config_value(config, name: bytes) -> Optional[str]:
    if config is None:
        return None
    try:
        value = config.get(SECTION, name)
    except KeyError:
        return None
    if value is None:
        return None
    return value.decode("utf-8")


@dataclass
class HelperConfig:
    """Settings for talking to the IPFS daemon."""

    api_url: str = DEFAULT_API_URL
    timeout: Optional[float] = None

    @classmethod
    def from_config(
        cls, config=None, environ: Optional[Mapping[str, str]] = None
    ) -> "HelperConfig":
        """Load the settings.

        Args:
          config: dulwich ``Config`` (usually the repository's config stack)
          environ: Environment to consult, defaults to ``os.environ``
        Raises:
          UsageError: if the timeout is not a number
        """
        if environ is None:
            environ = os.environ
        api_url = environ.get(API_ENV) or _config_value(config, b"api")
        timeout = environ.get(TIMEOUT_ENV) or _config_value(config, b"timeout")
        if timeout is not None:
            try:
                timeout_value: Optional[float] = float(timeout)
            except ValueError as exc:
                raise UsageError(f"invalid ipfs timeout {timeout!r}") from exc
        else:
            timeout_value = None
        return cls(
            api_url=(api_url or DEFAULT_API_URL).rstrip("/"),
            timeout=timeout_value,
        )
