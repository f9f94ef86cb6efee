# coordinator.py -- Deciding how the helper process ends
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

"""Single-slot completion signal shared by the helper's units of work.

The protocol loop and the signal handlers race to finish the process. Each
of them reports one result, either an exception or ``None`` for a clean end,
and the first result reported is the one the process exits with.
"""

import signal
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, Optional

from .errors import Interrupted

__all__ = [
    "Coordinator",
    "install_signal_handlers",
    "restore_signal_handlers",
]

TERMINATION_SIGNALS = tuple(
    getattr(signal, name)
    for name in ("SIGINT", "SIGTERM", "SIGHUP")
    if hasattr(signal, name)
)


class Coordinator:
    """Collects the first result reported by any unit of work."""

    def __init__(self) -> None:
        self._future: Future = Future()
        self._lock = threading.Lock()

    def report(self, error: Optional[BaseException]) -> bool:
        """Record how the process should end.

        Args:
          error: The fatal error, or None for a clean end
        Returns: True if this was the first result, False if it was ignored
        """
        with self._lock:
            if self._future.done():
                return False
            self._future.set_result(error)
            return True

    def done(self) -> bool:
        """Return True once a result has been reported."""
        return self._future.done()

    def wait(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        """Block until a result is reported and return it.

        Raises:
          concurrent.futures.TimeoutError: if ``timeout`` expires first
        """
        return self._future.result(timeout)

    def spawn(
        self, target: Callable[..., Any], *args: Any, name: Optional[str] = None
    ) -> threading.Thread:
        """Run ``target(*args)`` on a daemon thread and report its outcome."""

        def run() -> None:
            try:
                target(*args)
            except Exception as e:
                self.report(e)
            else:
                self.report(None)

        thread = threading.Thread(target=run, name=name, daemon=True)
        thread.start()
        return thread


def install_signal_handlers(coordinator: Coordinator) -> dict[int, Any]:
    """Make termination signals report :class:`Interrupted`.

    Must be called from the main thread.

    Returns: The previous handlers, for :func:`restore_signal_handlers`
    """

    def handler(signum, frame) -> None:
        coordinator.report(Interrupted(signum))

    previous = {}
    for signum in TERMINATION_SIGNALS:
        previous[signum] = signal.signal(signum, handler)
    return previous


def restore_signal_handlers(previous: dict[int, Any]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)
