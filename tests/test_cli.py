# test_cli.py -- Tests for git_remote_ipfs.cli
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

"""Tests for git_remote_ipfs.cli."""

import io
import os
import shutil
import tempfile
from contextlib import redirect_stderr
from unittest import mock

from dulwich.repo import Repo

from git_remote_ipfs.cli import main, open_remote
from git_remote_ipfs.errors import UsageError
from git_remote_ipfs.ipfs import IPFSClient

from . import TestCase
from .utils import MemoryStoreClient, add_loose, make_blob

MASTER_SHA = b"a" * 40


class OpenRemoteTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.path = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.path)
        Repo.init_bare(self.path).close()

    def test_open(self) -> None:
        repo, context = open_remote("ipfs://QmHash/repo.git", {"GIT_DIR": self.path})
        self.addCleanup(repo.close)
        self.assertEqual("/ipfs/QmHash/repo.git", context.locator.base)
        self.assertIsInstance(context.client, IPFSClient)
        self.assertEqual("http://127.0.0.1:5001", context.client.api_url)
        self.assertIs(repo.object_store, context.object_store)

    def test_api_from_environment(self) -> None:
        repo, context = open_remote(
            "ipfs://QmHash/repo.git",
            {"GIT_DIR": self.path, "GIT_REMOTE_IPFS_API": "http://ipfs:5001"},
        )
        self.addCleanup(repo.close)
        self.assertEqual("http://ipfs:5001", context.client.api_url)

    def test_no_git_dir(self) -> None:
        self.assertRaises(UsageError, open_remote, "ipfs://QmHash/repo.git", {})

    def test_not_a_repository(self) -> None:
        empty = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, empty)
        self.assertRaises(
            UsageError, open_remote, "ipfs://QmHash/repo.git", {"GIT_DIR": empty}
        )

    def test_wrong_scheme(self) -> None:
        self.assertRaises(
            UsageError, open_remote, "https://example.com/repo.git", {"GIT_DIR": self.path}
        )


class MainTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.path = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.path)
        Repo.init_bare(self.path).close()
        self.overrideEnv("GIT_DIR", self.path)
        patcher = mock.patch("git_remote_ipfs.log_utils.default_logging_config")
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client = MemoryStoreClient()
        self.client.add("info/refs", MASTER_SHA + b"\trefs/heads/master\n")
        self.client.add("HEAD", b"ref: refs/heads/master\n")

    def run_main(self, argv, data: bytes) -> tuple[int, bytes, str]:
        stdout = io.BytesIO()
        stderr = io.StringIO()
        with mock.patch("git_remote_ipfs.cli.IPFSClient", return_value=self.client):
            with redirect_stderr(stderr):
                retcode = main(argv, io.BytesIO(data), stdout)
        return retcode, stdout.getvalue(), stderr.getvalue()

    def test_session(self) -> None:
        blob = make_blob(b"content")
        add_loose(self.client, blob)
        retcode, out, _ = self.run_main(
            ["origin", "ipfs://QmTestHash/repo.git"],
            b"capabilities\nlist\nfetch " + blob.id + b" refs/heads/master\n\n",
        )
        self.assertEqual(0, retcode)
        self.assertEqual(
            b"fetch\npush\n\n"
            + MASTER_SHA + b" HEAD\n"
            + MASTER_SHA + b" refs/heads/master\n\n"
            + b"\n"
            + b"\n\n",
            out,
        )
        with Repo(self.path) as repo:
            self.assertIn(blob.id, repo.object_store)

    def test_end_of_input(self) -> None:
        retcode, out, _ = self.run_main(["origin", "ipfs://QmTestHash/repo.git"], b"")
        self.assertEqual(0, retcode)
        self.assertEqual(b"", out)

    def test_protocol_violation(self) -> None:
        retcode, out, _ = self.run_main(
            ["origin", "ipfs://QmTestHash/repo.git"], b"capabilities\nbogus\nlist\n"
        )
        self.assertEqual(1, retcode)
        self.assertEqual(b"fetch\npush\n\n", out)

    def test_fetch_failure(self) -> None:
        retcode, out, _ = self.run_main(
            ["origin", "ipfs://QmTestHash/repo.git"],
            b"fetch " + b"1" * 40 + b" refs/heads/master\n\n",
        )
        self.assertEqual(1, retcode)
        self.assertEqual(b"", out)

    def test_wrong_scheme(self) -> None:
        retcode, out, err = self.run_main(["origin", "https://example.com/repo.git"], b"")
        self.assertEqual(2, retcode)
        self.assertEqual(b"", out)
        self.assertIn("usage: git-remote-ipfs", err)

    def test_no_git_dir(self) -> None:
        self.overrideEnv("GIT_DIR", None)
        retcode, _, _ = self.run_main(["origin", "ipfs://QmTestHash/repo.git"], b"")
        self.assertEqual(2, retcode)

    def test_missing_arguments(self) -> None:
        with self.assertRaises(SystemExit) as cm:
            self.run_main(["origin"], b"")
        self.assertEqual(2, cm.exception.code)

    def test_signal_handlers_restored(self) -> None:
        import signal

        before = signal.getsignal(signal.SIGINT)
        self.run_main(["origin", "ipfs://QmTestHash/repo.git"], b"\n")
        self.assertEqual(before, signal.getsignal(signal.SIGINT))


class EntryPointTests(TestCase):
    def test_module_help(self) -> None:
        import subprocess
        import sys

        result = subprocess.run(
            [sys.executable, "-m", "git_remote_ipfs", "--help"],
            capture_output=True,
            text=True,
            env=dict(os.environ),
        )
        self.assertEqual(0, result.returncode)
        self.assertTrue(result.stdout.startswith("usage: git-remote-ipfs"))
