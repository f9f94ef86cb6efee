# refs.py -- Resolving the refs of a repository published on IPFS
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

"""Reading ``info/refs`` and ``HEAD`` from the object store.

Repositories are published the way ``git update-server-info`` lays them out
for dumb transports: ``info/refs`` lists one ``<sha>\\t<refname>`` per line and
``HEAD`` is a symbolic ref.
"""

from dulwich.objects import ObjectID, valid_hexsha
from dulwich.refs import Ref

from . import log_utils
from .errors import MalformedHead, MalformedManifest, UnresolvedHead

__all__ = [
    "SYMREF",
    "parse_info_refs",
    "read_head",
    "resolve_references",
]

logger = log_utils.getLogger(__name__)

SYMREF = b"ref: "


def parse_info_refs(data: bytes) -> dict[Ref, ObjectID]:
    """Parse the contents of an ``info/refs`` file.

    Every line becomes an entry, peeled tag lines (``<name>^{}``) included,
    so they reach git the way they are listed. When a name is listed twice
    the later line wins.

    Args:
      data: Raw file contents
    Returns: Dictionary mapping ref names to hex object ids
    Raises:
      MalformedManifest: if any line is not ``<sha>\\t<refname>``
    """
    refs: dict[Ref, ObjectID] = {}
    for line in data.splitlines():
        fields = line.split(b"\t")
        if len(fields) != 2:
            raise MalformedManifest(line)
        sha, name = fields
        if not name or not valid_hexsha(sha):
            raise MalformedManifest(line)
        if name in refs:
            logger.warning("info/refs lists %r more than once", name)
        refs[name] = sha
        logger.debug("got ref %s %r", sha.decode("ascii"), name)
    return refs


def read_head(data: bytes) -> Ref:
    """Return the ref a symbolic HEAD file points at.

    Raises:
      MalformedHead: if ``data`` does not start with ``ref: ``
    """
    if not data.startswith(SYMREF):
        raise MalformedHead(data)
    return data[len(SYMREF) :].strip()


def resolve_references(context) -> tuple[dict[Ref, ObjectID], ObjectID]:
    """Fetch the refs of the remote and resolve its HEAD.

    Nothing is cached; every call reads ``info/refs`` and ``HEAD`` again.

    Args:
      context: A :class:`git_remote_ipfs.remote.RemoteContext`
    Returns: Tuple of (refs, object id HEAD resolves to)
    Raises:
      StoreError: if either file cannot be read
      MalformedManifest: if ``info/refs`` cannot be parsed
      MalformedHead: if HEAD is not a symbolic ref
      UnresolvedHead: if HEAD points at a ref missing from ``info/refs``
    """
    refs = parse_info_refs(context.get("info", "refs"))
    head_ref = read_head(context.get("HEAD"))
    try:
        head_sha = refs[head_ref]
    except KeyError as exc:
        raise UnresolvedHead(head_ref) from exc
    logger.debug("got HEAD ref %s %r", head_sha.decode("ascii"), head_ref)
    return refs, head_sha
