"""Comparison policies: decide whether a published record is an update."""

import logging
from typing import Callable

from packaging.version import Version, InvalidVersion

from selfupdate.core.errors import VersionParseError
from selfupdate.core.models import VersionRecord

logger = logging.getLogger(__name__)

ComparisonPolicy = Callable[[VersionRecord, VersionRecord], bool]


def is_newer(local: VersionRecord, remote: VersionRecord) -> bool:
    """True iff the version tokens differ.

    Not an ordering: a remote token that sorts lower than the local one
    (a rollback) still counts as an update.
    """
    return local.version != remote.version


def _parse(token: str, side: str) -> Version:
    try:
        return Version(token)
    except InvalidVersion as e:
        raise VersionParseError(f"Cannot parse {side} version {token!r}") from e


def is_newer_ordered(local: VersionRecord, remote: VersionRecord) -> bool:
    """True iff the remote version sorts strictly above the local one (PEP 440).

    An empty local version means nothing is installed, which is older than
    any release. Unparseable tokens raise VersionParseError.
    """
    remote_ver = _parse(remote.version, 'remote')
    if not local.version:
        return True
    local_ver = _parse(local.version, 'local')
    if remote_ver < local_ver:
        logger.info("Remote version %s is older than installed %s, skipping",
                    remote_ver, local_ver)
    return remote_ver > local_ver


POLICIES: dict[str, ComparisonPolicy] = {
    'different': is_newer,
    'newer': is_newer_ordered,
}


def get_policy(name: str) -> ComparisonPolicy:
    try:
        return POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown comparison policy {name!r} (expected one of: {', '.join(POLICIES)})"
        ) from None
