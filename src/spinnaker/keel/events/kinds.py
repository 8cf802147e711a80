"""Resource kind identifiers of the form ``<group>/<kind>@<version>``."""

import re
from dataclasses import dataclass

from spinnaker.keel.exceptions import InvalidResourceKind

_KIND_PATTERN = re.compile(r"^(?P<group>[^/@\s]+)/(?P<kind>[^/@\s]+)@(?P<version>[^/@\s]+)$")


@dataclass(frozen=True)
class ResourceKind:
    """Schema identifier of a managed resource, e.g. ``ec2/cluster@v1``."""

    group: str
    kind: str
    version: str

    def __str__(self) -> str:
        return f"{self.group}/{self.kind}@{self.version}"


def parse_kind(value: str) -> ResourceKind:
    """
    Parse a resource kind string.

    Args:
        value: Kind in the form ``<group>/<kind>@<version>``

    Returns:
        Parsed ResourceKind

    Raises:
        InvalidResourceKind: If the value does not match the expected form
    """
    match = _KIND_PATTERN.match(value)
    if match is None:
        raise InvalidResourceKind(value)
    return ResourceKind(**match.groupdict())
