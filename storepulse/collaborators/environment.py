"""Process environment snapshot (variables, hostname, OS family)."""

import os
import platform
import socket
from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class EnvironmentSnapshot:
    variables: Mapping[str, str] = field(default_factory=dict)
    hostname: str = ""
    os_family: str = ""


def read_environment() -> EnvironmentSnapshot:
    return EnvironmentSnapshot(
        variables=dict(os.environ),
        hostname=socket.gethostname(),
        os_family=platform.system(),
    )
