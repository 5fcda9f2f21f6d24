"""Description of the running agent, sent once at the head of every stream."""
from __future__ import annotations

import os
import platform
import socket
import sys
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.config import Settings
from ..core.version import AGENT_NAME, VERSION


@dataclass(slots=True)
class NameVersion:
    name: str
    version: Optional[str] = None


@dataclass(slots=True)
class Service:
    name: str
    agent: NameVersion
    language: NameVersion
    runtime: NameVersion
    version: Optional[str] = None
    environment: Optional[str] = None


@dataclass(slots=True)
class Process:
    pid: int
    ppid: Optional[int]
    title: str
    argv: List[str] = field(default_factory=list)


@dataclass(slots=True)
class System:
    hostname: str
    architecture: str
    platform: str


@dataclass(slots=True)
class Metadata:
    """Agent, service, process and host identity."""

    service: Service
    process: Process
    system: System

    @classmethod
    def build(cls, settings: Settings) -> "Metadata":
        python_version = platform.python_version()
        service = Service(
            name=settings.service_name,
            version=settings.service_version,
            environment=settings.environment,
            agent=NameVersion(AGENT_NAME, VERSION),
            language=NameVersion("python", python_version),
            runtime=NameVersion(platform.python_implementation(), python_version),
        )
        process = Process(
            pid=os.getpid(),
            ppid=os.getppid() if hasattr(os, "getppid") else None,
            title=sys.executable,
            argv=list(sys.argv),
        )
        system = System(
            hostname=settings.hostname or socket.gethostname(),
            architecture=platform.machine(),
            platform=sys.platform,
        )
        return cls(service=service, process=process, system=system)
