"""Clock, hostname and UUID sources used when recording provenance."""

import socket
import time
import uuid
from typing import Callable, Optional

from genometo.core.exceptions import ResourceError


class Environment:
    """
    Capabilities the genome object needs from the host.

    Args:
        clock: Returns the current time in seconds since the epoch
        hostname: Hostname to record; looked up once on first use if None
        uuid_factory: Returns a new globally unique identifier string
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        hostname: Optional[str] = None,
        uuid_factory: Callable[[], str] = lambda: str(uuid.uuid4())
    ) -> None:
        self._clock = clock
        self._hostname = hostname
        self._uuid_factory = uuid_factory

    def now(self) -> float:
        return self._clock()

    def hostname(self) -> str:
        if not self._hostname:
            self._hostname = socket.gethostname()
        return self._hostname

    def new_uuid(self) -> str:
        value = self._uuid_factory()
        if not value:
            raise ResourceError("UUID generator returned no identifier", "uuid")
        return value
