"""Messages exchanged between a river application and a monitor."""

from __future__ import annotations

import abc
import enum
import ipaddress
import queue
from dataclasses import dataclass, field
from typing import Optional, Union

from stashkit.river.data import VarState

MAX_INTERVAL = 60.0
"""The longest minimum interval, in seconds, a subscription may ask for."""

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class OpType(enum.IntEnum):
    """The kind of operation a monitor requests."""

    UNKNOWN = 0
    SUBSCRIBE = 1
    DROP = 2


@dataclass(frozen=True)
class Subscribe:
    """A monitor's request to receive a variable, no more often than ``interval`` seconds."""

    name: str = ""
    interval: float = 0.0

    def validate(self) -> None:
        """Raise ValueError if the request is out of bounds."""
        if not self.name:
            raise ValueError("cannot subscribe to a blank variable name")
        if self.interval > MAX_INTERVAL:
            raise ValueError("cannot subscribe to a variable with an interval > 1 minute")


@dataclass(frozen=True)
class Drop:
    """A monitor's request to stop receiving a variable."""

    name: str = ""

    def validate(self) -> None:
        """Raise ValueError if the request is out of bounds."""
        if not self.name:
            raise ValueError("cannot drop a blank variable name")


@dataclass
class Operation:
    """An instruction from a monitor to a river application.

    The application puts None on ``response`` on success, or the error.
    """

    type: OpType
    subscribe: Subscribe = field(default_factory=Subscribe)
    drop: Drop = field(default_factory=Drop)
    response: "queue.Queue[Optional[Exception]]" = field(
        default_factory=lambda: queue.Queue(maxsize=1)
    )

    def validate(self) -> None:
        """Validate the part of the operation that matches its type."""
        if self.type is OpType.SUBSCRIBE:
            self.subscribe.validate()
        elif self.type is OpType.DROP:
            self.drop.validate()
        else:
            raise ValueError(f"unknown operation type {self.type!r}")


@dataclass(frozen=True)
class Source:
    """The river application instance that connects to a monitor."""

    app: str = ""
    shard: str = ""
    ip: Optional[IPAddress] = None
    port: int = 0
    instance: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.ip, str):
            object.__setattr__(self, "ip", ipaddress.ip_address(self.ip))

    def validate(self) -> None:
        """Raise ValueError if a required part is missing or malformed."""
        if not self.app:
            raise ValueError("Source.app cannot be empty")
        if ":" in self.app:
            raise ValueError("Source.app cannot contain ':'")
        if ":" in self.shard:
            raise ValueError("Source.shard cannot contain ':'")
        if self.ip is None:
            raise ValueError("Source.ip cannot be empty")
        if self.port == 0:
            raise ValueError("Source.port cannot be empty")

    def __str__(self) -> str:
        ip = "" if self.ip is None else str(self.ip)
        return f"{self.app}:{self.shard}:{ip}:{self.port}:{self.instance}"


class WireType(enum.IntEnum):
    """The kind of value a transported :class:`Var` holds."""

    UNKNOWN = 0
    INT = 1
    FLOAT = 2
    STRING = 3


@dataclass(frozen=True)
class Var:
    """A monitored variable sent from a river application to a monitor."""

    name: str
    source: Source
    type: WireType = WireType.UNKNOWN
    int_value: int = 0
    float_value: float = 0.0
    string_value: str = ""


@dataclass(frozen=True)
class IdentityVar:
    """A variable together with the identity of the application that sent it."""

    id: str
    var: Var


class RiverTransport(abc.ABC):
    """Client side of the link from a river application to a monitor.

    Implementations must be thread-safe.
    """

    @abc.abstractmethod
    def connect(self) -> None:
        """Connect to the remote monitor; raise on failure."""

    @abc.abstractmethod
    def receive(self, timeout: Optional[float] = None) -> Optional[Operation]:
        """Return the next operation from the monitor, or None if ``timeout`` elapses."""

    @abc.abstractmethod
    def send(self, state: VarState) -> None:
        """Send a variable's state to the monitor; raise on failure."""

    @abc.abstractmethod
    def close(self) -> None:
        """Close the connection."""