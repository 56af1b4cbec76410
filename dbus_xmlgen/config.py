"""Generator settings"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from .errors import ConfigError


class CallMode(Enum):
    """Shape of the generated call sites"""

    BLOCKING = "blocking"
    ASYNC = "async"


@dataclass
class GeneratorConfig:
    """Options controlling what the binding emitter produces.

    Identifier casing is fixed so that output only depends on the input
    document and these options.
    """

    interfaces: List[str] = field(default_factory=list)
    call_mode: Union[CallMode, str] = CallMode.BLOCKING
    skip_standard_interfaces: bool = False
    destination: Optional[str] = None
    path: Optional[str] = None
    source: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.call_mode, CallMode):
            try:
                self.call_mode = CallMode(self.call_mode)
            except ValueError:
                choices = ", ".join(m.value for m in CallMode)
                raise ConfigError(
                    f"unknown call mode {self.call_mode!r} (expected one of {choices})"
                ) from None
        if isinstance(self.interfaces, str):
            raise ConfigError("interfaces must be a list of interface names")
        if self.path is not None and not self.path.startswith("/"):
            raise ConfigError(f"object path {self.path!r} must start with '/'")

    @property
    def is_async(self) -> bool:
        return self.call_mode is CallMode.ASYNC
