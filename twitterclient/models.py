"""
Request/Response Models
Plain data carried between the credential provider, the transport and the executor.
"""

import json as jsonlib
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass
class OutgoingRequest:
    """An HTTP request that has not been handed to the transport yet.

    Only the credential provider touches it after construction, by adding an
    ``Authorization`` header. Transports read it and never write to it.
    """

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)
    form: Optional[Dict[str, str]] = None
    json: Any = None

    def __post_init__(self):
        self.method = self.method.upper()
        if self.form is not None and self.json is not None:
            raise ValueError("A request carries either a form body or a JSON body, not both")


@dataclass(frozen=True)
class Response:
    """A received HTTP response."""

    status: int
    headers: Mapping[str, str]
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON; raises ``ValueError`` on bad input."""
        return jsonlib.loads(self.body.decode("utf-8"))

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default
