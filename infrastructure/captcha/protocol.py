"""CaptchaProvider protocol.

The verification interface InvisibleReCaptcha satisfies; code that only
verifies tokens can type against it instead of the concrete class.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from errors import CaptchaError


class CaptchaProvider(Protocol):
    def verify(self, response: Optional[str], client_ip: Optional[str]) -> bool: ...


@dataclass(frozen=True)
class VerificationOutcome:
    """Either a yes/no answer from the verification service, or the reason it
    could not be asked."""

    success: bool
    error: Optional[CaptchaError] = None

    @property
    def reachable(self) -> bool:
        return self.error is None
