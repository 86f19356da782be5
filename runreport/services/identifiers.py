from __future__ import annotations

import secrets
import string
from typing import AbstractSet

from runreport.core.errors import IdGenerationExhaustedError

ID_ALPHABET = string.ascii_uppercase + string.digits
ID_LENGTH = 8
MAX_ATTEMPTS = 32


class IdentifierGenerator:
    """Draws short random report ids. Their shape carries no ordering."""

    def __init__(
        self,
        *,
        length: int = ID_LENGTH,
        alphabet: str = ID_ALPHABET,
        max_attempts: int = MAX_ATTEMPTS,
    ) -> None:
        if length <= 0:
            raise ValueError("length must be positive")
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        self.length = length
        self.alphabet = alphabet
        self.max_attempts = max_attempts

    def generate(self, existing_ids: AbstractSet[str]) -> str:
        for _ in range(self.max_attempts):
            candidate = self._draw()
            if candidate not in existing_ids:
                return candidate
        raise IdGenerationExhaustedError(
            f"no unused identifier after {self.max_attempts} attempts"
        )

    def _draw(self) -> str:
        return "".join(secrets.choice(self.alphabet) for _ in range(self.length))
