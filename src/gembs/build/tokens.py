"""Token classification for build step arguments.

Every argument token is exactly one of:

- MNEMONIC: contains ``$name`` (``$`` followed by word/hyphen characters).
  Only the first reference in a token is recognized.
- OBJECT_PATTERN: contains ``%.<ext>`` and no mnemonic.
- LITERAL: anything else.
"""

import re
from dataclasses import dataclass
from enum import Enum

MNEMONIC_RE = re.compile(r"\$([\w-]+)")
OBJECT_PATTERN_RE = re.compile(r"%\.(\w+)")


class TokenKind(Enum):
    MNEMONIC = "mnemonic"
    OBJECT_PATTERN = "object_pattern"
    LITERAL = "literal"


@dataclass(frozen=True)
class Token:
    """A classified argument token.

    Attributes:
        kind: Classification
        text: Original token text
        name: Mnemonic name or object extension ("" for literals)
        match: The matched substring, ``$name`` or ``%.ext`` ("" for literals)
    """

    kind: TokenKind
    text: str
    name: str = ""
    match: str = ""

    @property
    def is_whole(self) -> bool:
        """True if the reference occupies the entire stripped token."""
        return bool(self.match) and self.text.strip() == self.match

    def substitute(self, replacement: str) -> str:
        """Replace the matched reference (first occurrence) with ``replacement``."""
        if not self.match:
            return self.text
        return self.text.replace(self.match, replacement, 1)


def classify_token(text: str) -> Token:
    """Classify a single build step token."""
    mnemonic = MNEMONIC_RE.search(text)
    if mnemonic:
        return Token(TokenKind.MNEMONIC, text, mnemonic.group(1), mnemonic.group(0))

    pattern = OBJECT_PATTERN_RE.search(text)
    if pattern:
        return Token(TokenKind.OBJECT_PATTERN, text, pattern.group(1), pattern.group(0))

    return Token(TokenKind.LITERAL, text)
