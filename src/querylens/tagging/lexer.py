"""Tokenizer and phrase index used by the entity tagger.

Tokens keep their offsets into the original text; ``norm`` is a lowercased
copy used only for comparison, so case folding never shifts offsets.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Iterator, TypeVar

_TOKEN_RE = re.compile(r"(?P<number>\d+(?:\.\d+)?)(?![\w-])|(?P<word>\w+(?:[-']\w+)*)")

T = TypeVar("T")


class TokenKind(str, Enum):
    WORD = "word"
    NUMBER = "number"


@dataclass(frozen=True)
class Token:
    text: str
    start: int
    end: int
    kind: TokenKind

    @property
    def norm(self) -> str:
        return self.text.casefold()

    @property
    def is_number(self) -> bool:
        return self.kind is TokenKind.NUMBER


def tokenize(text: str) -> list[Token]:
    """Split text into word and number tokens with their offsets."""
    tokens = []
    for match in _TOKEN_RE.finditer(text):
        kind = TokenKind.NUMBER if match.group("number") is not None else TokenKind.WORD
        tokens.append(Token(match.group(0), match.start(), match.end(), kind))
    return tokens


def phrase_norms(phrase: str) -> tuple[str, ...]:
    """Normalised token sequence of a dictionary phrase."""
    return tuple(token.norm for token in tokenize(phrase))


def parse_number(token: Token) -> int | float:
    return float(token.text) if "." in token.text else int(token.text)


class PhraseIndex(Generic[T]):
    """Multi-token phrase lookup keyed by first token.

    Candidates at a position are yielded longest first, so callers that take
    the first free candidate get longest-match-wins behaviour.
    """

    def __init__(self) -> None:
        self._by_first: dict[str, list[tuple[tuple[str, ...], T]]] = {}
        self._seen: set[tuple[str, ...]] = set()

    def add(self, phrase: str, payload: T) -> None:
        norms = phrase_norms(phrase)
        if not norms or norms in self._seen:
            return
        self._seen.add(norms)
        bucket = self._by_first.setdefault(norms[0], [])
        bucket.append((norms, payload))
        bucket.sort(key=lambda item: -len(item[0]))

    def __len__(self) -> int:
        return len(self._seen)

    def candidates(self, text: str, tokens: list[Token], i: int) -> Iterator[tuple[int, T]]:
        """Yield ``(end_token_index, payload)`` for phrases starting at token ``i``.

        Consecutive tokens of a phrase must be separated by whitespace only.
        """
        for norms, payload in self._by_first.get(tokens[i].norm, ()):
            j = i + len(norms)
            if j > len(tokens):
                continue
            if all(tokens[i + k].norm == norms[k] for k in range(len(norms))) and _contiguous(
                text, tokens, i, j
            ):
                yield j, payload


def _contiguous(text: str, tokens: list[Token], i: int, j: int) -> bool:
    for k in range(i, j - 1):
        gap = text[tokens[k].end : tokens[k + 1].start]
        if gap and not gap.isspace():
            return False
    return True
