"""Tokenizer turning raw text into normalized, stemmed terms.

Terms are produced one at a time from an explicit cursor over the input:

- whitespace is skipped;
- a maximal run of numeric characters becomes one term (kept verbatim);
- otherwise a maximal run of alphanumeric or underscore characters becomes
  one term, stemmed (until stable) only when it is purely alphabetic;
- otherwise a single character (punctuation, symbol) becomes one term.

Every term is lowercased.
"""

from __future__ import annotations

from typing import Callable, Iterator, Protocol

from nltk.stem import PorterStemmer


class Stemmer(Protocol):
    def stem(self, word: str) -> str: ...


def make_stemmer() -> Stemmer:
    """Return a fresh English stemmer."""
    return PorterStemmer()


def _is_numeric(char: str) -> bool:
    return char.isnumeric()


def _is_word(char: str) -> bool:
    return char.isalnum() or char == "_"


class _Cursor:
    """Position over ``text`` with one character of lookahead."""

    __slots__ = ("text", "position")

    def __init__(self, text: str) -> None:
        self.text = text
        self.position = 0

    def peek(self) -> str | None:
        if self.position < len(self.text):
            return self.text[self.position]
        return None

    def advance(self) -> str | None:
        char = self.peek()
        if char is not None:
            self.position += 1
        return char

    def take_while(self, predicate: Callable[[str], bool]) -> str:
        start = self.position
        while self.position < len(self.text) and predicate(self.text[self.position]):
            self.position += 1
        return self.text[start : self.position]


class Lexer:
    """Lazy, restartable sequence of terms over ``text``.

    Iterating the same lexer twice yields the same terms; each iteration
    runs on its own cursor.
    """

    def __init__(self, text: str, stemmer: Stemmer | None = None) -> None:
        self.text = text or ""
        self.stemmer = stemmer if stemmer is not None else make_stemmer()

    def __iter__(self) -> Iterator[str]:
        cursor = _Cursor(self.text)
        while True:
            term = self._next_term(cursor)
            if term is None:
                return
            yield term

    def _next_term(self, cursor: _Cursor) -> str | None:
        cursor.take_while(str.isspace)

        run = cursor.take_while(_is_numeric)
        if run:
            return run.lower()

        run = cursor.take_while(_is_word)
        if run:
            return self._normalize(run)

        return cursor.advance()

    def _normalize(self, run: str) -> str:
        term = run.lower()
        if term.isalpha():
            return self._stem(term)
        return term

    def _stem(self, word: str) -> str:
        # Porter can shorten its own output ("agreed" -> "agre" -> "agr"),
        # so stem until the term is stable.
        seen = {word}
        while True:
            stemmed = self.stemmer.stem(word)
            if stemmed in seen:
                return stemmed
            seen.add(stemmed)
            word = stemmed


def tokenize(text: str, stemmer: Stemmer | None = None) -> list[str]:
    """Return the list of terms in ``text``."""
    return list(Lexer(text, stemmer))
