"""Text analysis: tokenization, stemming and term frequencies."""

from docrank.analysis.frequency import term_frequencies
from docrank.analysis.lexer import Lexer, make_stemmer, tokenize

__all__ = ["Lexer", "make_stemmer", "term_frequencies", "tokenize"]
