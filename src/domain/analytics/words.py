"""
Palavras mais usadas por fase.
"""

from collections import Counter
from typing import Iterable, NamedTuple

STOPWORDS = frozenset(
    "a o e de da do em um uma que com para por no na nos nas ao aos as os "
    "se lhe eu tu ele ela".split()
)
MIN_WORD_LENGTH = 2


class WordCount(NamedTuple):
    word: str
    count: int


def tokenize(text: str) -> list[str]:
    """Minúsculas, tudo que não é letra/dígito vira espaço, split por espaços."""
    cleaned = "".join(ch if ch.isalnum() else " " for ch in text.lower())
    return cleaned.split()


def extract_top_words(
    texts: Iterable[str],
    limit: int,
    stopwords: frozenset[str] = STOPWORDS
) -> list[WordCount]:
    """
    Top-N palavras por contagem.

    Empates mantêm a ordem em que a palavra apareceu pela primeira vez
    (Counter preserva inserção e sorted é estável).
    """
    counts: Counter[str] = Counter()
    for text in texts:
        for word in tokenize(text):
            if len(word) < MIN_WORD_LENGTH or word in stopwords:
                continue
            counts[word] += 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [WordCount(word, count) for word, count in ranked[:limit]]
