"""
Candidate phrase generation from surrounding text.
"""

import re

# Leading/trailing punctuation stripped from each token; inner marks ("e-mail") stay
_EDGE_PUNCT = re.compile(r"^[^\w]+|[^\w]+$")


def split_words(text: str) -> list[str]:
    """Split text into words, trimming punctuation at word edges.

    Example:
        >>> split_words("Con chó, con mèo!")
        ['Con', 'chó', 'con', 'mèo']
    """
    words = []
    for token in text.split():
        word = _EDGE_PUNCT.sub("", token)
        if word:
            words.append(word)
    return words


def build_candidates(words: list[str], start: int, max_length: int) -> set[str]:
    """Enumerate every phrase beginning at ``words[start]`` up to ``max_length`` words.

    Args:
        words: Tokenized text
        start: Index of the starting word
        max_length: Longest phrase worth trying (from phase 1)

    Returns:
        Set of space-joined phrases of length 1..max_length, truncated at
        the end of ``words``. Empty when ``start`` is out of range.
    """
    if start < 0 or start >= len(words) or max_length < 1:
        return set()
    end = min(len(words), start + max_length)
    return {" ".join(words[start:stop]) for stop in range(start + 1, end + 1)}
