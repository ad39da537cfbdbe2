import typing


def english_enumerate(items: typing.Iterable[str], conj: str = ", and ") -> str:
    """
    Joins words the way a sentence lists them: ``a``, ``a and b`` (with
    ``conj=" and "``), or ``a, b, and c``.
    """
    words = list(items)
    if len(words) < 2:
        return "".join(words)
    return ", ".join(words[:-1]) + conj + words[-1]
