"""
Label parsing for task entries.

Labels are written inline on the command line as colon-delimited tokens,
e.g. ``pm add Fix login redirect :bug:auth:``. Each such token contributes
one label per non-empty segment; every other word belongs to the title.
"""

from collections.abc import Iterable

LABEL_DELIMITER = ":"


def is_label_token(word: str) -> bool:
    """Return True if a word is a ``:label:`` token rather than title text."""
    return (
        len(word) > 2
        and word.startswith(LABEL_DELIMITER)
        and word.endswith(LABEL_DELIMITER)
        and word.strip(LABEL_DELIMITER) != ""
    )


def validate_label(label: str) -> str:
    """
    Check that a label is a single non-empty token.

    Args:
        label: Label text

    Returns:
        The label unchanged

    Raises:
        ValueError: If the label is empty or contains whitespace or a colon
    """
    if not label:
        raise ValueError("label cannot be empty")
    if LABEL_DELIMITER in label:
        raise ValueError(f"label cannot contain '{LABEL_DELIMITER}': {label!r}")
    if any(c.isspace() for c in label):
        raise ValueError(f"label cannot contain whitespace: {label!r}")
    return label


def normalize_labels(labels: Iterable[str]) -> list[str]:
    """Validate, de-duplicate and sort labels so serialized output is stable."""
    return sorted({validate_label(label) for label in labels})


def parse_entry(words: Iterable[str]) -> tuple[str, list[str]]:
    """
    Split command-line words into a title and labels.

    Args:
        words: Words as given on the command line

    Returns:
        Tuple of (title, labels); labels are normalized

    Example:
        >>> parse_entry(["Fix", "login", ":bug:auth:"])
        ('Fix login', ['auth', 'bug'])
    """
    title_words: list[str] = []
    labels: list[str] = []
    for word in words:
        if is_label_token(word):
            labels.extend(part for part in word.split(LABEL_DELIMITER) if part)
        else:
            title_words.extend(word.split())
    return " ".join(title_words), normalize_labels(labels)
