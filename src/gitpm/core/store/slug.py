"""
File naming for task files.

A task file is named ``{zero-padded id}-{kebab-cased title}``. The name is
derived once when the task is created and then frozen: editing the title
never renames the file, so its version-control history stays attached.
"""

import re
import unicodedata

DEFAULT_ID_WIDTH = 3
DEFAULT_MAX_LENGTH = 50
FALLBACK_SLUG = "task"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_STEM = re.compile(r"^(\d+)(?:-(.*))?$")


def kebab_case(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Convert free text to a lowercase, hyphen-separated token.

    Args:
        text: Input text (typically a task title)
        max_length: Maximum length; longer results are cut at a word boundary

    Returns:
        Kebab-cased text, or ``"task"`` if nothing usable remains

    Example:
        >>> kebab_case("Draft the Roadmap (v2)!")
        'draft-the-roadmap-v2'
    """
    # Fold accented characters to their ASCII base letters
    ascii_text = (
        unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    )
    result = _NON_ALNUM.sub("-", ascii_text.lower()).strip("-")

    if len(result) > max_length:
        cut = result[:max_length]
        # Only back up to a hyphen if the cut landed mid-word
        if result[max_length] != "-" and "-" in cut:
            cut = cut.rsplit("-", 1)[0]
        result = cut.strip("-")

    return result or FALLBACK_SLUG


def slug(
    task_id: int,
    title: str,
    width: int = DEFAULT_ID_WIDTH,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> str:
    """
    Build the frozen file stem for a new task.

    Args:
        task_id: Positive task id
        title: Task title at creation time
        width: Minimum number of digits for the id (zero-padded)
        max_length: Maximum length of the title part

    Returns:
        File stem such as ``"007-write-spec"``
    """
    if task_id < 1:
        raise ValueError(f"task id must be positive, got {task_id}")
    return f"{task_id:0{width}d}-{kebab_case(title, max_length)}"


def parse_task_id(stem: str) -> int | None:
    """
    Recover the task id from a file stem.

    Returns:
        The integer id prefix, or None if the stem does not start with one
    """
    match = _STEM.match(stem)
    if match is None:
        return None
    task_id = int(match.group(1))
    return task_id if task_id > 0 else None
