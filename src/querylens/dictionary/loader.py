"""Load a term dictionary from a YAML file."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from querylens.dictionary.terms import TermDictionary
from querylens.errors import DictionaryError


def load_dictionary(path: Path | str) -> TermDictionary:
    """Load and validate a term dictionary.

    The file mirrors ``TermDictionary``: top-level ``tables``, ``terms``,
    ``statuses``, ``locations`` and word-list sections.

    Args:
        path: Path to a YAML file

    Returns:
        Validated TermDictionary

    Raises:
        DictionaryError: If the file is missing, unparsable or invalid
    """
    path = Path(path)
    if not path.exists():
        raise DictionaryError(f"Dictionary file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DictionaryError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise DictionaryError(f"Dictionary file {path} must contain a mapping at the top level")

    try:
        return TermDictionary.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise DictionaryError(f"Invalid dictionary {path}: {errors}") from e


def dump_dictionary(dictionary: TermDictionary, path: Path | str) -> Path:
    """Write a dictionary to YAML, for use as a starting point for edits."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(dictionary.model_dump(mode="json"), f, sort_keys=False, allow_unicode=True)
    return path
