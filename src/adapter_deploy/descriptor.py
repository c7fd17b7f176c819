"""Reading and updating ``src/adapter.json``."""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from .contracts.models import AdapterDescriptor
from .errors import InvalidDescriptorError, MissingDescriptorError

logger = logging.getLogger(__name__)

DESCRIPTOR_PATH = Path("src") / "adapter.json"


def _read_raw(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise MissingDescriptorError(f"{path} not found.") from None
    except UnicodeDecodeError as e:
        raise InvalidDescriptorError(f"Invalid UTF-8 in {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidDescriptorError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidDescriptorError(f"{path} must contain a JSON object.")
    return data


def load_descriptor(path: Path, versioned: bool = True) -> AdapterDescriptor:
    """Load and validate an adapter descriptor.

    Args:
        path: Path to the adapter.json file
        versioned: Whether ``version`` must be a semantic version

    Returns:
        The parsed descriptor

    Raises:
        MissingDescriptorError: If the file does not exist
        InvalidDescriptorError: If it is not valid JSON, has wrongly typed
            fields, or lacks a usable ``id``/``version``
    """
    data = _read_raw(path)
    try:
        descriptor = AdapterDescriptor.model_validate(data)
    except ValidationError as e:
        raise InvalidDescriptorError(f"Invalid fields in {path}: {e}") from e

    problems = descriptor.problems(versioned=versioned)
    if problems:
        raise InvalidDescriptorError(f"Required fields invalid in {path}: " + "; ".join(problems))
    return descriptor


def write_icon(path: Path, icon_url: str) -> None:
    """Set the ``icon`` field of the descriptor file in place.

    Every other key, and the key order, is left as it was.
    """
    data = _read_raw(path)
    data["icon"] = icon_url
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    logger.debug("Wrote icon %s to %s", icon_url, path)
