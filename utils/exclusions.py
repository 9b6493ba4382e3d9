"""Exclusion list loading"""

import logging
from pathlib import Path

from core.exceptions import ConfigurationError
from core.models import ExclusionSet

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"


def parse_exclusions(content: str) -> list[str]:
    """Table names from a line-oriented list; blanks and comments dropped"""
    tables = []
    for line in content.splitlines():
        line = line.strip()
        if line and not line.startswith(COMMENT_MARKER):
            tables.append(line)
    return tables


def load_exclusions(path) -> ExclusionSet:
    """
    Load the exclusion list

    Args:
        path: Path to the exclusion file

    Returns:
        ExclusionSet; empty when the file does not exist

    Raises:
        ConfigurationError: the file exists but cannot be read
    """
    config_path = Path(path)
    try:
        content = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("No exclusion list at %s; nothing will be excluded", config_path)
        return ExclusionSet(tables=[], source=None)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read exclusion list {config_path}: {e}") from e

    tables = parse_exclusions(content)
    logger.debug("Loaded %d excluded tables from %s", len(tables), config_path)
    return ExclusionSet(tables=tables, source=str(config_path))
