"""
Ignore patterns passed to the sync engine
"""
from pathlib import Path
from typing import Iterable, List

from ...core.constants import DEFAULT_IGNORE_PATTERNS, IGNORE_FILE_NAME
from ...core.logging import get_logger

logger = get_logger(__name__)


def parse_ignore_file(content: str) -> List[str]:
    """Non-empty, non-comment lines, stripped"""
    patterns = []
    for line in content.split("\n"):
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


class IgnorePatternSet:
    """
    Built-in defaults followed by project overrides, duplicates collapsed.
    """

    def __init__(self, project_patterns: Iterable[str] = ()):
        merged = dict.fromkeys((*DEFAULT_IGNORE_PATTERNS, *project_patterns))
        self.patterns: List[str] = list(merged)

    @classmethod
    def for_project(cls, project_root: str) -> "IgnorePatternSet":
        """Defaults plus the patterns in <project_root>/.havenignore, if any"""
        ignore_file = Path(project_root) / IGNORE_FILE_NAME
        try:
            content = ignore_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return cls()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", ignore_file, e)
            return cls()
        return cls(parse_ignore_file(content))

    def to_engine_args(self) -> List[str]:
        """--ignore-vcs, then one --ignore flag per pattern"""
        args = ["--ignore-vcs"]
        for pattern in self.patterns:
            args += ["--ignore", pattern]
        return args

    def __iter__(self):
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def __contains__(self, pattern: object) -> bool:
        return pattern in self.patterns
