"""Scan option models.

ScanOptions is resolved once from the command line and passed by
reference to every component of a run.
"""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from mssearch.core.errors import ScanConfigError

# Known noise keys excluded from metadata and configuration results.
# User patterns are added to these, never replace them.
DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "jpsq_sync*",
    "jetpack_*",
    "*_transient*",
    "wpins_*",
    "active_plugins",
    "recently_activated",
    "fs_accounts",
)

# Content statuses searched when no status restriction applies
DEFAULT_STATUSES: tuple[str, ...] = ("publish", "private", "draft", "inherit")
PUBLISHED_STATUS = "publish"
REVISION_TYPE = "revision"


class ScanScope(str, Enum):
    """Which table sources a scan searches."""

    ALL = "all"
    CONTENT = "content"
    METADATA = "metadata"
    CONFIGURATION = "configuration"

    @property
    def includes_content(self) -> bool:
        """Check if the content table is searched."""
        return self in (ScanScope.ALL, ScanScope.CONTENT)

    @property
    def includes_metadata(self) -> bool:
        """Check if the metadata table is searched."""
        return self in (ScanScope.ALL, ScanScope.METADATA)

    @property
    def includes_configuration(self) -> bool:
        """Check if the configuration table is searched."""
        return self in (ScanScope.ALL, ScanScope.CONFIGURATION)


def merge_patterns(*groups: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    """Merge pattern groups, dropping blanks and duplicates.

    Order of first appearance is kept so reports list the defaults first.

    Args:
        groups: Pattern sequences to merge.

    Returns:
        Tuple of unique, non-empty patterns.
    """
    merged: list[str] = []
    for group in groups:
        for pattern in group:
            pattern = pattern.strip()
            if pattern and pattern not in merged:
                merged.append(pattern)
    return tuple(merged)


class ScanOptions(BaseModel):
    """Immutable option set for a single run.

    Attributes:
        search_term: Literal substring to search for.
        scope: Table sources to search.
        case_sensitive: Match the term case-sensitively.
        published_only: Restrict content matches to published items.
        exclude_revisions: Skip revision items in content matches.
        summary_only: Report one line per matching site.
        exclude_patterns: Wildcard patterns for keys to drop.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    search_term: Annotated[str, Field(min_length=1, description="Substring to search for")]
    scope: ScanScope = ScanScope.ALL
    case_sensitive: bool = False
    published_only: bool = False
    exclude_revisions: bool = False
    summary_only: bool = False
    exclude_patterns: tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS

    @property
    def statuses(self) -> tuple[str, ...]:
        """Return the content statuses allowed by this option set."""
        if self.published_only:
            return (PUBLISHED_STATUS,)
        return DEFAULT_STATUSES

    def describe(self) -> list[str]:
        """Return the active options as short labels for the run banner."""
        labels: list[str] = []
        if self.scope != ScanScope.ALL:
            labels.append(f"{self.scope.value}-only")
        if self.summary_only:
            labels.append("summary")
        labels.append("case-sensitive" if self.case_sensitive else "case-insensitive")
        if self.published_only:
            labels.append("published-only")
        if self.exclude_revisions:
            labels.append("exclude-revisions")
        if self.exclude_patterns:
            labels.append("excluding: " + ", ".join(self.exclude_patterns))
        return labels

    @classmethod
    def from_flags(
        cls,
        search_term: str,
        *,
        content_only: bool = False,
        metadata_only: bool = False,
        configuration_only: bool = False,
        case_sensitive: bool = False,
        published_only: bool = False,
        exclude_revisions: bool = False,
        summary_only: bool = False,
        exclude: list[str] | tuple[str, ...] = (),
    ) -> "ScanOptions":
        """Build options from raw command-line flags.

        Args:
            search_term: Substring to search for.
            content_only: Search only the content table.
            metadata_only: Search only the metadata table.
            configuration_only: Search only the configuration table.
            case_sensitive: Match case-sensitively.
            published_only: Only published content.
            exclude_revisions: Skip revision items.
            summary_only: One line per matching site.
            exclude: User exclusion patterns, added to the defaults.

        Returns:
            Validated ScanOptions.

        Raises:
            ScanConfigError: If more than one scope flag is set or the
                term is empty.
        """
        scope_flags = {
            ScanScope.CONTENT: content_only,
            ScanScope.METADATA: metadata_only,
            ScanScope.CONFIGURATION: configuration_only,
        }
        selected = [scope for scope, enabled in scope_flags.items() if enabled]
        if len(selected) > 1:
            names = ", ".join(f"{s.value}-only" for s in selected)
            msg = f"Only one scope restriction can be used at a time (got {names})"
            raise ScanConfigError(msg)

        if not search_term:
            msg = "Search term cannot be empty"
            raise ScanConfigError(msg)

        return cls(
            search_term=search_term,
            scope=selected[0] if selected else ScanScope.ALL,
            case_sensitive=case_sensitive,
            published_only=published_only,
            exclude_revisions=exclude_revisions,
            summary_only=summary_only,
            exclude_patterns=merge_patterns(DEFAULT_EXCLUDE_PATTERNS, tuple(exclude)),
        )
