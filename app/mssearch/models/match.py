"""Match record models.

A match record describes one location in a tenant's tables that
contains the search term.
"""

from dataclasses import dataclass, field
from enum import Enum


class MatchKind(str, Enum):
    """Table source a match was found in.

    Attributes:
        CONTENT: Item body in the content table.
        METADATA: Per-item value in the metadata table.
        CONFIGURATION: Site setting in the configuration table.
    """

    CONTENT = "content"
    METADATA = "metadata"
    CONFIGURATION = "configuration"


@dataclass(frozen=True, slots=True)
class MatchRecord:
    """Represents a single matching location within a tenant.

    Attributes:
        kind: Source table kind of the match.
        title: Item title (content/metadata) or setting name (configuration).
        id: Numeric id of the item or setting row.
        location_text: Human-readable location description.
        link: Canonical link to the matching item or settings screen.
        key: Metadata key for metadata matches.
        item_type: Item type (e.g., 'post', 'page', 'revision').
        extra_status: Item status for content and metadata matches.
        parent_id: Parent item id for revisions.
        management_hint: Suggested command to inspect the matched key.
    """

    kind: MatchKind
    title: str
    id: int
    location_text: str
    link: str
    key: str | None = field(default=None)
    item_type: str | None = field(default=None)
    extra_status: str | None = field(default=None)
    parent_id: int | None = field(default=None)
    management_hint: str | None = field(default=None)
