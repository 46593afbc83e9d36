"""Tenant models for multisite scanning.

This module defines the immutable data structures describing one
subsite of the shared installation and the per-site table set
derived for it.
"""

from dataclasses import dataclass, field
from typing import Literal

# Schemes a site URL can resolve to
SchemeType = Literal["http", "https"]


@dataclass(frozen=True, slots=True)
class Tenant:
    """A single subsite loaded from the tenant registry.

    Attributes:
        id: Numeric site id (1 is the primary site).
        domain: Site domain (e.g., 'example.com').
        path: Site path, always ending with '/' (e.g., '/blog/').
        scheme: URL scheme used for links ('http' until resolved).
    """

    id: int
    domain: str
    path: str = "/"
    scheme: SchemeType = field(default="http")

    def __post_init__(self) -> None:
        """Validate tenant data after initialization."""
        if self.id < 1:
            msg = f"Tenant id must be >= 1, got {self.id}"
            raise ValueError(msg)
        if not self.domain:
            msg = "Tenant domain cannot be empty"
            raise ValueError(msg)

    @property
    def site_label(self) -> str:
        """Return domain and path as shown in reports."""
        return f"{self.domain}{self.path}"

    @property
    def base_url(self) -> str:
        """Return the site's base URL including trailing slash."""
        return f"{self.scheme}://{self.domain}{self.path}"


@dataclass(frozen=True, slots=True)
class TableSet:
    """Per-tenant table names and their probed existence.

    Attributes:
        content: Name of the content (posts) table.
        metadata: Name of the metadata (postmeta) table.
        configuration: Name of the configuration (options) table.
        content_exists: Whether the content table exists.
        metadata_exists: Whether the metadata table exists.
        configuration_exists: Whether the configuration table exists.
    """

    content: str
    metadata: str
    configuration: str
    content_exists: bool = False
    metadata_exists: bool = False
    configuration_exists: bool = False

    @property
    def any_exists(self) -> bool:
        """Check if at least one of the three tables exists."""
        return self.content_exists or self.metadata_exists or self.configuration_exists
