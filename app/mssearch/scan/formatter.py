"""Report formatting for scan results.

ResultFormatter turns tenants, match records and run totals into
Rich-markup strings. It performs no I/O; the coordinator writes the
strings to its console.
"""

from rich.markup import escape

from mssearch.models.match import MatchKind, MatchRecord
from mssearch.models.tenant import Tenant
from mssearch.models.totals import RunTotals

# Theme style per match kind
_KIND_STYLES: dict[MatchKind, str] = {
    MatchKind.CONTENT: "match_content",
    MatchKind.METADATA: "match_metadata",
    MatchKind.CONFIGURATION: "match_configuration",
}

RULE_WIDTH = 60


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}es"


class ResultFormatter:
    """Builds report lines for tenants, matches and the final summary.

    Attributes:
        summary_only: Whether per-match detail is suppressed.
    """

    def __init__(self, summary_only: bool = False) -> None:
        self.summary_only = summary_only

    def format_tenant_header(self, tenant: Tenant, match_count: int) -> str:
        """Format the block header for a tenant with matches.

        In summary mode this is the single check-mark line for the tenant.

        Args:
            tenant: Tenant with matches.
            match_count: Number of matches found.

        Returns:
            Markup string (one line in summary mode, two otherwise).
        """
        label = escape(tenant.site_label)
        matches = _plural(match_count, "match")

        if self.summary_only:
            return f"[success]✓[/] {label} [muted](Blog ID: {tenant.id})[/] - {matches}"

        return (
            f"[bold_header]FOUND in:[/] {label} [muted](Blog ID: {tenant.id})[/] - {matches}\n"
            f"[muted]URL:[/] [url]{escape(tenant.base_url)}[/]"
        )

    def format_match(self, record: MatchRecord) -> str:
        """Format one match with its link and optional management hint.

        Args:
            record: Match to format.

        Returns:
            Markup string, or an empty string in summary mode.
        """
        if self.summary_only:
            return ""

        style = _KIND_STYLES[record.kind]
        lines = [
            f"  └─ [{style}]{escape(record.location_text)}[/]",
            f"     → [url]{escape(record.link)}[/]",
        ]
        if record.management_hint:
            lines.append(f"     [muted]WP-CLI:[/] [hint]{escape(record.management_hint)}[/]")
        return "\n".join(lines)

    def format_tenant_error(self, tenant: Tenant, error: str) -> str:
        """Format the inline note for a tenant whose scan failed."""
        return (
            f"[warning]Skipped[/] {escape(tenant.site_label)} "
            f"[muted](Blog ID: {tenant.id})[/]: {escape(error)}"
        )

    def format_progress(self, processed: int) -> str:
        """Format the periodic progress marker."""
        return f"[muted]Processed {processed} sites...[/]"

    def format_summary(self, totals: RunTotals, search_term: str) -> str:
        """Format the final summary block.

        The match rate line is only present when something matched;
        otherwise a "no matches" notice takes its place.

        Args:
            totals: Final run totals.
            search_term: The term that was searched for.

        Returns:
            Multi-line markup string.
        """
        term = escape(search_term)
        lines = [
            "",
            "=" * RULE_WIDTH,
            "[bold_header]SEARCH SUMMARY:[/]",
            f'Search term: "{term}"',
            f"Total matches found: {totals.total_matches}",
            f"Sites with matches: {totals.tenants_with_matches}",
            f"Total sites scanned: {totals.tenants_scanned}",
        ]
        if totals.tenants_failed:
            lines.append(f"[warning]Sites with errors: {totals.tenants_failed}[/]")

        rate = totals.match_rate
        if rate is None:
            lines.append("")
            lines.append(f'[warning]No matches found for "{term}".[/]')
        else:
            lines.append(f"Match rate: {rate}% of sites contain this text")

        lines.append("")
        lines.append(f"[muted]Search completed in {totals.elapsed_seconds:.2f} seconds.[/]")
        return "\n".join(lines)
