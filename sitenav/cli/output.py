"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich for colored messages and for rendering the navigation as a tree.
Supports verbosity levels and the --no-color flag.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from sitenav.navigation import FilterSyncResult, Navigation, PageNode


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Navigation saved")
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False, console: Optional[Console] = None):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
            console: Console to print to (a new one by default)
        """
        self.verbosity = verbosity
        self.console = console or Console(
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(escape(message))

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def print_navigation(self, nav: Navigation, title: str) -> None:
        """Display a navigation as a tree.

        Hidden pages are dimmed and pages installed by a filter are marked
        with a lock.

        Args:
            nav: The navigation to display
            title: Label of the tree root
        """
        tree = Tree(f"[bold]{escape(title)}[/bold]")
        if not nav.count():
            tree.add("[yellow](no pages)[/yellow]")

        for page in nav.get_pages():
            self._add_branch(nav, tree, page)

        self.console.print(tree)

    def _add_branch(self, nav: Navigation, tree: Tree, page: PageNode) -> None:
        text = f"{escape(page.label or '(no label)')} [dim]{escape(page.href)}[/dim]"
        if not page.can_delete:
            text += " [cyan]🔒[/cyan]"
        if not page.visible:
            text = f"[dim]{text} (hidden)[/dim]"
        if self.verbosity >= 2:
            text += f" [dim]order={page.order}[/dim]"

        branch = tree.add(text)
        for child in nav.get_pages(page):
            self._add_branch(nav, branch, child)

    def print_filter_summary(self, result: FilterSyncResult, dry_run: bool = False) -> None:
        """Display the outcome of reconciling a navigation with a filter.

        Args:
            result: Added and pruned uids
            dry_run: Whether the changes were only previewed
        """
        heading = "Dry Run - Changes Preview" if dry_run else "Navigation Summary"
        self.console.print(f"\n[bold]{heading}:[/bold] filter '{escape(result.filter_name)}'")

        if result.added_uids:
            self.console.print(f"  [green]+[/green] Added: {len(result.added_uids)} page(s)")
            if self.verbosity >= 1:
                for uid in result.added_uids:
                    self.console.print(f"      • {escape(uid)}")

        if result.pruned_uids:
            self.console.print(f"  [red]-[/red] Pruned: {len(result.pruned_uids)} page(s)")
            if self.verbosity >= 1:
                for uid in result.pruned_uids:
                    self.console.print(f"      • {escape(uid)}")

        if not result.changed:
            self.console.print("\n[green]Navigation already up to date. No changes detected.[/green]")
        elif dry_run:
            self.console.print("\n[yellow]Dry run: navigation not saved[/yellow]")
        else:
            self.console.print("\n[green]Navigation updated successfully[/green]")
