"""
Diff display — preview the effect of an applied diff before writing it.

Includes a Textual-based interactive viewer that pauses so the user can
review the change and approve/reject it before the file is written.
"""

from __future__ import annotations

import difflib


def compute_diff(filepath: str, old_content: str, new_content: str) -> str | None:
    """Return a unified diff between the two contents, or None if unchanged."""
    if old_content == new_content:
        return None

    diff = difflib.unified_diff(
        old_content.splitlines(keepends=True),
        new_content.splitlines(keepends=True),
        fromfile=f"a/{filepath}",
        tofile=f"b/{filepath}",
        lineterm="",
    )
    diff_text = "\n".join(line.rstrip("\n") for line in diff)
    return diff_text if diff_text.strip() else None


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string.

    Green for additions (+), red for deletions (-), cyan for @@ hunks.
    """
    colored: list[str] = []
    for line in diff_text.splitlines():
        if line.startswith("+++") or line.startswith("---"):
            colored.append(f"\033[1m{line}\033[0m")  # bold
        elif line.startswith("@@"):
            colored.append(f"\033[36m{line}\033[0m")  # cyan
        elif line.startswith("+"):
            colored.append(f"\033[32m{line}\033[0m")  # green
        elif line.startswith("-"):
            colored.append(f"\033[31m{line}\033[0m")  # red
        else:
            colored.append(line)
    return "\n".join(colored)


def _format_rich_diff(diff_text: str) -> str:
    """Convert unified diff text to Rich markup for Textual display."""
    markup_lines: list[str] = []
    for line in diff_text.splitlines():
        # Escape Rich markup characters in the line content
        escaped = line.replace("[", "\\[")
        if line.startswith("+++") or line.startswith("---"):
            markup_lines.append(f"[bold white]{escaped}[/bold white]")
        elif line.startswith("@@"):
            markup_lines.append(f"[cyan]{escaped}[/cyan]")
        elif line.startswith("+"):
            markup_lines.append(f"[green]{escaped}[/green]")
        elif line.startswith("-"):
            markup_lines.append(f"[red]{escaped}[/red]")
        else:
            markup_lines.append(escaped)
    return "\n".join(markup_lines)


# ══════════════════════════════════════════════════════════════════
#  Interactive Diff Approval
# ══════════════════════════════════════════════════════════════════

def prompt_diff_approval(filepath: str, diff_text: str,
                         auto: bool = False, use_tui: bool = True) -> bool:
    """Show the diff and wait for approval.

    Returns ``True`` if the user approves (or in auto mode), ``False`` if
    the user rejects.
    """
    if auto:
        return True
    if use_tui:
        return _textual_diff_approval(filepath, diff_text)
    return _console_diff_approval(filepath, diff_text)


def _textual_diff_approval(filepath: str, diff_text: str) -> bool:
    """Launch a Textual app to display the diff and get approval."""
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Horizontal, VerticalScroll
    from textual.widgets import Button, Footer, Static

    class DiffApprovalApp(App):
        """Interactive diff viewer with approve/reject."""

        CSS = """
        #title-bar {
            dock: top;
            height: 3;
            background: #1a1a2e;
            color: #e94560;
            text-align: center;
            padding: 1;
            text-style: bold;
        }
        #diff-scroll {
            height: 1fr;
            margin: 1 2;
            border: round #444;
            padding: 1;
        }
        #action-buttons {
            dock: bottom;
            height: 3;
            align: center middle;
        }
        #action-buttons Button {
            margin: 0 2;
            min-width: 20;
        }
        """

        BINDINGS = [
            Binding("a", "approve", "Approve"),
            Binding("escape", "reject", "Reject"),
            Binding("r", "reject", "Reject"),
        ]

        def __init__(self) -> None:
            super().__init__()
            self.approved = False

        def compose(self) -> ComposeResult:
            yield Static(f" ━━  Apply diff to {filepath}  ━━ ", id="title-bar")
            with VerticalScroll(id="diff-scroll"):
                yield Static(_format_rich_diff(diff_text))
            with Horizontal(id="action-buttons"):
                yield Button("✔ Approve", id="approve-btn", variant="success")
                yield Button("✕ Reject", id="reject-btn", variant="error")
            yield Footer()

        def on_button_pressed(self, event: Button.Pressed) -> None:
            self.approved = event.button.id == "approve-btn"
            self.exit()

        def action_approve(self) -> None:
            self.approved = True
            self.exit()

        def action_reject(self) -> None:
            self.approved = False
            self.exit()

    app = DiffApprovalApp()
    app.run()
    return app.approved


def _console_diff_approval(filepath: str, diff_text: str) -> bool:
    """Console-based diff approval for terminals without a TUI."""
    print(f"\n{'─' * 60}")
    print(format_colored_diff(diff_text))
    print(f"{'─' * 60}")
    print(f"  Apply to {filepath}?  [A]pprove  |  [R]eject")

    while True:
        try:
            choice = input("  Your choice: ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False
        if choice in ("a", "approve"):
            return True
        if choice in ("r", "reject"):
            return False
        print("  Invalid choice. Use A or R.")
