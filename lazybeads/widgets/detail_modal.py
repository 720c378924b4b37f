"""Modal screens: issue details, pickers, confirmation and help."""

from rich.markup import escape
from textual import events
from textual.app import ComposeResult
from textual.css.query import NoMatches
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, OptionList, Select, Static
from textual.widgets.option_list import Option
from textual.worker import Worker, WorkerState

from ..config import CustomCommand
from ..data.beads_client import BeadsClient, CreateOptions
from ..data.models import PRIORITY_LABELS, STATUS_ICONS, Comment, Issue, IssueStatus, IssueType, Snapshot
from ..keys import DETAIL_ACTIONS, HELP_SECTIONS, action_for
from ..themes.catppuccin import COLORS, priority_color


def _format_time(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


class DetailModal(ModalScreen[str | None]):
    """Modal screen showing every field of an issue plus its comments.

    Editing keys dismiss the modal with the action name so the app can run
    the edit on the shown issue.
    """

    DEFAULT_CSS = """
    DetailModal {
        align: center middle;
    }

    DetailModal > Vertical {
        width: 90;
        max-width: 95%;
        height: auto;
        max-height: 85%;
        background: #181825;
        border: round #cba6f7;
        padding: 1 2;
    }

    DetailModal .modal-title {
        text-style: bold;
        color: #cba6f7;
        padding: 0 0 1 0;
    }

    DetailModal VerticalScroll {
        height: auto;
        max-height: 100%;
    }

    DetailModal .detail-section {
        margin: 1 0 0 0;
    }

    DetailModal .detail-value {
        color: #cdd6f4;
        padding: 0 0 0 2;
    }

    DetailModal .detail-list-item {
        color: #cdd6f4;
        padding: 0 0 0 4;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("q", "close", "Close"),
        Binding("enter", "close", "Close", show=False),
    ]

    def __init__(self, issue: Issue, snapshot: Snapshot, client: BeadsClient | None = None,
                 custom_commands: list[CustomCommand] | None = None) -> None:
        super().__init__()
        self._issue = issue
        self._by_id = snapshot.by_id()
        self._client = client
        self._custom_commands = custom_commands or []
        self.comments: list[Comment] | None = None

    def _related(self, issue_id: str) -> str:
        other = self._by_id.get(issue_id)
        if other is None:
            return f"  • {escape(issue_id)}"
        return f"  • {other.status_icon} {escape(issue_id)} {escape(other.title)}"

    def compose(self) -> ComposeResult:
        issue = self._issue
        status_color = COLORS[issue.status.value]
        with Vertical():
            yield Static(f"{escape(issue.id)}: {escape(issue.title)}", classes="modal-title")
            with VerticalScroll():
                yield Static(
                    f"[{status_color}]{issue.status_icon} {issue.status.value}[/]  │  "
                    f"[{priority_color(issue.priority)}]{issue.priority_label} "
                    f"{PRIORITY_LABELS.get(issue.priority, '')}[/]  │  "
                    f"{issue.issue_type.value}"
                )
                if issue.assignee:
                    yield Static(f"[#a6adc8]Assignee:[/] {escape(issue.assignee)}")
                if issue.labels:
                    yield Static(f"[#a6adc8]Labels:[/] {escape(', '.join(issue.labels))}")
                times = f"[#a6adc8]Created:[/] {_format_time(issue.created_at)}  " \
                        f"[#a6adc8]Updated:[/] {_format_time(issue.updated_at)}"
                if issue.status == IssueStatus.CLOSED:
                    times += f"  [#a6adc8]Closed:[/] {_format_time(issue.closed_at)}"
                yield Static(times)

                if issue.description:
                    yield Static("[bold #a6adc8]Description[/]", classes="detail-section")
                    yield Static(escape(issue.description), classes="detail-value")

                if issue.blocked_by:
                    yield Static("[bold #f38ba8]Blocked by[/]", classes="detail-section")
                    for dep in issue.blocked_by:
                        yield Static(self._related(dep), classes="detail-list-item")

                if issue.blocks:
                    yield Static("[bold #a6adc8]Blocks[/]", classes="detail-section")
                    for dep in issue.blocks:
                        yield Static(self._related(dep), classes="detail-list-item")

                yield Static("[bold #a6adc8]Comments[/]", classes="detail-section")
                yield Static("[#7f849c]Loading...[/]", id="detail-comments", classes="detail-value")

    def on_mount(self) -> None:
        if self._client is None:
            self._show_comments([])
            return
        client, issue_id = self._client, self._issue.id
        self.run_worker(
            lambda: client.comments(issue_id),
            name="comments",
            thread=True,
            exit_on_error=False,
        )

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.worker.name != "comments":
            return
        if event.state == WorkerState.SUCCESS:
            self._show_comments(event.worker.result or [])
        elif event.state == WorkerState.ERROR:
            self.log.error(f"Failed to load comments for {self._issue.id}: {event.worker.error}")
            self._show_text(f"[#f38ba8]Failed to load comments: {escape(str(event.worker.error))}[/]")

    def _show_comments(self, comments: list[Comment]) -> None:
        self.comments = comments
        if not comments:
            self._show_text("[#7f849c]No comments[/]")
            return
        parts = []
        for c in comments:
            parts.append(
                f"[#cba6f7]{escape(c.author or 'unknown')}[/] [#7f849c]{_format_time(c.created_at)}[/]\n"
                f"{escape(c.text)}"
            )
        self._show_text("\n\n".join(parts))

    def _show_text(self, markup: str) -> None:
        try:
            self.query_one("#detail-comments", Static).update(markup)
        except NoMatches:
            pass

    def on_key(self, event: events.Key) -> None:
        action = action_for(event.key, DETAIL_ACTIONS)
        if action is not None:
            event.stop()
            self.dismiss(action)
            return
        for cmd in self._custom_commands:
            if cmd.key == event.key and cmd.applies_to("detail"):
                self.app.run_command_for(cmd, self._issue)
                event.stop()
                return

    def action_close(self) -> None:
        self.dismiss(None)


class SelectModal(ModalScreen[str | None]):
    """Pick one value from a list (status, priority, type, blockers)."""

    DEFAULT_CSS = """
    SelectModal {
        align: center middle;
    }

    SelectModal > Vertical {
        width: 40;
        height: auto;
        background: #181825;
        border: round #cba6f7;
        padding: 0 1;
    }

    SelectModal .modal-title {
        text-style: bold;
        color: #cba6f7;
        padding: 0 0 1 0;
    }

    SelectModal OptionList {
        height: auto;
        max-height: 20;
        border: none;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("q", "cancel", "Cancel", show=False),
    ]

    def __init__(self, title: str, options: list[tuple[str, str]], current: str | None = None) -> None:
        """Create the picker.

        Args:
            title: Heading shown above the options.
            options: (value, label) pairs.
            current: Value highlighted initially.
        """
        super().__init__()
        self._title = title
        self._options = options
        self._current = current

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(escape(self._title), classes="modal-title")
            yield OptionList(*[Option(label, id=value) for value, label in self._options])

    def on_mount(self) -> None:
        option_list = self.query_one(OptionList)
        values = [value for value, _ in self._options]
        if self._current in values:
            option_list.highlighted = values.index(self._current)
        elif values:
            option_list.highlighted = 0
        option_list.focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option.id)

    def action_cancel(self) -> None:
        self.dismiss(None)


STATUS_OPTIONS = [(s.value, f"{STATUS_ICONS[s]} {s.value}") for s in IssueStatus]
PRIORITY_OPTIONS = [(str(p), f"P{p} - {label}") for p, label in PRIORITY_LABELS.items()]
TYPE_OPTIONS = [(t.value, t.value) for t in IssueType]

OPTION_LABEL_WIDTH = 50


def issue_options(issue_ids, by_id: dict[str, Issue]) -> list[tuple[str, str]]:
    """(id, "id - title") picker options, truncated to fit the modal."""
    options = []
    for issue_id in issue_ids:
        other = by_id.get(issue_id)
        label = f"{issue_id} - {other.title}" if other is not None else issue_id
        if len(label) > OPTION_LABEL_WIDTH:
            label = label[:OPTION_LABEL_WIDTH - 3] + "..."
        options.append((issue_id, escape(label)))
    return options


class InputModal(ModalScreen[str | None]):
    """Single-line text prompt (title, comment)."""

    DEFAULT_CSS = """
    InputModal {
        align: center middle;
    }

    InputModal > Vertical {
        width: 70;
        max-width: 95%;
        height: auto;
        background: #181825;
        border: round #cba6f7;
        padding: 0 1;
    }

    InputModal .modal-title {
        text-style: bold;
        color: #cba6f7;
        padding: 0 0 1 0;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, title: str, value: str = "", placeholder: str = "") -> None:
        super().__init__()
        self._title = title
        self._value = value
        self._placeholder = placeholder

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(escape(self._title), classes="modal-title")
            yield Input(value=self._value, placeholder=self._placeholder, id="modal-input")

    def on_mount(self) -> None:
        self.query_one(Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.dismiss(event.value.strip())

    def action_cancel(self) -> None:
        self.dismiss(None)


class CreateModal(ModalScreen[CreateOptions | None]):
    """Form for a new issue: title, description, type and priority."""

    DEFAULT_CSS = """
    CreateModal {
        align: center middle;
    }

    CreateModal > Vertical {
        width: 70;
        max-width: 95%;
        height: auto;
        background: #181825;
        border: round #cba6f7;
        padding: 0 1;
    }

    CreateModal .modal-title {
        text-style: bold;
        color: #cba6f7;
        padding: 0 0 1 0;
    }

    CreateModal Horizontal {
        height: auto;
    }

    CreateModal Select {
        width: 1fr;
    }

    CreateModal #create-error {
        color: #f38ba8;
        height: auto;
    }

    CreateModal .modal-hint {
        color: #7f849c;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("ctrl+s", "submit", "Create"),
    ]

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("New issue", classes="modal-title")
            yield Input(placeholder="Title", id="create-title")
            yield Input(placeholder="Description (optional)", id="create-description")
            with Horizontal():
                yield Select([(label, value) for value, label in TYPE_OPTIONS],
                             allow_blank=False, value=IssueType.TASK.value, id="create-type")
                yield Select([(label, value) for value, label in PRIORITY_OPTIONS],
                             allow_blank=False, value="2", id="create-priority")
            yield Static("", id="create-error")
            yield Static("enter/ctrl+s create  esc cancel", classes="modal-hint")

    def on_mount(self) -> None:
        self.query_one("#create-title", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_submit()

    def action_submit(self) -> None:
        title = self.query_one("#create-title", Input).value.strip()
        if not title:
            self.query_one("#create-error", Static).update("Title is required")
            return
        self.dismiss(CreateOptions(
            title=title,
            description=self.query_one("#create-description", Input).value.strip(),
            issue_type=str(self.query_one("#create-type", Select).value),
            priority=int(self.query_one("#create-priority", Select).value),
        ))

    def action_cancel(self) -> None:
        self.dismiss(None)



class ConfirmModal(ModalScreen[bool]):
    """Yes/no confirmation."""

    DEFAULT_CSS = """
    ConfirmModal {
        align: center middle;
    }

    ConfirmModal > Vertical {
        width: 50;
        height: auto;
        background: #181825;
        border: round #f38ba8;
        padding: 1 2;
    }

    ConfirmModal Horizontal {
        height: auto;
        margin: 1 0 0 0;
    }

    ConfirmModal Button {
        width: 1fr;
    }
    """

    BINDINGS = [
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(self, message: str) -> None:
        super().__init__()
        self._message = message

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(escape(self._message))
            with Horizontal():
                yield Button("Yes [y]", variant="error", id="btn-yes")
                yield Button("No [n]", variant="primary", id="btn-no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class HelpModal(ModalScreen[None]):
    """Keyboard reference."""

    DEFAULT_CSS = """
    HelpModal {
        align: center middle;
    }

    HelpModal > VerticalScroll {
        width: 60;
        height: auto;
        max-height: 90%;
        background: #181825;
        border: round #cba6f7;
        padding: 1 2;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("q", "close", "Close", show=False),
        Binding("question_mark", "close", "Close", show=False),
    ]

    def __init__(self, custom_commands: list[CustomCommand] | None = None) -> None:
        super().__init__()
        self._custom_commands = custom_commands or []

    def render_help(self) -> str:
        lines = []
        sections = list(HELP_SECTIONS)
        if self._custom_commands:
            sections.append((
                "Custom commands",
                [(c.key, f"{c.description or c.command} ({c.context})") for c in self._custom_commands],
            ))
        for title, entries in sections:
            lines.append(f"[bold #cba6f7]{title}[/]")
            for keys, description in entries:
                lines.append(f"  [#89b4fa]{escape(keys):<16}[/] {escape(description)}")
            lines.append("")
        return "\n".join(lines).rstrip()

    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield Static(self.render_help())

    def on_click(self) -> None:
        self.dismiss(None)

    def action_close(self) -> None:
        self.dismiss(None)
