"""
Terminal front end for Print Decision Buddy.

Runs the same QuizSession as the desktop app, resolving requests inline,
and browses the printer / material / troubleshooting catalog as tables.

    python -m printer_buddy.cli
"""

import platform
from typing import Optional, Sequence

from rich.console import Console
from rich.layout import Layout
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from printer_buddy.config.manager import config_manager
from printer_buddy.schemas.catalog import (
    DifficultyLevel,
    MaterialFilters,
    MaterialSummary,
    MaterialType,
    MotionSystem,
    PrinterFilters,
    PrinterSummary,
    PrintIssueSummary,
    PrinterType,
    TroubleshootingFilters,
)
from printer_buddy.schemas.quiz import FetchState, QuizStep, RecommendationResult, SkillLevel, UseCase
from printer_buddy.services.api_client import GatewayError, PrinterAPIClient
from printer_buddy.services.quiz import QuizSession, inline_runner
from printer_buddy.services.quiz_options import QuizOptions, get_quiz_options
from printer_buddy.ui.formatting import feature_tags, format_price, get_match_badge
from printer_buddy.utils.logger import log

# --- Global Context ---
CONSOLE = Console()


# --- Table Builders ---

def recommendations_table(results: Sequence[RecommendationResult]) -> Table:
    table = Table(title="Recommended Printers", expand=True, border_style="dim")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Printer")
    table.add_column("Price", justify="right")
    table.add_column("Match", justify="right")
    table.add_column("Features")
    table.add_column("Why")
    for index, result in enumerate(results, start=1):
        printer = result.printer
        badge = get_match_badge(result.match_score)
        table.add_row(
            str(index),
            f"[b]{printer.manufacturer} {printer.name}[/b]\n[dim]{badge.text}[/dim]",
            format_price(printer.price),
            f"{result.match_score}%",
            ", ".join(feature_tags(result)),
            "\n".join(f"• {reason}" for reason in result.reasons),
        )
    return table


def printers_table(printers: Sequence[PrinterSummary]) -> Table:
    table = Table(title="Printers", expand=True, border_style="dim")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Printer")
    table.add_column("Type")
    table.add_column("Price", justify="right")
    table.add_column("Build Volume")
    table.add_column("Motion")
    for printer in printers:
        table.add_row(
            str(printer.id),
            f"{printer.manufacturer} {printer.name}",
            printer.printer_type.upper(),
            format_price(printer.price),
            printer.build_volume_description,
            printer.motion_system_display,
        )
    return table


def materials_table(materials: Sequence[MaterialSummary]) -> Table:
    table = Table(title="Materials", expand=True, border_style="dim")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Material")
    table.add_column("Type")
    table.add_column("Difficulty")
    table.add_column("Print Temp")
    for material in materials:
        table.add_row(
            str(material.id),
            f"[b]{material.name}[/b] [dim]{material.full_name}[/dim]",
            material.material_type.upper(),
            material.difficulty_level.title(),
            material.temperature_range or "-",
        )
    return table


def issues_table(issues: Sequence[PrintIssueSummary]) -> Table:
    table = Table(title="Troubleshooting", expand=True, border_style="dim")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Issue")
    table.add_column("Type")
    table.add_column("Symptoms")
    for issue in issues:
        table.add_row(
            str(issue.id),
            issue.name,
            issue.printer_type.upper(),
            issue.symptoms_preview or "-",
        )
    return table


def fetch_state_panel(state: FetchState) -> Panel:
    """Panel for the results step: loading, failure, empty or the results table."""
    if state.is_failure:
        return Panel(f"[bold red]{state.message}[/]", title="Error", border_style="red")
    if state.is_success and not state.results:
        return Panel(
            "[bold]No matches found[/]\n[dim]Try adjusting your budget or preferences[/]",
            border_style="yellow",
        )
    if state.is_success:
        return Panel(recommendations_table(state.results), border_style="green")
    return Panel("[cyan]Finding your perfect printers...[/]", border_style="cyan")


# --- Quiz ---

def _ask_choice(options, current) -> Optional[str]:
    """Numbered choice prompt. Returns the option value, or None for 'back'."""
    for index, option in enumerate(options, start=1):
        marker = "[green]●[/]" if current is not None and current.value == option.value else " "
        CONSOLE.print(f" {marker} [{index}] [b]{option.name}[/b] [dim]{option.description}[/dim]")
    choices = [str(i) for i in range(1, len(options) + 1)] + ["b"]
    answer = Prompt.ask("Select ([b]b[/b] = back)", choices=choices, show_choices=False)
    if answer == "b":
        return None
    return options[int(answer) - 1].value


def _ask_budget(session: QuizSession, options: QuizOptions) -> bool:
    """Returns False when the user chose to go back."""
    answers = session.answers
    CONSOLE.print(f"Current budget: [b]${answers.budget_min:,} - ${answers.budget_max:,}[/b]")
    presets = options.budget_presets
    for index, preset in enumerate(presets, start=1):
        CONSOLE.print(f"  [{index}] {preset.label} (${preset.minimum:,} - ${preset.maximum:,})")
    CONSOLE.print("  \\[c] Custom range   \\[k] Keep current   \\[b] Back")

    choices = [str(i) for i in range(1, len(presets) + 1)] + ["c", "k", "b"]
    answer = Prompt.ask("Select", choices=choices, default="k", show_choices=False)
    if answer == "b":
        return False
    if answer == "c":
        session.set_budget_min(IntPrompt.ask("Minimum ($)", default=answers.budget_min))
        session.set_budget_max(IntPrompt.ask("Maximum ($)", default=answers.budget_max))
    elif answer != "k":
        preset = presets[int(answer) - 1]
        session.apply_preset(preset.minimum, preset.maximum)
    if not session.can_advance():
        CONSOLE.print("[red]Maximum must be greater than minimum.[/]")
    return True


def _ask_preferences(session: QuizSession, options: QuizOptions):
    answers = session.answers
    session.set_prefer_enclosure(
        Confirm.ask(options.feature("prefer_enclosure").name, default=answers.prefer_enclosure)
    )
    session.set_prefer_auto_leveling(
        Confirm.ask(options.feature("prefer_auto_leveling").name, default=answers.prefer_auto_leveling)
    )


def run_quiz(client: PrinterAPIClient, options: Optional[QuizOptions] = None):
    options = options or get_quiz_options()
    session = QuizSession(client=client, runner=inline_runner)

    try:
        while True:
            step = session.step
            header = options.step_header(step)
            CONSOLE.rule(f"[b]Step {step.value + 1}/{len(QuizStep)}: {header.title}[/b]")
            if header.subtitle and step != QuizStep.RESULTS:
                CONSOLE.print(f"[dim]{header.subtitle}[/dim]")

            if step == QuizStep.SKILL_LEVEL:
                value = _ask_choice(options.skill_levels, session.answers.skill_level)
                if value is None:
                    return
                session.set_skill_level(value)
            elif step == QuizStep.USE_CASE:
                value = _ask_choice(options.use_cases, session.answers.use_case)
                if value is None:
                    session.retreat()
                    continue
                session.set_use_case(value)
            elif step == QuizStep.BUDGET:
                if not _ask_budget(session, options):
                    session.retreat()
                    continue
            elif step == QuizStep.PREFERENCES:
                _ask_preferences(session, options)
            else:
                state = session.fetch_state
                CONSOLE.print(fetch_state_panel(state))
                choices = ["s", "b", "q"] + (["r"] if state.is_failure else [])
                hint = "\\[r] Try again  " if state.is_failure else ""
                answer = Prompt.ask(
                    f"{hint}\\[s] Start over  \\[b] Back  \\[q] Menu", choices=choices, default="q",
                    show_choices=False,
                )
                if answer == "q":
                    return
                if answer == "r":
                    session.fetch_recommendations()
                elif answer == "s":
                    session.reset()
                else:
                    session.retreat()
                continue

            session.advance()
    finally:
        session.close()


# --- Catalog Browsing ---

def _enum_prompt(label: str, enum_cls):
    values = [member.value for member in enum_cls]
    answer = Prompt.ask(f"{label} (blank for any)", choices=values + [""], default="", show_choices=True)
    return enum_cls(answer) if answer else None


def _enum_value(label: str, enum_cls) -> Optional[str]:
    member = _enum_prompt(label, enum_cls)
    return member.value if member else None


def ask_printer_filters() -> PrinterFilters:
    """Collect browse filters. A declined toggle leaves that field unset."""
    filters = PrinterFilters()
    if Confirm.ask("Filter by price?", default=False):
        filters.price_min = IntPrompt.ask("Minimum ($)", default=0)
        filters.price_max = IntPrompt.ask("Maximum ($)", default=5000)
    filters.skill_level = _enum_value("Skill level", SkillLevel)
    filters.use_case = _enum_value("Use case", UseCase)
    filters.printer_type = _enum_value("Printer type", PrinterType)
    filters.motion_system = _enum_value("Motion system", MotionSystem)
    if Confirm.ask("Enclosed printers only?", default=False):
        filters.has_enclosure = True
    if Confirm.ask("Multi-color printers only?", default=False):
        filters.has_multi_color = True
    return filters


def browse_printers(client: PrinterAPIClient):
    printers = client.fetch_printers(ask_printer_filters())
    CONSOLE.print(printers_table(printers))

    printer_id = IntPrompt.ask("Printer ID for details (0 to return)", default=0)
    if printer_id:
        printer = client.fetch_printer(printer_id)
        lines = [
            f"[b]{printer.manufacturer} {printer.name}[/b]  {format_price(printer.price)}",
            f"Build volume: {printer.build_volume_description}",
            f"Motion system: {printer.motion_system_display}",
        ]
        if printer.materials:
            lines.append(f"Materials: {', '.join(printer.materials)}")
        if printer.description:
            lines.extend(["", printer.description])
        CONSOLE.print(Panel("\n".join(lines), title=printer.name, border_style="blue"))


def browse_materials(client: PrinterAPIClient):
    filters = MaterialFilters(
        material_type=_enum_prompt("Material type", MaterialType),
        difficulty_level=_enum_prompt("Difficulty", DifficultyLevel),
    )
    CONSOLE.print(materials_table(client.fetch_materials(filters)))

    material_id = IntPrompt.ask("Material ID for details (0 to return)", default=0)
    if material_id:
        material = client.fetch_material(material_id)
        lines = [f"[b]{material.full_name}[/b]"]
        if material.print_temperature_range:
            lines.append(f"Print temp: {material.print_temperature_range}")
        if material.bed_temperature_range:
            lines.append(f"Bed temp: {material.bed_temperature_range}")
        for title, items in [("Pros", material.pros), ("Cons", material.cons), ("Tips", material.printing_tips)]:
            if items:
                lines.append(f"\n[b]{title}[/b]")
                lines.extend(f"• {item}" for item in items)
        CONSOLE.print(Panel("\n".join(lines), title=material.name, border_style="blue"))


def browse_troubleshooting(client: PrinterAPIClient):
    filters = TroubleshootingFilters(
        printer_type=_enum_prompt("Printer type", MaterialType),
        search=Prompt.ask("Search (blank for all)", default=""),
    )
    CONSOLE.print(issues_table(client.fetch_troubleshooting(filters)))

    issue_id = IntPrompt.ask("Issue ID for the guide (0 to return)", default=0)
    if issue_id:
        issue = client.fetch_troubleshooting_issue(issue_id)
        lines = [issue.description]
        if issue.causes:
            lines.append("\n[b]Causes[/b]")
            lines.extend(f"• {cause}" for cause in issue.causes)
        for solution in issue.solutions:
            lines.append(f"\n[b]{solution.step}. {solution.title}[/b]\n{solution.description}")
            if solution.tip:
                lines.append(f"[dim]Tip: {solution.tip}[/dim]")
        CONSOLE.print(Panel("\n".join(lines), title=issue.name, border_style="blue"))


def health_table(client: PrinterAPIClient) -> Table:
    try:
        status = f"[green]{client.check_health()}[/]"
    except GatewayError as e:
        status = f"[bold red]{e}[/]"
    table = Table(title="Status", expand=True, border_style="dim")
    table.add_column("Component")
    table.add_column("State")
    table.add_row("Server", client.base_url)
    table.add_row("Health", status)
    table.add_row("Token", "Set" if config_manager.get_api_token() else "[dim]None[/]")
    return table


# --- UI Layout ---

def get_layout():
    layout = Layout()
    layout.split_column(
        Layout(name="header", size=3),
        Layout(name="body"),
        Layout(name="footer", size=4)
    )
    return layout


def main():
    client = PrinterAPIClient()
    layout = get_layout()
    actions = {
        "1": run_quiz,
        "2": browse_printers,
        "3": browse_materials,
        "4": browse_troubleshooting,
    }

    while True:
        grid = Table.grid(expand=True)
        grid.add_column(justify="left")
        grid.add_column(justify="right")
        grid.add_row(
            "[b magenta]3D Print Decision Buddy[/b magenta]",
            f"[dim]{platform.system()} | {client.base_url}[/dim]"
        )
        layout["header"].update(Panel(grid, style="white on blue"))
        layout["body"].update(Panel(health_table(client), title="Health", border_style="green"))

        t_menu = Table(show_header=False, expand=True, box=None)
        t_menu.add_row("[1] Find a Printer", "[3] Materials", "[5] Refresh")
        t_menu.add_row("[2] Browse Printers", "[4] Troubleshooting", "[Q] Quit")
        layout["footer"].update(Panel(t_menu, title="Actions", border_style="white"))

        CONSOLE.clear()
        CONSOLE.print(layout)

        choice = Prompt.ask("Select", choices=["1", "2", "3", "4", "5", "q", "Q"], default="q")
        if choice in ["q", "Q"]:
            break
        if choice not in actions:
            continue

        try:
            actions[choice](client)
        except GatewayError as e:
            log.error(f"Catalog request failed: {e}")
            CONSOLE.print(Panel(f"[bold red]{e}[/]", title="Error", border_style="red"))
        CONSOLE.input("\nPress Enter to return...")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
