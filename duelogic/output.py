"""Rich console rendering for scans, evaluations and interrupt decisions."""

import logging

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from duelogic.models import (
    Chair,
    ChairInterruptCandidate,
    EvaluationResult,
    QualityAssessment,
    QuickInterruptCheck,
    ViolationType,
)

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_QUALITY_STYLES = {
    "strong": "green",
    "adequate": "cyan",
    "weak": "yellow",
    "absent": "red",
}


def _score_style(score: int) -> str:
    if score >= 70:
        return "bold green"
    if score >= 40:
        return "bold yellow"
    return "bold red"


def _preview(content: str, words: int = 40) -> str:
    """Return first N words of a response."""
    all_words = content.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def _quality_cell(assessment: QualityAssessment) -> Text:
    style = _QUALITY_STYLES.get(assessment.quality, "")
    label = assessment.quality if assessment.attempted else f"{assessment.quality} (not attempted)"
    text = Text(label, style=style)
    if assessment.notes:
        text.append(f"\n{assessment.notes}", style="dim")
    return text


def evaluation_table(result: EvaluationResult) -> Table:
    """Build a two-column table of one evaluation's findings."""
    evaluation = result.evaluation
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Criterion", style="bold")
    table.add_column("Finding")

    table.add_row("Adherence", Text(str(evaluation.adherence_score), style=_score_style(evaluation.adherence_score)))
    table.add_row("Steel-manning", _quality_cell(evaluation.steel_manning))
    table.add_row("Self-critique", _quality_cell(evaluation.self_critique))

    consistency = evaluation.framework_consistency
    consistency_text = Text("consistent" if consistency.consistent else "inconsistent")
    if consistency.violations:
        consistency_text.append("\n" + "\n".join(f"- {v}" for v in consistency.violations), style="dim")
    table.add_row("Framework", consistency_text)

    honesty = evaluation.intellectual_honesty
    honesty_text = Text(honesty.score)
    if honesty.issues:
        honesty_text.append("\n" + "\n".join(f"- {i}" for i in honesty.issues), style="dim")
    table.add_row("Honesty", honesty_text)

    table.add_row("Method", f"{result.method}" + (" (cache hit)" if result.cached else ""))
    if result.duration_ms is not None:
        table.add_row("Duration", f"{result.duration_ms:.0f}ms")
    return table


def print_evaluation(
    chair: Chair,
    result: EvaluationResult,
    violation: ViolationType | None,
    interject: bool,
) -> None:
    """Print one evaluation plus the arbiter's decision."""
    console.print(Rule(f"[bold cyan]{chair.position}[/bold cyan] ({chair.framework}, {chair.label})"))
    console.print(evaluation_table(result))

    if interject:
        reason = result.evaluation.interjection_reason or violation or "adherence below threshold"
        console.print(
            Panel(
                f"Violation: {violation or 'none classified'}\nReason: {reason}",
                title="[bold red]Arbiter interjects[/bold red]",
                border_style="red",
            )
        )
    elif violation:
        console.print(Text(f"Noted violation (no interjection): {violation}", style="yellow"))
    else:
        console.print(Text("No interjection", style="green"))


def print_scan(content: str, has_steel_man: bool, has_self_critique: bool, check: QuickInterruptCheck) -> None:
    """Print the heuristic-only view of a text."""
    console.print(Rule("[bold cyan]Heuristic scan[/bold cyan]"))
    console.print(Panel(_preview(content), border_style="dim"))

    def _mark(flag: bool) -> Text:
        return Text("yes", style="green") if flag else Text("no", style="red")

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_row("Steel-manning", _mark(has_steel_man))
    table.add_row("Self-critique", _mark(has_self_critique))
    if check.potential_trigger:
        table.add_row("Interrupt trigger", Text(f"{check.likely_reason} ({check.confidence:.2f})", style="yellow"))
    else:
        table.add_row("Interrupt trigger", Text("none", style="dim"))
    console.print(table)


def print_interrupt(speaker: Chair, candidate: ChairInterruptCandidate | None, threshold: float) -> None:
    """Print the outcome of an interrupt evaluation."""
    console.print(Rule(f"[bold cyan]Interrupt check[/bold cyan] (speaker {speaker.position}, threshold {threshold:.2f})"))
    if candidate is None:
        console.print(Text("No interrupt", style="green"))
        return

    body = Text()
    body.append(f'"{candidate.suggested_opener}"\n\n', style="italic")
    body.append(f"Reason: {candidate.trigger_reason}\n")
    body.append(f"Urgency: {candidate.urgency:.2f}\n")
    if candidate.trigger_content:
        body.append(f"Trigger: {candidate.trigger_content}", style="dim")
    console.print(
        Panel(
            body,
            title=f"[bold yellow]{candidate.interrupting_chair.position} interrupts {candidate.interrupted_chair.position}[/bold yellow]",
            border_style="yellow",
        )
    )
