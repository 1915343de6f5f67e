"""Click CLI: scan, evaluate, and interrupt-check chair responses from the terminal."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from config.config_loader import AppConfig, ConfigError, load_config
from duelogic.evaluator import ResponseEvaluator, create_quick_evaluator
from duelogic.healthcheck import run_health_checks
from duelogic.heuristics import quick_interrupt_check, quick_self_critique_check, quick_steel_man_check
from duelogic.inputs import chair_from_metadata, parse_response_file, previous_chair_from_metadata
from duelogic.interruption import ChairInterruptionEngine
from duelogic.models import ACCOUNTABILITY_LEVELS, EvaluationContext, InterruptEvaluationContext
from duelogic.output import print_evaluation, print_interrupt, print_scan
from duelogic.providers.anthropic import AnthropicJudge
from duelogic.providers.base import JudgeClient
from duelogic.providers.gemini import GeminiJudge
from duelogic.providers.openai_provider import OpenAIJudge
from duelogic.providers.openrouter import OpenRouterJudge

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

JUDGE_CLASSES: dict[str, type[JudgeClient]] = {
    "anthropic": AnthropicJudge,
    "openai": OpenAIJudge,
    "openrouter": OpenRouterJudge,
    "gemini": GeminiJudge,
}

_CLI_DEBATE_ID = "cli"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _load_app_config(settings_path: Path | None) -> AppConfig:
    try:
        return load_config(settings_path) if settings_path else load_config()
    except (FileNotFoundError, ConfigError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)


def _build_all_judges(config: AppConfig) -> dict[str, JudgeClient]:
    """Build every judge whose API key is present. Returns dict keyed by name."""
    judges: dict[str, JudgeClient] = {}
    for name in sorted(config.available_providers):
        model_cfg = config.models[name]
        judge_cls = JUDGE_CLASSES.get(model_cfg.sdk)
        if judge_cls is None:
            logger.warning("Judge '%s' uses unknown sdk '%s', skipping", name, model_cfg.sdk)
            continue
        try:
            judges[name] = judge_cls(model_cfg)
        except Exception as exc:
            logger.warning("Failed to instantiate judge '%s': %s", name, exc)
    return judges


def _select_judge(config: AppConfig, judge_name: str, skip_health_check: bool) -> JudgeClient | None:
    """Build and ping the named judge.

    Returns None when the user agrees to continue on heuristics after the
    judge fails its health check. Exits when the judge is unavailable.
    """
    judges = _build_all_judges(config)
    judge = judges.get(judge_name)
    if judge is None:
        available = ", ".join(sorted(judges)) or "none"
        console.print(
            f"[bold red]Error:[/bold red] Judge '{judge_name}' is not available "
            f"(available: {available}). Check API keys in .env."
        )
        sys.exit(1)

    if skip_health_check:
        return judge

    console.print("\n[bold]Checking judge...[/bold]")
    results = asyncio.run(run_health_checks({judge_name: judge}))
    ok, err = results[judge_name]
    if ok:
        console.print(f"  [green]OK  [/green] {judge_name} ({judge.model_string()})\n")
        return judge

    short_err = err.splitlines()[0][:120] if err else "unknown error"
    console.print(f"  [red]FAIL[/red] {judge_name}: {short_err}")
    if not click.confirm("Continue with heuristics only?", default=True):
        sys.exit(0)
    console.print()
    return None


@click.group()
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to settings.yaml (default: bundled config)",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, settings_path: Path | None) -> None:
    """Duelogic -- adjudicate chair responses in a multi-framework debate.

    \b
    Examples:
      duelogic scan "I appreciate the utilitarian point, but..."
      duelogic evaluate response.md --accountability strict
      duelogic evaluate response.md --quick
      duelogic interrupt turn.md --speaker chair_1
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)
    ctx.obj = {"settings_path": settings_path}


@main.command()
@click.argument("text", required=False)
@click.option("--file", "text_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Read the text from a .md file")
def scan(text: str | None, text_file: Path | None) -> None:
    """Run the heuristic matchers only. No judge is called."""
    if text_file:
        content, _ = parse_response_file(text_file)
    elif text:
        content = text
    else:
        console.print("[bold red]Error:[/bold red] Provide a TEXT argument or --file.")
        sys.exit(1)

    print_scan(
        content,
        quick_steel_man_check(content),
        quick_self_critique_check(content),
        quick_interrupt_check(content),
    )


@main.command()
@click.argument("response_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--accountability", type=click.Choice(ACCOUNTABILITY_LEVELS), default=None,
              help="Override the configured accountability level")
@click.option("--quick", is_flag=True, default=False, help="Heuristics only, no judge call")
@click.option("--judge", "judge_name", default=None, help="Judge model name (default: from config)")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the judge connectivity check")
@click.pass_obj
def evaluate(
    obj: dict,
    response_file: Path,
    accountability: str | None,
    quick: bool,
    judge_name: str | None,
    skip_health_check: bool,
) -> None:
    """Score one chair response for Duelogic adherence."""
    config = _load_app_config(obj["settings_path"])
    content, meta = parse_response_file(response_file)
    chair = chair_from_metadata(meta)
    context = EvaluationContext(
        chair=chair,
        response_content=content,
        debate_history=str(meta.get("debate_history", "")),
        previous_speaker=previous_chair_from_metadata(meta),
        previous_content=meta.get("previous_content"),
    )

    if quick:
        evaluator = create_quick_evaluator(config.frameworks)
    else:
        judge = _select_judge(config, judge_name or config.duelogic.arbiter.judge, skip_health_check)
        evaluator = ResponseEvaluator(
            judge,
            accountability_level=accountability or config.duelogic.arbiter.accountability_level,
            debate_id=_CLI_DEBATE_ID,
            enable_persistence=False,
            frameworks=config.frameworks,
        )

    result = asyncio.run(evaluator.evaluate(context))
    arbiter_allowed = (
        config.duelogic.interruptions.allow_arbiter_interruptions and config.duelogic.mandates.arbiter_can_interject
    )
    print_evaluation(
        chair,
        result,
        evaluator.determine_violation_type(result.evaluation),
        evaluator.should_interject(result.evaluation, arbiter_allowed),
    )


@main.command()
@click.argument("content_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--speaker", default=None, help="Position of the current speaker (default: frontmatter or first chair)")
@click.option("--judge", "judge_name", default=None, help="Judge model name (default: from config)")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the judge connectivity check")
@click.pass_obj
def interrupt(
    obj: dict,
    content_file: Path,
    speaker: str | None,
    judge_name: str | None,
    skip_health_check: bool,
) -> None:
    """Decide whether another configured chair should interrupt this speaker."""
    config = _load_app_config(obj["settings_path"])
    content, meta = parse_response_file(content_file)
    chairs = config.duelogic.chairs

    position = speaker or str(meta.get("position", chairs[0].position))
    current = next((c for c in chairs if c.position == position), None)
    if current is None:
        known = ", ".join(c.position for c in chairs)
        console.print(f"[bold red]Error:[/bold red] Unknown speaker '{position}' (configured: {known})")
        sys.exit(1)

    judge = _select_judge(config, judge_name or config.duelogic.arbiter.judge, skip_health_check)
    engine = ChairInterruptionEngine(
        judge,
        config.duelogic,
        _CLI_DEBATE_ID,
        enable_persistence=False,
        frameworks=config.frameworks,
    )
    context = InterruptEvaluationContext(
        current_speaker=current,
        other_chairs=[c for c in chairs if c.position != position],
        recent_content=content,
        debate_so_far=str(meta.get("debate_history", "")),
        topic=str(meta.get("topic", config.duelogic.topic)),
    )

    candidate = asyncio.run(engine.evaluate_interrupt(context))
    print_interrupt(current, candidate, engine.get_urgency_threshold())


if __name__ == "__main__":
    main()
