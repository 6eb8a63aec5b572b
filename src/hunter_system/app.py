"""Interactive CLI application."""
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from hunter_system.assessment import answer_question, load_questions, max_score
from hunter_system.config import Settings, get_settings
from hunter_system.dashboard import (
    get_quest_stats, get_rank_color, get_streak_color, get_streak_tier,
    hunter_stats, progress_bar,
)
from hunter_system.db import init_db
from hunter_system.progress import (
    HunterSystemError, complete_quest, get_or_create_hunter, get_progress_summary,
    get_todays_quests, record_assessment, reset_progress,
)
from hunter_system.ranks import DEFAULT_LADDER, RankLadder

console = Console()

EXIT_WORDS = ("q", "quit", "menu")


class SessionExitRequested(Exception):
    """Raised when the user backs out of a multi-step prompt."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = session_prompt(prompt, choices=choices + list(EXIT_WORDS), show_choices=False)
    return int(answer)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]HUNTER SYSTEM[/bold]\n[dim]Complete daily quests. Rise through the ranks.[/dim]",
        title="Welcome", border_style="cyan",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("assess", "Take the awakening assessment"),
        ("quests", "Today's quests"),
        ("complete", "Complete a quest"),
        ("dashboard", "Rank, XP and streak"),
        ("ladder", "View the rank ladder"),
        ("reset", "Reset a hunter (admin)"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def cmd_assess(db_path: str, hunter_id: str, ladder: RankLadder = DEFAULT_LADDER):
    questions = load_questions()
    console.print(f"\n[bold]Awakening Assessment[/bold]: {len(questions)} questions "
                  "[dim](type q to stop)[/dim]\n")
    answers = []
    try:
        for i, question in enumerate(questions, 1):
            console.print(f"[bold]Q{i}.[/bold] {question.text} [dim]({question.category.value})[/dim]")
            for n, text in enumerate(question.answers, 1):
                console.print(f"  [cyan]{n})[/cyan] {text}")
            choice = session_int_prompt("Your answer", choices=[str(n) for n in range(1, len(question.answers) + 1)])
            answers.append(answer_question(question, choice))
            console.print()
    except SessionExitRequested:
        console.print("[yellow]Assessment abandoned. Nothing was saved.[/yellow]")
        return None

    result = record_assessment(db_path, hunter_id, answers, ladder=ladder)
    color = get_rank_color(result["rank"])
    console.print(Panel(
        f"Score: [bold]{result['total_score']}[/bold] / {max_score()}\n"
        f"Rank: [{color}]{result['rank'].value}[/{color}]",
        title="Rank Revealed", border_style=color,
    ))
    table = Table(title="Hunter Stats")
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")
    for category, value in result["stats"].items():
        table.add_row(category, str(value))
    console.print(table)
    return result


def show_quests(quests: list) -> None:
    table = Table(title="Daily Quests")
    table.add_column("#", justify="right")
    table.add_column("Quest", style="bold")
    table.add_column("Category", style="cyan")
    table.add_column("XP", justify="right")
    table.add_column("Status")
    for i, quest in enumerate(quests, 1):
        status = "[green]Done[/green]" if quest.completed else "[dim]Open[/dim]"
        table.add_row(
            str(i),
            f"{quest.title}\n[dim]{quest.description}[/dim]",
            quest.category.value,
            f"+{quest.xp_reward}",
            status,
        )
    console.print(table)
    done = sum(1 for q in quests if q.completed)
    console.print(f"  Completed [bold]{done}/{len(quests)}[/bold]")


def cmd_quests(db_path: str, hunter_id: str):
    quests = get_todays_quests(db_path, hunter_id)
    show_quests(quests)
    return quests


def cmd_complete(db_path: str, hunter_id: str, ladder: RankLadder = DEFAULT_LADDER):
    quests = get_todays_quests(db_path, hunter_id)
    open_quests = [(i, q) for i, q in enumerate(quests, 1) if not q.completed]
    if not open_quests:
        console.print("[green]All of today's quests are complete. Return tomorrow.[/green]")
        return None
    show_quests(quests)
    try:
        choice = session_int_prompt("Quest number", choices=[str(i) for i, _ in open_quests])
    except SessionExitRequested:
        return None
    quest = quests[choice - 1]
    result = complete_quest(db_path, hunter_id, quest.id, ladder=ladder)
    if result["newly_completed"]:
        console.print(f"[green]Quest Complete! You gained +{result['xp_gained']} XP[/green]")
    if result["rank_changed"]:
        color = get_rank_color(result["rank"])
        console.print(Panel(f"You are now [{color}]{result['rank'].value}-Rank[/{color}]",
                            title="RANK UP", border_style=color))
    if result["all_completed"]:
        console.print(f"[bold cyan]Daily quests cleared. Streak: {result['streak_days']} days[/bold cyan]")
    return result


def cmd_dashboard(db_path: str, hunter_id: str, ladder: RankLadder = DEFAULT_LADDER):
    summary = get_progress_summary(db_path, hunter_id, ladder=ladder)
    rank = summary["current_rank"]
    color = get_rank_color(rank)
    xp = summary["xp_progress"]
    days = summary["days_progress"]

    console.print(Panel(
        f"[{color}]{summary['rank_name']}[/{color}]\n[dim]{summary['rank_description']}[/dim]",
        title="Hunter Status", border_style=color,
    ))

    if summary["is_max_rank"]:
        console.print(f"\n  XP:   [bold]{summary['total_xp']}[/bold] [{color}]{progress_bar(100)}[/{color}] MAX RANK")
    else:
        console.print(
            f"\n  XP:   [bold]{xp.current}/{xp.max}[/bold] "
            f"[{color}]{progress_bar(xp.percentage)}[/{color}] {xp.percentage:.0f}% "
            f"to {summary['next_rank'].value}"
        )
        console.print(
            f"  Days: [bold]{days.days_completed}/{days.days_required}[/bold] "
            f"{progress_bar(days.percentage)} {days.days_remaining} days remaining"
        )

    streak = summary["streak_days"]
    streak_color = get_streak_color(streak)
    console.print(
        f"\n  Streak: [{streak_color}]{streak} days ({get_streak_tier(streak)})[/{streak_color}]"
        f"  |  XP boost: [bold]+{summary['streak_boost']}%[/bold]"
        f"  |  Today: [bold]{summary['quests_done_today']}[/bold] quests"
    )

    table = Table(title="Category Mastery")
    table.add_column("Category", style="cyan")
    table.add_column("Assessment", justify="right")
    table.add_column("Quests", justify="right")
    for category, value in hunter_stats(db_path, hunter_id).items():
        table.add_row(category, str(summary["stats"].get(category, "-")), f"{value}%")
    console.print(table)

    stats = get_quest_stats(db_path, hunter_id)
    console.print(f"\n  Quests: [bold]{stats['quests_completed']}[/bold]  |  "
                  f"Quest XP: [bold]{stats['quest_xp_earned']}[/bold]  |  "
                  f"Active days: [bold]{stats['days_active']}[/bold]  |  "
                  f"Full clears: [bold]{stats['full_clear_days']}[/bold]")
    return summary


def cmd_ladder(ladder: RankLadder = DEFAULT_LADDER):
    table = Table(title="Rank Ladder")
    table.add_column("Rank")
    table.add_column("Min XP", justify="right")
    table.add_column("XP to Next", justify="right")
    table.add_column("Days to Next", justify="right")
    table.add_column("Description")
    for config in ladder:
        color = get_rank_color(config.id)
        table.add_row(
            f"[{color}]{config.id.value}[/{color}]",
            str(config.min_xp),
            str(config.xp_to_next) if config.xp_to_next else "-",
            str(config.days_to_next) if config.days_to_next else "-",
            config.description,
        )
    console.print(table)


def cmd_reset(db_path: str, hunter_id: str, ladder: RankLadder = DEFAULT_LADDER):
    target = Prompt.ask("Hunter id to reset", default=hunter_id)
    confirm = Prompt.ask(f"Reset all progress for {target}?", choices=["y", "n"], default="n")
    if confirm != "y":
        return
    reset_progress(db_path, hunter_id, target, ladder=ladder)
    console.print(f"[yellow]Progress for {target} has been reset.[/yellow]")


def main(settings: Settings = None):
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    ladder = settings.load_ladder()
    db_path = settings.db_path
    init_db(db_path)
    hunter = get_or_create_hunter(db_path, settings.hunter_id, settings.hunter_email, settings=settings)

    show_welcome()
    if hunter.assessment_score is None:
        console.print("[dim]No assessment on record. Type 'assess' to awaken your rank.[/dim]")

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="quests").strip().lower()
        try:
            if choice == "assess":
                cmd_assess(db_path, hunter.id, ladder)
            elif choice == "quests":
                cmd_quests(db_path, hunter.id)
            elif choice == "complete":
                cmd_complete(db_path, hunter.id, ladder)
            elif choice == "dashboard":
                cmd_dashboard(db_path, hunter.id, ladder)
            elif choice == "ladder":
                cmd_ladder(ladder)
            elif choice == "reset":
                cmd_reset(db_path, hunter.id, ladder)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]The dungeon never sleeps. See you tomorrow, Hunter.[/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except HunterSystemError as e:
            console.print(f"[red]{e}[/red]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
