"""
Command line interface for the ai_commit tool.

This module defines the ``main`` click group used as the entry point of
the ``ai-commit`` command. The commands are thin wrappers: they locate
the repository, load the configuration, read the staged change set,
hand it to :class:`CommitMessageGenerator` and present or commit the
result. Exit codes are defined at the top of this module.
"""

from __future__ import annotations

import functools
import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, List, Optional

import click

from ai_commit import __version__
from ai_commit.analysis.models import ChangeSet
from ai_commit.cache import SuggestionCache
from ai_commit.config.loader import (
    AssistantConfig,
    ConfigError,
    load_config,
    parse_config_value,
    save_config,
)
from ai_commit.llm.commit_message_generator import CommitMessageGenerator, GenerationOutcome
from ai_commit.llm.ollama_client import OllamaClient, resolve_model
from ai_commit.suggestion import VERBOSITY_LEVELS, GenerationOptions, Suggestion
from ai_commit.vcs.git_client import GitClient, GitError, NotARepositoryError

# Create a module-level logger. Attach a null handler and disable
# propagation to avoid logging errors when the root logger's stream is
# closed (such as during unit tests).
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_NO_CHANGES = 4
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_DECLINED = 8


# ---------------------------------------------------------------------------
# Progress and status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Simple progress indicator for user feedback."""

    def __init__(self, message: str):
        self.message = message
        self.start_time = 0.0

    def __enter__(self):
        self.start_time = time.time()
        click.echo(f"→ {self.message}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            elapsed = time.time() - self.start_time
            click.echo(f"  ✓ Done ({elapsed:.1f}s)")
        return False


def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}")


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}")


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def configure_logging(verbose: bool) -> None:
    """Configure root logging; ``--verbose`` also shows ai_commit's own loggers."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    if verbose:
        for name in list(logging.root.manager.loggerDict):
            if name == "ai_commit" or name.startswith("ai_commit."):
                logging.getLogger(name).propagate = True


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Map known exceptions of a command onto exit codes."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.exceptions.Exit, click.exceptions.Abort, click.ClickException):
            raise
        except NotARepositoryError as exc:
            print_error(f"Not a Git repository: {exc}")
            raise click.exceptions.Exit(EXIT_NO_REPO)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
        except GitError as exc:
            print_error(f"Git error: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)
        except Exception as exc:
            logger.exception("Unhandled error: %s", exc)
            print_error(f"Unexpected error: {exc}")
            raise click.exceptions.Exit(EXIT_GENERIC_ERROR)

    return wrapper


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def open_repository(start: Path) -> GitClient:
    """Return a client for the repository containing ``start`` or exit."""
    try:
        return GitClient.discover(start)
    except NotARepositoryError:
        print_error("Not a Git repository (or any of the parent directories).")
        raise click.exceptions.Exit(EXIT_NO_REPO)


def read_staged_changes(client: GitClient) -> ChangeSet:
    """Read the staged change set, exiting when nothing is staged."""
    with ProgressIndicator("Analyzing staged changes"):
        change_set = client.get_staged_changes()
    if not change_set.has_changes:
        print_warning("No staged changes found")
        print_info("Stage some changes first using: git add <files>", indent=1)
        raise click.exceptions.Exit(EXIT_NO_CHANGES)
    print_success(f"Found changes: {change_set.summary}")
    return change_set


def show_change_set(change_set: ChangeSet) -> None:
    for change in change_set.files:
        click.echo(click.style(f"📄 {change.path}", fg="cyan"))
        click.echo(f"   Status: {change.status.value} | +{change.additions} -{change.deletions}")
    if change_set.degraded_files:
        print_warning(
            f"Could not read the diff of {len(change_set.degraded_files)} file(s); "
            "they are listed without statistics:"
        )
        for path in change_set.degraded_files:
            print_info(path, indent=1)


def build_generator(config: AssistantConfig, model_override: Optional[str] = None) -> CommitMessageGenerator:
    """Create the generator from configuration and command-line overrides."""
    ollama_client = OllamaClient(
        base_url=config.base_url,
        port=config.port,
        model=resolve_model(model_override or config.model),
        max_tokens=config.max_tokens,
    )
    return CommitMessageGenerator(ollama_client, timeout=config.timeout)


def build_options(
    config: AssistantConfig,
    temperature: Optional[float],
    max_tokens: Optional[int],
    verbosity: Optional[str],
    include_body: bool,
    no_body: bool,
) -> GenerationOptions:
    if include_body and no_body:
        raise click.UsageError("--include-body and --no-body cannot be used together.")
    body_override: Optional[bool] = None
    if include_body:
        body_override = True
    elif no_body:
        body_override = False
    return config.generation_options(
        temperature=temperature,
        max_tokens=max_tokens,
        verbosity=verbosity,
        include_body=body_override,
    )


def generate_suggestions(
    generator: CommitMessageGenerator, change_set: ChangeSet, options: GenerationOptions
) -> List[Suggestion]:
    with ProgressIndicator("Generating commit message suggestions"):
        outcome: GenerationOutcome = generator.run(change_set, options)
    if outcome.fallback_reason:
        print_info(f"Using heuristic suggestions ({outcome.fallback_reason})", indent=1)
    return outcome.suggestions


def print_suggestion(index: int, suggestion: Suggestion) -> None:
    click.echo(click.style(f"{index}. {suggestion.full_message}", bold=True))
    scope = f"({suggestion.scope})" if suggestion.scope else ""
    click.echo(f"   Type: {suggestion.type}{scope} | Confidence: {suggestion.confidence * 100:.0f}%")
    if suggestion.breaking:
        click.echo(click.style("   ⚠️  BREAKING CHANGE", fg="red"))
    click.echo("")


def best_suggestion(suggestions: List[Suggestion]) -> Suggestion:
    """Highest confidence wins; the earlier suggestion wins ties."""
    best = suggestions[0]
    for candidate in suggestions[1:]:
        if candidate.confidence > best.confidence:
            best = candidate
    return best


def select_suggestion(suggestions: List[Suggestion]) -> Optional[Suggestion]:
    """Ask the user to pick a suggestion; 0 cancels."""
    choice = click.prompt(
        f"Select a suggestion (1-{len(suggestions)}, 0 to cancel)",
        type=click.IntRange(0, len(suggestions)),
        default=1,
    )
    if choice == 0:
        return None
    return suggestions[choice - 1]


def generation_flags(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by ``review`` and ``commit``."""
    flags = [
        click.option("-t", "--temperature", type=click.FloatRange(0, 1, min_open=True), default=None,
                     help="Model temperature (0.0-1.0)."),
        click.option("-m", "--max-tokens", type=click.IntRange(min=1), default=None,
                     help="Maximum tokens to generate."),
        click.option("-v", "--verbosity", type=click.Choice(VERBOSITY_LEVELS), default=None,
                     help="Verbosity level of the message."),
        click.option("-b", "--include-body", is_flag=True, help="Include a body in the suggestions."),
        click.option("--no-body", is_flag=True, help="Drop bodies from the suggestions."),
        click.option("--model", default=None, help="Model identifier; 'none' disables the model."),
    ]
    for flag in reversed(flags):
        func = flag(func)
    return func


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="ai-commit")
def main(verbose: bool) -> None:
    """🤖 AI-powered Git commit assistant.

    Analyzes your staged changes and suggests Conventional Commit messages,
    using a local language model when available and heuristics otherwise.
    """
    configure_logging(verbose)


@main.command()
@click.option("-i", "--interactive", is_flag=True, help="Select a suggestion and commit it.")
@generation_flags
@handle_errors
def review(
    interactive: bool,
    temperature: Optional[float],
    max_tokens: Optional[int],
    verbosity: Optional[str],
    include_body: bool,
    no_body: bool,
    model: Optional[str],
) -> None:
    """Review staged changes and get commit message suggestions."""
    client = open_repository(Path.cwd())
    config = load_config(client.repo_root)
    change_set = read_staged_changes(client)
    show_change_set(change_set)

    options = build_options(config, temperature, max_tokens, verbosity, include_body, no_body)
    suggestions = generate_suggestions(build_generator(config, model), change_set, options)
    SuggestionCache.for_repo(client.repo_root).store(suggestions, change_set.summary)

    click.echo("")
    click.echo(click.style("📝 Commit Message Suggestions:", fg="green"))
    click.echo("")
    for index, suggestion in enumerate(suggestions, start=1):
        print_suggestion(index, suggestion)

    if not interactive:
        return
    selected = select_suggestion(suggestions)
    if selected is None:
        print_warning("No suggestion selected; nothing committed.")
        raise click.exceptions.Exit(EXIT_DECLINED)
    client.commit(selected.full_message)
    SuggestionCache.for_repo(client.repo_root).clear()
    print_success("Commit created successfully!")


@main.command()
@click.option("--no-confirm", is_flag=True, help="Skip the confirmation prompt.")
@generation_flags
@handle_errors
def commit(
    no_confirm: bool,
    temperature: Optional[float],
    max_tokens: Optional[int],
    verbosity: Optional[str],
    include_body: bool,
    no_body: bool,
    model: Optional[str],
) -> None:
    """Commit staged changes with the best generated message."""
    client = open_repository(Path.cwd())
    config = load_config(client.repo_root)
    change_set = read_staged_changes(client)
    cache = SuggestionCache.for_repo(client.repo_root)

    suggestions = cache.lookup(change_set.summary)
    if suggestions:
        print_info("Using suggestions from recent review")
    else:
        options = build_options(config, temperature, max_tokens, verbosity, include_body, no_body)
        suggestions = generate_suggestions(build_generator(config, model), change_set, options)
        cache.store(suggestions, change_set.summary)

    best = best_suggestion(suggestions)
    click.echo(click.style("📝 Generated message:", fg="green"))
    click.echo(best.full_message)
    click.echo("")

    if not no_confirm and not click.confirm("Proceed with commit?", default=False):
        print_warning("Commit cancelled")
        raise click.exceptions.Exit(EXIT_DECLINED)

    client.commit(best.full_message)
    cache.clear()
    print_success("Commit created successfully!")


@main.command("config")
@click.argument("key", required=False)
@click.argument("value", required=False)
@handle_errors
def config_command(key: Optional[str], value: Optional[str]) -> None:
    """Show or change settings stored in .ai-commit.json."""
    cwd = Path.cwd()
    root = GitClient.find_repo_root(cwd) or cwd
    config = load_config(root)

    if not key:
        click.echo("Current configuration:")
        click.echo(json.dumps(config.to_dict(), indent=2))
        return
    if value is None:
        current = config.get(key)
        click.echo(f"{key}: {current if current is not None else 'not set'}")
        return

    updated = config.with_value(key, parse_config_value(value, key))
    save_config(updated, root)
    print_success("Configuration saved")


@main.command()
@handle_errors
def status() -> None:
    """Show branch, staged changes and recent commits."""
    client = open_repository(Path.cwd())
    branch = client.get_current_branch()
    change_set = client.get_staged_changes()
    recent = client.get_recent_commits(3)

    click.echo("📊 Repository Status")
    click.echo("─" * 30)
    click.echo(f"Branch: {click.style(branch, fg='cyan')}")
    staged = change_set.summary if change_set.has_changes else "None"
    click.echo(f"Staged changes: {staged}")

    if change_set.has_changes:
        click.echo("")
        click.echo("Staged files:")
        for change in change_set.files:
            click.echo(f"  {change.path} ({change.status.value})")

    click.echo("")
    click.echo("Recent commits:")
    for index, subject in enumerate(recent, start=1):
        click.echo(f"  {index}. {subject}")
