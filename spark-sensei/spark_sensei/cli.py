"""
Command-Line Interface

CLI using rich for colored output, progress indicators, and formatted
results. Entry point for analyzing images and managing settings.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .analyzer import ApiKeyRequiredError, SenseiAnalyzer, SetupRequiredError
from .config import ENV_VARS, load_config
from .models import TIER_FEATURES, TIER_PRICING, AnalysisResult, ProviderType, SubscriptionTier
from .providers import AnalysisError
from .storage import SettingsStore


console = Console()

PROVIDER_CHOICES = [p.value for p in ProviderType]

API_KEY_URLS = {
    ProviderType.CLAUDE: "https://console.anthropic.com",
    ProviderType.OPENAI: "https://platform.openai.com/api-keys",
    ProviderType.GEMINI: "https://makersuite.google.com/app/apikey",
}

SECTIONS = [
    ("diagnosis", "🛑", "DIAGNOSIS", "red"),
    ("details", "🔍", "DETAILS", "blue"),
    ("fix", "💡", "THE FIX", "green"),
    ("note", "🎓", "SENSEI'S NOTE", "yellow"),
]


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)]
    )


@click.group()
@click.option(
    '--env-file',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to .env file (defaults to ./.env)'
)
@click.option(
    '--settings',
    'settings_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Settings file (defaults to SPARK_SENSEI_SETTINGS or ~/.spark-sensei/settings.json)'
)
@click.option('--debug', is_flag=True, help='Verbose logging and tracebacks')
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, env_file: Optional[Path], settings_path: Optional[Path], debug: bool):
    """
    Spark Sensei - Hardware & Code Critique

    Photograph a breadboard or screenshot your code and get a stern
    but helpful critique from a vision AI.

    Examples:

      # Pick a provider and store its key
      spark-sensei config set-provider claude
      spark-sensei config set-key claude

      # Analyze an image
      spark-sensei analyze breadboard.jpg

      # JSON output for scripts
      spark-sensei analyze code.png --output json
    """
    _setup_logging(debug)
    try:
        config = load_config(env_file)
    except ValidationError as e:
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else ""
            console.print(
                f"[red]❌ Configuration error: {ENV_VARS.get(field, field)}: {escape(error['msg'])}[/red]"
            )
        sys.exit(1)

    if settings_path is not None:
        config = config.model_copy(update={"settings_path": settings_path.expanduser()})

    ctx.obj = {
        "config": config,
        "store": SettingsStore(config.settings_path),
        "debug": debug,
    }


@main.command()
@click.argument('image')
@click.option(
    '--provider',
    default=None,
    type=click.Choice(PROVIDER_CHOICES, case_sensitive=False),
    help='Vision provider to use. Defaults to the saved provider'
)
@click.option(
    '--output',
    default='rich',
    type=click.Choice(['rich', 'json'], case_sensitive=False),
    help='Output format: rich (colored terminal) or json'
)
@click.pass_obj
def analyze(obj: dict, image: str, provider: Optional[str], output: str):
    """
    Analyze IMAGE (path, file:// URI or data URL).
    """
    analyzer = SenseiAnalyzer(obj["store"], obj["config"])

    try:
        result = asyncio.run(_run_analysis(analyzer, image, provider, show_progress=output == 'rich'))
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Interrupted by user[/yellow]")
        sys.exit(130)
    except SetupRequiredError as e:
        console.print(f"[red]❌ Setup Required: {str(e)}[/red]")
        console.print("\nRun: spark-sensei config set-provider <claude|openai|gemini>")
        sys.exit(1)
    except ApiKeyRequiredError as e:
        console.print(f"[red]❌ API Key Required: {str(e)}[/red]")
        console.print(f"\nRun: spark-sensei config set-key {e.provider_type.value}")
        console.print(f"[dim]Get a key at {API_KEY_URLS[e.provider_type]}[/dim]")
        sys.exit(1)
    except (AnalysisError, ValueError) as e:
        console.print(f"[red]❌ Analysis Failed: {str(e)}[/red]")
        if obj["debug"]:
            console.print_exception()
        sys.exit(1)

    if output == 'json':
        _output_json(result)
    else:
        _output_rich(result)


async def _run_analysis(
    analyzer: SenseiAnalyzer,
    image: str,
    provider: Optional[str],
    show_progress: bool
) -> AnalysisResult:
    """Run the analysis with a spinner"""
    if not show_progress:
        return await analyzer.analyze(image, provider)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True
    ) as progress:
        progress.add_task("[cyan]Sensei is analyzing your image...", total=None)
        return await analyzer.analyze(image, provider)


def _output_rich(result: AnalysisResult):
    """Output result as one panel per section"""

    console.print()
    console.print(Panel.fit(
        f"[bold]ANALYSIS COMPLETE[/bold]\n"
        f"Provider: {result.provider}",
        border_style="green"
    ))

    for field, icon, title, color in SECTIONS:
        console.print(Panel(
            Markdown(getattr(result, field)),
            title=f"{icon} [bold]{title}[/bold]",
            title_align="left",
            border_style=color
        ))

    if not result.is_complete:
        console.print("[dim]Some sections could not be parsed. Raw response:[/dim]")
        console.print(result.raw_response or "", markup=False)

    console.print()


def _output_json(result: AnalysisResult):
    """Output result as JSON"""
    print(json.dumps(result.model_dump(), indent=2, ensure_ascii=False))


@main.group()
def config():
    """Manage provider choice and API keys."""


@config.command('set-provider')
@click.argument('provider', type=click.Choice(PROVIDER_CHOICES, case_sensitive=False))
@click.pass_obj
def set_provider(obj: dict, provider: str):
    """Choose the AI provider used by default."""
    obj["store"].save_provider_type(provider)
    console.print(f"[green]✓ Provider set to {provider}[/green]")


@config.command('set-key')
@click.argument('provider', type=click.Choice(PROVIDER_CHOICES, case_sensitive=False))
@click.argument('api_key', required=False)
@click.pass_obj
def set_key(obj: dict, provider: str, api_key: Optional[str]):
    """Store the API key for PROVIDER (prompted when omitted)."""
    if api_key is None:
        api_key = click.prompt(f"{provider} API key", hide_input=True)

    if not api_key.strip():
        console.print(f"[red]❌ Please enter an API key for {provider}[/red]")
        sys.exit(1)

    obj["store"].save_api_key(provider, api_key)
    console.print(f"[green]✓ API key saved for {provider}[/green]")


@config.command('delete-key')
@click.argument('provider', type=click.Choice(PROVIDER_CHOICES, case_sensitive=False))
@click.pass_obj
def delete_key(obj: dict, provider: str):
    """Remove the stored API key for PROVIDER."""
    obj["store"].delete_api_key(provider)
    console.print(f"[green]✓ API key removed for {provider}[/green]")


@config.command('show')
@click.pass_obj
def show_config(obj: dict):
    """Show current provider and which keys are set."""
    store: SettingsStore = obj["store"]
    app_config = obj["config"]
    current = store.get_provider_type() or app_config.default_provider

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Provider", style="cyan")
    table.add_column("Model")
    table.add_column("API key")
    table.add_column("Active", justify="center")

    for provider_type in ProviderType:
        saved = store.get_api_key(provider_type)
        if saved:
            key_text = _mask_key(saved)
        elif app_config.api_key_for(provider_type):
            key_text = f"{_mask_key(app_config.api_key_for(provider_type))} (env)"
        else:
            key_text = "[dim]not set[/dim]"

        table.add_row(
            provider_type.value,
            app_config.model_for(provider_type),
            key_text,
            "✅" if provider_type == current else ""
        )

    console.print(table)
    console.print(f"[dim]Settings file: {store.path}[/dim]")


@config.command('clear')
@click.confirmation_option(prompt='Remove provider choice and all stored API keys?')
@click.pass_obj
def clear_config(obj: dict):
    """Remove provider choice and every stored API key."""
    obj["store"].clear_all()
    console.print("[green]✓ Settings cleared[/green]")


@main.group()
def subscription():
    """View or change the subscription plan."""


@subscription.command('show')
@click.pass_obj
def show_subscription(obj: dict):
    """Show current plan, today's usage and plan features."""
    status = obj["store"].get_subscription_status()

    console.print(Panel.fit(
        f"[bold]CURRENT PLAN: {status.tier.value.upper()}[/bold]\n"
        f"Analyses today: {status.analysis_count}",
        border_style="cyan"
    ))

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Feature", style="cyan")
    for tier in SubscriptionTier:
        table.add_column(tier.value.upper(), justify="center")

    for feature in TIER_FEATURES[SubscriptionTier.FREE].model_dump():
        table.add_row(
            feature.replace("_", " ").capitalize(),
            *("✓" if getattr(TIER_FEATURES[tier], feature) else "" for tier in SubscriptionTier)
        )

    table.add_row(
        "Price (monthly / yearly)",
        "$0",
        *(f"${TIER_PRICING[tier]['monthly']} / ${TIER_PRICING[tier]['yearly']}"
          for tier in (SubscriptionTier.PREMIUM, SubscriptionTier.PRO))
    )
    console.print(table)


@subscription.command('change')
@click.argument('tier', type=click.Choice([t.value for t in SubscriptionTier], case_sensitive=False))
@click.pass_obj
def change_subscription(obj: dict, tier: str):
    """Switch to TIER (local demo, no payment)."""
    store: SettingsStore = obj["store"]
    new_tier = SubscriptionTier(tier)

    if new_tier == SubscriptionTier.PREMIUM:
        status = store.upgrade_to_premium()
    elif new_tier == SubscriptionTier.PRO:
        status = store.upgrade_to_pro()
    else:
        status = store.reset_to_free()

    console.print(f"[green]✓ Plan changed to {status.tier.value.upper()}[/green]")


def _mask_key(api_key: str) -> str:
    """Show only the first few characters of a key"""
    if len(api_key) <= 8:
        return "*" * len(api_key)
    return f"{api_key[:6]}…{'*' * 4}"


if __name__ == "__main__":
    main()
