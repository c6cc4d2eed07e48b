"""
Command-line interface for the schedule pipeline.
Usage examples:
  python -m olympics_schedule.apps.cli run
  python -m olympics_schedule.apps.cli run --ttl 60 --noc FIN
  python -m olympics_schedule.apps.cli run --noc GER --nationality-word germany
  python -m olympics_schedule.apps.cli run --no-athletes
  python -m olympics_schedule.apps.cli extract saved_page.html
  python -m olympics_schedule.apps.cli cache-status
"""

import asyncio
import json
from typing import Any, Optional

import click

from olympics_schedule.common.logging_utils import configure_logging, get_logger
from olympics_schedule.core.config import Settings, settings
from olympics_schedule.data_collection.fallback import fallback_schedule
from olympics_schedule.data_collection.orchestrator import SchedulePipeline
from olympics_schedule.data_collection.pattern_extractor import PatternExtractor
from olympics_schedule.data_collection.record_normalizer import RecordNormalizer
from olympics_schedule.domain.contracts import serialize_items


def _settings_with(**overrides: Any) -> Settings:
    """Settings mit CLI-Overrides; ohne Overrides die globale Instanz"""
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if not overrides:
        return settings
    return Settings(**{**settings.model_dump(), **overrides})


def _nationality_overrides(word: Optional[str]) -> dict[str, Any]:
    """Filterwort und DOM-Hint-Tokens ändern sich immer gemeinsam"""
    if not word:
        return {}
    word = word.strip().lower()
    return {"nationality_word": word, "dom_hint_tokens": [word]}


@click.group()
def cli():
    """Olympics schedule extraction pipeline"""
    configure_logging("olympics-schedule", level=settings.log_level)


@cli.command()
@click.option("--ttl", type=int, default=None, help="Cache TTL in seconds (0 disables). Overrides CACHE_TTL_SECONDS.")
@click.option("--noc", default=None, help="Nationality code for the athletes feed, e.g. FIN.")
@click.option(
    "--nationality-word",
    default=None,
    help="Nation name clicked in the filter panel, e.g. germany. Required when --noc changes the nation.",
)
@click.option("--no-athletes", is_flag=True, default=False, help="Unfiltered run without athletes feed.")
def run(ttl: Optional[int], noc: Optional[str], nationality_word: Optional[str], no_athletes: bool):
    """Scrape (or reuse the cache) and write all artifacts"""
    if noc and not no_athletes and not nationality_word and noc.strip().upper() != settings.target_noc:
        raise click.UsageError(
            f"--noc {noc} differs from the configured {settings.target_noc}; pass --nationality-word as well"
        )
    cfg = _settings_with(
        cache_ttl_seconds=ttl,
        target_noc="" if no_athletes else noc,
        **_nationality_overrides(nationality_word),
    )
    logger = get_logger("cli")
    try:
        summary = asyncio.run(SchedulePipeline(cfg).run())
    except OSError as e:
        logger.error(f"Writing artifacts failed: {e}")
        raise SystemExit(1)
    click.echo(json.dumps(summary, ensure_ascii=False))


@cli.command()
@click.argument("markup_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--fallback/--no-fallback", default=True, help="Print the fallback schedule when nothing is found.")
def extract(markup_file: str, fallback: bool):
    """Extract the schedule from a saved page and print it as JSON"""
    with open(markup_file, encoding="utf-8") as f:
        markup = f.read()
    extractor = PatternExtractor.from_settings(settings)
    schedule = RecordNormalizer(tz_name=settings.source_timezone).normalize(extractor.extract(markup))
    if not schedule and fallback:
        get_logger("cli").warning("No events extracted, printing fallback schedule")
        schedule = fallback_schedule()
    click.echo(json.dumps(serialize_items(schedule), ensure_ascii=False, indent=2))


@cli.command(name="cache-status")
@click.option("--ttl", type=int, default=None, help="Cache TTL in seconds to evaluate against.")
def cache_status(ttl: Optional[int]):
    """Report FRESH/STALE for every artifact of a run"""
    pipeline = SchedulePipeline(_settings_with(cache_ttl_seconds=ttl))
    for name, decision in pipeline.cache_status().items():
        age = pipeline.cache_gate.age_seconds(pipeline.writer.cached_path(name))
        age_txt = f"{round(age)}s" if age is not None else "missing"
        click.echo(f"{name}: {decision.value.upper()} (age {age_txt}, ttl {pipeline.cache_gate.ttl_seconds}s)")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
