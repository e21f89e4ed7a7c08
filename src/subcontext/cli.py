"""CLI entry point for subcontext."""

import logging
import sys
from pathlib import Path

import click

from .config import Config
from .credentials import CredentialStore
from .errors import AuthOrQuotaError, CredentialMissing, ParseError, SubcontextError
from .languages import AI_MODELS, get_language_code, get_language_name
from .models import TranslationContext
from .session import Session
from .srt import translated_filename


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _read_text_option(value: str | None, path: str | None) -> str:
    if path:
        return Path(path).read_text(encoding="utf-8").strip()
    return value or ""


def _on_progress(processed: int, total: int) -> None:
    click.echo(f"  Translated {processed}/{total}")


def _read_subtitles(path: str | Path) -> str:
    """Read a subtitle file as UTF-8, reporting other encodings as a parse error."""
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"{path} is not UTF-8 text") from e


def _load(session: Session, input_path: str) -> None:
    path = Path(input_path)
    click.echo(f"Loading subtitles: {input_path}")
    entries = session.load(_read_subtitles(path), path.name)
    click.echo(f"  Loaded {len(entries)} entries")


def _finish(session: Session, output: Path) -> None:
    _, content = session.export()
    output.write_text(content, encoding="utf-8")
    click.echo(f"  Saved to {output}")

    failed = session.failed_ids()
    if failed:
        click.secho(
            f"  {len(failed)} entries came back without a translation: {failed}",
            fg="yellow",
        )

    click.echo()
    click.secho("Done!", fg="green", bold=True)


def _fail(session: Session, error: SubcontextError) -> None:
    message = session.error or str(error)
    click.secho(f"Error: {message}", fg="red", err=True)
    if isinstance(error, (CredentialMissing, AuthOrQuotaError)):
        click.echo("Set a key with: subcontext key set <KEY>", err=True)
    elif str(error) != message:
        click.echo(f"  {error}", err=True)
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Context-aware subtitle translation with Gemini."""
    _setup_logging(verbose)
    ctx.obj = Config.from_env()


@main.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--from",
    "source_lang",
    required=True,
    help="Source language code or name (e.g., ja, zh-TW, English)",
)
@click.option(
    "--to",
    "target_lang",
    required=True,
    help="Target language code or name (e.g., en, fr, German)",
)
@click.option("--synopsis", default=None, help="Story synopsis")
@click.option(
    "--synopsis-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read the synopsis from a file",
)
@click.option("--characters", default=None, help="Character list")
@click.option(
    "--characters-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read the character list from a file",
)
@click.option(
    "--model",
    default=None,
    help=f"Gemini model ({', '.join(AI_MODELS)})",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output SRT file path (default: input_name_translated.srt)",
)
@click.pass_obj
def translate(
    config: Config,
    input_path: str,
    source_lang: str,
    target_lang: str,
    synopsis: str | None,
    synopsis_file: str | None,
    characters: str | None,
    characters_file: str | None,
    model: str | None,
    output: str | None,
) -> None:
    """Translate an SRT file.

    \b
    Examples:
      subcontext translate episode1.srt --from ja --to en
      subcontext translate film.srt --from zh-TW --to fr --synopsis-file plot.txt
    """
    session = Session(config, on_progress=_on_progress)
    model = model or config.default_model
    source_name = get_language_name(source_lang)
    target_name = get_language_name(target_lang)
    input_p = Path(input_path)
    output_path = Path(output) if output else input_p.with_name(translated_filename(input_p.name))

    try:
        _load(session, input_path)
        click.echo(f"Translating ({model}): {source_name} → {target_name}")
        session.translate(
            synopsis=_read_text_option(synopsis, synopsis_file),
            characters=_read_text_option(characters, characters_file),
            source_language=source_name,
            target_language=target_name,
            model=model,
        )
        _finish(session, output_path)
    except SubcontextError as e:
        _fail(session, e)


@main.command()
@click.argument("original_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("translated_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--from",
    "source_lang",
    required=True,
    help="Language of ORIGINAL_PATH",
)
@click.option(
    "--was",
    "previous_lang",
    required=True,
    help="Language of TRANSLATED_PATH",
)
@click.option("--to", "target_lang", required=True, help="New target language")
@click.option(
    "--source",
    type=click.Choice(["original", "edited"]),
    default="original",
    help="Translate from the original file or from the (edited) translation",
)
@click.option("--synopsis", default="", help="Story synopsis")
@click.option("--characters", default="", help="Character list")
@click.option("--model", default=None, help="Gemini model")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output SRT file path (default: original_name.{to}.srt)",
)
@click.pass_obj
def retranslate(
    config: Config,
    original_path: str,
    translated_path: str,
    source_lang: str,
    previous_lang: str,
    target_lang: str,
    source: str,
    synopsis: str,
    characters: str,
    model: str | None,
    output: str | None,
) -> None:
    """Translate again into another language.

    TRANSLATED_PATH is an earlier (possibly hand-edited) translation of
    ORIGINAL_PATH; with --source edited it becomes the text to translate.
    """
    session = Session(config, on_progress=_on_progress)
    source_name = get_language_name(source_lang)
    context = TranslationContext(
        synopsis=synopsis,
        characters=characters,
        original_source_language=source_name,
        current_source_language=source_name,
        target_language=get_language_name(previous_lang),
        model=model or config.default_model,
    )
    target_name = get_language_name(target_lang)

    original_p = Path(original_path)
    if output:
        output_path = Path(output)
    else:
        output_path = original_p.with_name(
            f"{original_p.stem}.{get_language_code(target_lang)}{original_p.suffix or '.srt'}"
        )
    if output_path.resolve() == Path(translated_path).resolve():
        raise click.ClickException(
            f"Refusing to overwrite {translated_path}; choose another path with --output"
        )

    try:
        _load(session, original_path)
        session.restore(_read_subtitles(translated_path), context)
        click.echo(f"Re-translating from {source} text into {target_name}")
        session.retranslate(target_name, source=source)
        _finish(session, output_path)
    except SubcontextError as e:
        _fail(session, e)


@main.group()
def key() -> None:
    """Manage the stored Gemini API key."""


@key.command("set")
@click.argument("api_key")
@click.pass_obj
def key_set(config: Config, api_key: str) -> None:
    """Save an API key."""
    store = CredentialStore.from_config(config)
    try:
        store.set(api_key)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"Saved API key to {store.key_file}")


@key.command("clear")
@click.pass_obj
def key_clear(config: Config) -> None:
    """Remove the saved API key."""
    store = CredentialStore.from_config(config)
    store.clear()
    click.echo("API key removed")
    if config.has_gemini():
        click.echo("GEMINI_API_KEY is still set in the environment")


@key.command("show")
@click.pass_obj
def key_show(config: Config) -> None:
    """Show which API key is in use (masked)."""
    store = CredentialStore.from_config(config)
    try:
        api_key = store.get()
    except CredentialMissing as e:
        raise click.ClickException(str(e))
    click.echo(f"{api_key[:4]}...{api_key[-4:]}")


if __name__ == "__main__":
    main()
