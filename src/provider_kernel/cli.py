# provider_kernel/cli.py
"""
──────────────────────────────────────────────────────────────
provider-kernel CLI
──────────────────────────────────────────────────────────────
    provider-kernel discover --root app --pattern "**/*.registry.py" --strict

Runs provider discovery against the default container and prints a startup
banner: the files activated and every registration they added.
Options override PK_DISCOVERY_* settings.
──────────────────────────────────────────────────────────────
"""
from __future__ import annotations

from typing import Optional, Sequence

import click

from provider_kernel import __version__
from provider_kernel.autodiscover import DiscoveryResult, discover_from_settings
from provider_kernel.config.base_settings import DiscoverySettings
from provider_kernel.di.errors import DiscoveryError
from provider_kernel.di.formatting import describe_registration, format_token
from provider_kernel.log import configure_logging


def render_banner(result: DiscoveryResult, title: str = "Product App") -> str:
    lines = [f"🧩 {title} · provider-kernel {__version__}"]
    lines.append(f"📂 Files activated: {len(result.files)}")
    for path in result.files:
        lines.append(f"   → {path}")
    lines.append(
        f"📦 Registrations added: {result.added_count} across {len(result.added)} token(s)"
    )
    for token, regs in result.added.items():
        lines.append(f"   {format_token(token)}")
        for reg in regs:
            lines.append(f"      ↳ {describe_registration(reg)}")
    return "\n".join(lines)


@click.group()
@click.version_option(__version__, prog_name="provider-kernel")
def main() -> None:
    """Provider kernel tooling."""


@main.command()
@click.option("--root", "roots", multiple=True, help="Discovery root (repeatable).")
@click.option("--pattern", "patterns", multiple=True, help="Glob pattern (repeatable).")
@click.option("--strict/--no-strict", default=None, help="Fail when no file matches.")
@click.option("-v", "--verbose", is_flag=True, help="Log every activation and registration.")
def discover(
    roots: Sequence[str], patterns: Sequence[str], strict: Optional[bool], verbose: bool
) -> None:
    """Discover provider files and print what they registered."""
    overrides = {}
    if roots:
        overrides["roots"] = list(roots)
    if patterns:
        overrides["patterns"] = list(patterns)
    if strict is not None:
        overrides["strict"] = strict
    settings = DiscoverySettings(**overrides)
    configure_logging("DEBUG" if verbose else settings.log_level)

    try:
        result = discover_from_settings(settings)
    except DiscoveryError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        raise SystemExit(1)

    click.echo(render_banner(result, settings.app_name))


if __name__ == "__main__":
    main()
