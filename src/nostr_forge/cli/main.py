"""
Nostr Forge CLI - Main entry point

Command-line access to key generation, event signing, delegation and
verification. Machine-readable results go to stdout as JSON.
"""

import json
import logging
import sys
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from .. import __version__
from ..client.engine import EventEngine
from ..core.config import EngineConfig
from ..core.crypto import KeyManager, KeyPair, compute_event_id, verify_event
from ..core.delegation import DelegationTag, build_conditions, issue_delegation, verify_delegation
from ..core.events import SignedEvent, validate_event
from ..core.exceptions import NostrForgeError
from ..core.frames import frame_to_json

console = Console(stderr=True)


def _load_keypair(private_key: Optional[str], profile: Optional[str]) -> KeyPair:
    if private_key:
        try:
            return KeyPair(private_key)
        except NostrForgeError as e:
            raise click.ClickException(str(e))
    if profile:
        keypair = KeyManager(profile).load_keypair()
        if keypair is None:
            raise click.ClickException(f"No keypair stored for profile '{profile}'")
        return keypair
    raise click.ClickException("Provide --private-key (or NOSTR_FORGE_PRIVATE_KEY) or --profile")


def _parse_json(text: str, what: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{what} is not valid JSON: {e}")


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.pass_context
def cli(ctx, verbose: bool):
    """Nostr Forge - build, sign and verify Nostr events"""
    ctx.ensure_object(dict)
    config = EngineConfig()
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx.obj['config'] = config
    ctx.obj['verbose'] = verbose


@cli.command()
@click.option('--save', 'profile', default=None, help='Store the private key in the OS keyring under this profile')
def keygen(profile: Optional[str]):
    """Generate a new keypair"""
    keypair = KeyPair.generate()
    if profile:
        if KeyManager(profile).save_keypair(keypair):
            console.print(f"✅ Saved keypair for profile [bold]{profile}[/bold]")
        else:
            raise click.ClickException(f"Could not save keypair for profile '{profile}'")
    click.echo(json.dumps(keypair.keys()))


@cli.command()
@click.argument('text')
@click.option('--private-key', envvar='NOSTR_FORGE_PRIVATE_KEY', help='Hex private key')
@click.option('--profile', '-p', help='Keyring profile holding the private key')
@click.option('--channel', help='Channel id; builds a channel message instead of a note')
@click.option('--pow', 'pow_target', type=click.IntRange(min=0, max=256), default=None, help='Proof-of-work difficulty in bits')
@click.option('--max-attempts', type=click.IntRange(min=1), default=None, help='Give up mining after this many nonces')
@click.option('--delegation', 'delegation_json', default=None, help='Delegation tag as a JSON list')
@click.pass_context
def note(ctx, text: str, private_key: Optional[str], profile: Optional[str], channel: Optional[str],
         pow_target: Optional[int], max_attempts: Optional[int], delegation_json: Optional[str]):
    """Sign a text note and print its EVENT frame"""
    config = ctx.obj['config']
    updates = {}
    if pow_target is not None:
        updates['pow_target'] = pow_target
    if max_attempts is not None:
        updates['pow_max_attempts'] = max_attempts
    if updates:
        config = config.model_copy(update=updates)

    engine = EventEngine(_load_keypair(private_key, profile), config)
    if delegation_json:
        try:
            tag = DelegationTag.from_tag(_parse_json(delegation_json, "Delegation tag"))
        except (ValueError, TypeError) as e:
            raise click.BadParameter(str(e))
        engine = engine.with_delegation(tag)

    try:
        frame = engine.build_note_event(text, channel)
    except NostrForgeError as e:
        raise click.ClickException(str(e))
    click.echo(frame_to_json(frame))


@cli.command()
@click.argument('delegatee')
@click.option('--private-key', envvar='NOSTR_FORGE_PRIVATE_KEY', help='Delegator hex private key')
@click.option('--profile', '-p', help='Keyring profile holding the delegator key')
@click.option('--kind', 'kinds', type=int, multiple=True, help='Allowed event kind (repeatable)')
@click.option('--after', type=int, default=None, help='Events must be created after this unix time')
@click.option('--before', type=int, default=None, help='Events must be created before this unix time')
@click.option('--conditions', default=None, help='Raw conditions string (overrides --kind/--after/--before)')
def delegate(delegatee: str, private_key: Optional[str], profile: Optional[str], kinds: Tuple[int, ...],
             after: Optional[int], before: Optional[int], conditions: Optional[str]):
    """Issue a delegation tag for DELEGATEE"""
    keypair = _load_keypair(private_key, profile)
    if conditions is None:
        conditions = build_conditions(kinds, after, before)
    try:
        tag = issue_delegation(keypair, delegatee, conditions)
    except NostrForgeError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps(tag.as_tag()))


@cli.command('verify-delegation')
@click.argument('delegatee')
@click.argument('tag_json')
def verify_delegation_cmd(delegatee: str, tag_json: str):
    """Check a delegation TAG_JSON issued to DELEGATEE"""
    if verify_delegation(delegatee, _parse_json(tag_json, "Delegation tag")):
        console.print("✅ Delegation: [green]VALID[/green]")
    else:
        console.print("❌ Delegation: [red]INVALID[/red]")
        sys.exit(1)


@cli.command('event-id')
@click.argument('event_json')
def event_id(event_json: str):
    """Compute the id of an unsigned EVENT_JSON"""
    try:
        event = validate_event(_parse_json(event_json, "Event"))
    except NostrForgeError as e:
        raise click.ClickException(str(e))
    click.echo(compute_event_id(event))


@cli.command()
@click.argument('event_json')
def verify(event_json: str):
    """Verify the id and signature of a signed EVENT_JSON"""
    try:
        event = SignedEvent.from_dict(_parse_json(event_json, "Event"))
    except (ValueError, TypeError) as e:
        raise click.ClickException(f"Malformed signed event: {e}")
    if verify_event(event):
        console.print("✅ Signature verification: [green]VALID[/green]")
    else:
        console.print("❌ Signature verification: [red]INVALID[/red]")
        sys.exit(1)


@cli.command()
def version():
    """Show version information"""
    console.print(Panel.fit(f"Nostr Forge v{__version__}", style="bold blue"))
    console.print("Nostr event signing, proof of work and delegation")


def main():
    """Main entry point"""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n👋 Goodbye!")
        sys.exit(0)


if __name__ == '__main__':
    main()
