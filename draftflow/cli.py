"""Command line interface for operating on drafts."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

import typer

from draftflow import WorkflowEngine, get_dispatcher, get_repository
from draftflow.config import DraftflowConfig, load_config
from draftflow.contracts import ActorRole, Draft, DraftStatus, TransitionResult
from draftflow.exceptions import DuplicateDraftError
from draftflow.registry import available_transitions
from draftflow.security import ActorRoleResolver, RoleCache, StaticRoleLookup

app = typer.Typer(help="CLI for draftflow approval workflows")

draft_app = typer.Typer(help="Commands for managing drafts")
app.add_typer(draft_app, name="draft")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity"),
) -> None:
    """Draftflow CLI entry point."""
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            stream=sys.stderr,
        )


def _build_engine(config: DraftflowConfig) -> WorkflowEngine:
    return WorkflowEngine(
        get_repository(config=config), dispatcher=get_dispatcher(config=config)
    )


def _parse_json(value: Optional[str], option: str) -> Dict[str, Any]:
    if not value:
        return {}
    try:
        data = json.loads(value)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"invalid JSON: {exc}", param_hint=option)
    if not isinstance(data, dict):
        raise typer.BadParameter("expected a JSON object", param_hint=option)
    return data


async def _actor_role(config: DraftflowConfig, actor: str, role: Optional[str]) -> str:
    if role:
        return role
    resolver = ActorRoleResolver(
        StaticRoleLookup(config.roles.actors),
        RoleCache(config.roles.cache_ttl_seconds),
    )
    return (await resolver.resolve(actor)).value


def _echo_draft(draft: Draft) -> None:
    typer.echo(f"Draft {draft.id}: {draft.status.value}")
    for key, value in draft.model_dump(mode="json", exclude={"id", "status"}).items():
        if value in (None, [], {}):
            continue
        typer.echo(f"  {key}: {value}")


def _echo_failure(result: TransitionResult) -> None:
    typer.secho(
        f"{result.error.value} ({result.http_status}): {result.message}",
        fg=typer.colors.RED,
    )
    for reason in result.reasons:
        typer.echo(f"  - {reason}")


@app.command("transitions")
def transitions(status: str, role: str) -> None:
    """
    List the transitions a role may attempt from a status.

    Example:
        draftflow transitions review marketing
        # Output: open_resonance -> revision    Edit in Resonance
        #         submit_for_approval -> approval    Send for Approval
    """
    options = available_transitions(status, role)
    if not options:
        typer.echo("No transitions available")
        return
    for option in options:
        typer.echo(f"{option.name} -> {option.to.value}\t{option.label}")


@draft_app.command("create")
def draft_create(
    draft_id: str,
    property_name: Optional[str] = typer.Option(None, help="Property shown in notifications"),
) -> None:
    """Register a new draft in the pending state."""
    repo = get_repository()
    try:
        draft = asyncio.run(repo.create_draft(Draft(id=draft_id, property_name=property_name)))
    except DuplicateDraftError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(f"Created draft {draft.id} ({draft.status.value})")


@draft_app.command("list")
def draft_list(status: Optional[DraftStatus] = typer.Option(None, help="Only this status")) -> None:
    """List drafts with their current status."""
    repo = get_repository()
    drafts = asyncio.run(repo.list_drafts(status))
    if not drafts:
        typer.echo("No drafts found")
        return
    for draft in drafts:
        typer.echo(f"{draft.id}\t{draft.status.value}")


@draft_app.command("show")
def draft_show(
    draft_id: str,
    role: Optional[ActorRole] = typer.Option(None, help="Also list this role's next actions"),
) -> None:
    """
    Show a draft's fields and, optionally, what a role can do next.

    Example:
        draftflow draft show D1 --role broker
    """
    engine = WorkflowEngine(get_repository())
    draft = asyncio.run(engine.get_draft(draft_id))
    if draft is None:
        typer.echo("Draft not found")
        raise typer.Exit(code=1)
    _echo_draft(draft)
    if role is not None:
        options = engine.available_transitions(draft.status, role)
        names = ", ".join(o.name for o in options) or "(none)"
        typer.echo(f"Available to {role.value}: {names}")


@draft_app.command("transition")
def draft_transition(
    draft_id: str,
    name: str,
    actor: str = typer.Option(..., help="Actor id recorded in the history"),
    role: Optional[str] = typer.Option(None, help="Actor role; looked up from config when omitted"),
    params: Optional[str] = typer.Option(None, help="Transition parameters as a JSON object"),
    listing: Optional[str] = typer.Option(None, help="Listing context as a JSON object"),
) -> None:
    """
    Apply a named transition to a draft.

    Exits with code 1 and prints the reasons when the transition is rejected.

    Example:
        draftflow draft transition D1 complete_generation --actor gen --role system \\
            --params '{"pdf_url": "/f.pdf", "quality_score": 72}'
    """
    config = load_config()
    call_params = _parse_json(params, "--params")
    context = _parse_json(listing, "--listing") or None

    async def _run() -> TransitionResult:
        engine = _build_engine(config)
        actor_role = await _actor_role(config, actor, role)
        result = await engine.execute(
            draft_id, name, actor, actor_role, call_params, context=context
        )
        await engine.drain()
        return result

    result = asyncio.run(_run())
    if not result.success:
        _echo_failure(result)
        raise typer.Exit(code=1)
    typer.echo(f"{name}: draft {draft_id} is now {result.draft.status.value}")


@draft_app.command("comment")
def draft_comment(
    draft_id: str,
    text: str,
    actor: str = typer.Option(..., help="Actor id recorded in the history"),
    role: Optional[str] = typer.Option(None, help="Actor role; looked up from config when omitted"),
) -> None:
    """Add a comment to a draft's history without changing its status."""
    config = load_config()

    async def _run() -> TransitionResult:
        engine = WorkflowEngine(get_repository(config=config))
        actor_role = await _actor_role(config, actor, role)
        return await engine.add_comment(draft_id, actor, actor_role, text)

    result = asyncio.run(_run())
    if not result.success:
        _echo_failure(result)
        raise typer.Exit(code=1)
    typer.echo(f"Comment recorded on {draft_id}")


@draft_app.command("history")
def draft_history(draft_id: str) -> None:
    """Show a draft's audit trail, newest first."""
    engine = WorkflowEngine(get_repository())
    entries = asyncio.run(engine.history(draft_id))
    if not entries:
        typer.echo("No history found")
        return
    for entry in entries:
        label = entry.metadata.get("transition", "comment")
        line = (
            f"{entry.created_at.isoformat()}  {entry.from_status.value} -> "
            f"{entry.to_status.value}  {label}  by {entry.actor_role.value}:{entry.actor_id}"
        )
        if entry.comments:
            line += f"  \"{entry.comments}\""
        typer.echo(line)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
