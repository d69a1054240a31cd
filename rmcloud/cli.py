import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from pathlib import Path
from typing import Any, Optional, TypeVar

import typer

from .auth import AuthError, authenticate_device, authenticate_user
from .config import load_credential, save_credential
from .models import parse_documents
from .storage import (
    CloudError,
    delete_item,
    docs,
    get_storage_host,
    upload_request,
)

T = TypeVar("T")

app = typer.Typer(help="Talk to the reMarkable cloud document storage.")


def _run(coro: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(coro)
    except (AuthError, CloudError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from e


async def _session(config: Optional[Path]) -> tuple[str, str]:
    """Fresh user token and storage host for the stored device."""
    credential = load_credential(config)
    if credential is None:
        raise AuthError(
            "Not paired. Run `rmcloud pair CODE` with a code from "
            "https://my.remarkable.com/device/desktop/connect"
        )

    token = await authenticate_user(credential.token)
    host = await get_storage_host()
    return host, token


def _with_session(
    ctx: typer.Context, action: Callable[[str, str], Awaitable[T]]
) -> T:
    async def go() -> T:
        host, token = await _session(ctx.obj["config"])
        return await action(host, token)

    return _run(go())


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, help="Credential file path."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@app.command()
def pair(ctx: typer.Context, code: str):
    """Register this machine using a one-time code."""

    async def go():
        credential = await authenticate_device(code)
        return credential, save_credential(credential, ctx.obj["config"])

    credential, path = _run(go())
    print(f"Paired device {credential.device_id}, credential saved to {path}")


@app.command()
def host():
    """Print the storage host for the account."""
    print(_run(get_storage_host()))


@app.command()
def ls(
    ctx: typer.Context,
    doc_id: Optional[str] = typer.Option(None, "--id", help="Only this document."),
    with_blob: bool = typer.Option(False, "--with-blob"),
):
    """List documents."""
    if doc_id is None and not with_blob:
        data = _with_session(ctx, lambda h, t: docs(h, t))
    else:
        data = _with_session(ctx, lambda h, t: docs(h, t, doc_id, with_blob))

    for item in parse_documents(data):
        kind = "d" if item.is_folder else "f"
        line = f"[{kind}] {item.id} v{item.version} {item.visible_name}"
        if item.blob_url_get:
            line += f" {item.blob_url_get}"
        print(line)


@app.command("upload-request")
def upload_request_cmd(ctx: typer.Context):
    """Reserve a document id and print its upload URL."""
    slot = _with_session(ctx, upload_request)
    print(slot.doc_id)
    print(slot.upload_url)


@app.command()
def rm(ctx: typer.Context, doc_id: str, version: int):
    """Delete a document at the given version."""
    response = _with_session(ctx, lambda h, t: delete_item(h, t, doc_id, version))
    print(response.text)


if __name__ == "__main__":
    app()
