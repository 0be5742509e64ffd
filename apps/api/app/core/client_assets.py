from pathlib import Path, PurePosixPath

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException
from starlette.responses import Response
from starlette.types import Scope

INDEX_FILE = "index.html"


class ClientAssets(StaticFiles):
    """Built client files; unknown extensionless paths get ``index.html``.

    Client-side routes such as ``/history`` resolve to the app shell, while a
    missing asset (``/missing.js``) or API path stays a 404.
    """

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            return await super().get_response(path, scope)
        except HTTPException as exc:
            if exc.status_code != 404 or not _is_client_route(path):
                raise
            return await super().get_response(INDEX_FILE, scope)


def _is_client_route(path: str) -> bool:
    route = PurePosixPath(path)
    return not route.suffix and route.parts[:1] != ("api",)


def mount_client_assets(app: FastAPI, directory: Path) -> None:
    # Mounted last so API routes take precedence.
    app.mount("/", ClientAssets(directory=directory, html=True), name="static")
