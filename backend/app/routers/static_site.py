"""Static front end with ``index.html`` served for client-side routes."""

from pathlib import PurePosixPath

from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException
from starlette.types import Scope


class SiteStaticFiles(StaticFiles):
    """Serve files from ``directory``; unknown page paths get ``index.html``.

    Paths with a file extension (missing assets) and paths under one of
    ``excluded_prefixes`` keep their 404.
    """

    def __init__(self, *args, excluded_prefixes: tuple[str, ...] = (), **kwargs) -> None:
        kwargs.setdefault("html", True)
        super().__init__(*args, **kwargs)
        self.excluded_prefixes = tuple(prefix.strip("/") for prefix in excluded_prefixes if prefix.strip("/"))

    async def get_response(self, path: str, scope: Scope):
        try:
            response = await super().get_response(path, scope)
        except HTTPException as exc:
            if exc.status_code != 404 or not self._falls_back(path):
                raise
            return await super().get_response("index.html", scope)
        if response.status_code == 404 and self._falls_back(path):
            return await super().get_response("index.html", scope)
        return response

    def _falls_back(self, path: str) -> bool:
        relative = PurePosixPath(path.strip("/"))
        if relative.suffix:
            return False
        route = relative.as_posix()
        return not any(route == prefix or route.startswith(prefix + "/") for prefix in self.excluded_prefixes)
