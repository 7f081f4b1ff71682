"""Static files for the browser client."""

from pathlib import Path
from typing import Callable

from fastapi import APIRouter, Response

from relay.constants import STATIC_FILES
from relay.exceptions import StaticFileError
from relay.logging import logger
from relay.settings import app_settings

router = APIRouter()

PACKAGE_STATIC_DIR = Path(__file__).resolve().parents[2] / "static"


def get_static_dir() -> Path:
    """Directory static files are served from, ``STATIC_DIR`` if set."""
    if app_settings.STATIC_DIR:
        return Path(app_settings.STATIC_DIR)
    return PACKAGE_STATIC_DIR


def read_static_file(file_name: str) -> bytes:
    """
    Read a static file in full.

    Args:
        file_name: File name inside the static directory.

    Returns:
        File content.

    Raises:
        StaticFileError: If the file cannot be read.
    """
    path = get_static_dir() / file_name
    try:
        return path.read_bytes()
    except OSError as ex:
        logger.error(f"Error loading {path}: {ex}")
        raise StaticFileError(f"Error loading {file_name}") from ex


def _static_endpoint(file_name: str, media_type: str) -> Callable[[], Response]:
    def endpoint() -> Response:
        return Response(content=read_static_file(file_name), media_type=media_type)

    endpoint.__name__ = f"static_{file_name.replace('.', '_')}"
    return endpoint


for path, (file_name, media_type) in STATIC_FILES.items():
    router.add_api_route(
        path,
        _static_endpoint(file_name, media_type),
        methods=["GET"],
        response_class=Response,
        include_in_schema=False,
        name=f"static:{path}",
    )
