import pkgutil
from importlib import import_module
from pathlib import Path

from fastapi import APIRouter

from relay.logging import logger

PACKAGE_DIR = Path(__file__).resolve().parent

# (sub-package, label used in the startup log)
ROUTER_PACKAGES = (
    ("api.http", "api"),
    ("api.ws.consumers", "websocket consumer"),
)

# Modules already reported, so repeated app construction logs once
_announced: set[str] = set()


def _iter_routers(subpackage: str, label: str):
    package = f"{PACKAGE_DIR.name}.{subpackage}"
    path = PACKAGE_DIR.joinpath(*subpackage.split("."))

    for module_info in pkgutil.iter_modules([str(path)]):
        module = import_module(f"{package}.{module_info.name}")

        qualified = f"{package}.{module_info.name}"
        if qualified not in _announced:
            logger.info(f'Register "{module_info.name}" {label}')
            _announced.add(qualified)

        yield module.router


def collect_subrouters() -> APIRouter:
    """
    Collects the routers of every module in ``api/http`` and
    ``api/ws/consumers``.

    Each of those modules must expose a module-level ``router``. They are
    merged into one ``APIRouter`` that the application includes.
    """
    main_router = APIRouter()

    for subpackage, label in ROUTER_PACKAGES:
        for router in _iter_routers(subpackage, label):
            main_router.include_router(router)

    return main_router
