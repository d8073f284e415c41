"""Command line for the Consentium client; the Typer app is ``cli.app.app``."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    # Resolve lazily to the module, not the Typer instance, so tests can
    # monkeypatch names such as ``cli.app.ConsentiumClient``.
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)


__all__: list[str] = []
