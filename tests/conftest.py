"""Shared fixtures: on-disk script trees and dispatchers over them."""

import tempfile
from pathlib import Path
from typing import Callable, Dict

import pytest

from hlapi.config import DispatcherConfig
from hlapi.core.node import Node
from hlapi.dispatcher import HttpDispatcher
from hlapi.endpoint.slots import create_default_registry
from hlapi.endpoint.static import MimeTypeRegistry
from hlapi.signals import Signaler
from hlapi.storage import LocalScriptStorage


def write_tree(root: Path, files: Dict[str, str]) -> None:
    """Write a mapping of relative path to content below a root folder."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def echo_arguments(signaler: Signaler, node: Node) -> None:
    """Test slot returning the bound arguments of the running script."""
    result = signaler.peek("slots.result")
    arguments = node.root.first(".arguments")
    if arguments is not None:
        result.add_range(child.clone() for child in arguments)


@pytest.fixture
def root_dir():
    """Temporary root folder, removed after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_files(root_dir: Path) -> Callable[[Dict[str, str]], Path]:
    """Write files below the root folder, returning the root folder."""

    def writer(files: Dict[str, str]) -> Path:
        write_tree(root_dir, files)
        return root_dir

    return writer


@pytest.fixture
def make_dispatcher(root_dir: Path) -> Callable[..., HttpDispatcher]:
    """Factory writing files below the root folder and returning a dispatcher.

    Every dispatcher gets the ``test.echo`` slot and its own MIME table.
    """

    def factory(files: Dict[str, str], **config_values) -> HttpDispatcher:
        write_tree(root_dir, files)
        registry = create_default_registry()
        registry.add("test.echo", echo_arguments)
        config = DispatcherConfig(root_folder=str(root_dir), **config_values)
        return HttpDispatcher(
            LocalScriptStorage(root_dir=str(root_dir)),
            config,
            registry=registry,
            mime_registry=MimeTypeRegistry(),
        )

    return factory
