from ussdkit.core.menu.models import WILDCARD_TOKEN, MenuGraph, MenuNode, MenuOption
from ussdkit.core.menu.builder import BuildError, MenuBuilder, NodeBuilder
from ussdkit.core.menu.loader import build_graph, load_menu_yaml

__all__ = [
    "WILDCARD_TOKEN",
    "MenuGraph",
    "MenuNode",
    "MenuOption",
    "BuildError",
    "MenuBuilder",
    "NodeBuilder",
    "build_graph",
    "load_menu_yaml",
]
