"""Fail when a viewarr module imports a GUI toolkit.

Imports are read from the parsed source, so names in strings and comments
do not count. Usage: ``python scripts/check_core_no_gui.py [package_dir]``.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path
from typing import Iterator, List, Tuple

PACKAGE_DIR = Path(__file__).resolve().parent.parent / "src" / "viewarr"

# Top-level packages, plus dotted submodules of otherwise allowed libraries.
GUI_ROOTS = {"PyQt5", "PyQt6", "PySide2", "PySide6", "qtpy", "tkinter", "wx", "ipywidgets", "gi"}
GUI_SUBMODULES = {"matplotlib.pyplot", "matplotlib.backends"}


def imported_modules(tree: ast.AST) -> Iterator[Tuple[int, str]]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            yield node.lineno, node.module
            for alias in node.names:
                yield node.lineno, f"{node.module}.{alias.name}"


def is_gui_module(name: str) -> bool:
    if name.split(".")[0] in GUI_ROOTS:
        return True
    return any(name == sub or name.startswith(sub + ".") for sub in GUI_SUBMODULES)


def scan(package_dir: Path) -> List[str]:
    problems = []
    for path in sorted(package_dir.glob("*.py")):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for lineno, name in imported_modules(tree):
            if is_gui_module(name):
                problems.append(f"{path.name}:{lineno} imports {name}")
    return problems


def main(argv: List[str]) -> int:
    package_dir = Path(argv[1]) if len(argv) > 1 else PACKAGE_DIR
    if not package_dir.is_dir():
        sys.stderr.write(f"No package directory at {package_dir}\n")
        return 2
    problems = scan(package_dir)
    if problems:
        sys.stderr.write("GUI import guard failed:\n")
        sys.stderr.write("\n".join(problems))
        sys.stderr.write("\n")
        return 2
    print(f"GUI import guard passed ({package_dir}).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
