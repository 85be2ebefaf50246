"""Sybil collection of the Python examples in docs/."""

from pathlib import Path
from typing import Any

import numpy as np
from sybil import Sybil
from sybil.parsers.markdown import PythonCodeBlockParser, SkipParser

import rk_dense


def documentation_setup(namespace: dict[str, Any]) -> None:
    """Pre-import numpy as ``np`` and the package as ``rk_dense``."""
    namespace["np"] = np
    namespace["rk_dense"] = rk_dense


pytest_collect_file = Sybil(
    parsers=[
        PythonCodeBlockParser(),
        SkipParser(),
    ],
    path=str(Path(__file__).parent / "docs"),
    pattern="**/*.md",
    setup=documentation_setup,
).pytest()
