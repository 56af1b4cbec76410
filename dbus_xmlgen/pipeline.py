"""Introspection XML in, Python bindings out"""

from typing import Optional

from .config import GeneratorConfig
from .parser import IntrospectionParser
from .python_generator import PythonGenerator


def generate_bindings(xml: str, config: Optional[GeneratorConfig] = None) -> str:
    """Run the whole pipeline on one introspection document.

    Any GenerationError aborts the document; nothing is returned in that
    case, so callers never see partial bindings. Each call is independent,
    so documents can be processed concurrently.
    """
    node = IntrospectionParser(xml).parse()
    return PythonGenerator(node, config).generate()
