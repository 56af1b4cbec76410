"""
D-Bus XML Code Generator Package

Parses D-Bus introspection XML and generates Python proxy classes:
  1. One class per interface
  2. One method per D-Bus method, blocking or async
  3. One subscription method per signal
  4. A getter (and setter when writable) per property
"""

from .types import Annotation, Arg, Method, Signal, Property, Interface, Node
from .errors import (
    GenerationError, StructuralError, SignatureError, NamingError, ModelError,
    DictEntryPlacementError, ConfigError,
)
from .signature import SignatureType, TypeCode, parse_signature, parse_signature_list
from .parser import IntrospectionParser
from .type_mapper import TypeMapper
from .naming import NameScope, Style, to_type_name, to_value_name
from .config import CallMode, GeneratorConfig
from .python_generator import PythonGenerator
from .pipeline import generate_bindings

__all__ = [
    'Annotation', 'Arg', 'Method', 'Signal', 'Property', 'Interface', 'Node',
    'GenerationError', 'StructuralError', 'SignatureError', 'NamingError', 'ModelError',
    'DictEntryPlacementError', 'ConfigError',
    'SignatureType', 'TypeCode', 'parse_signature', 'parse_signature_list',
    'IntrospectionParser', 'TypeMapper',
    'NameScope', 'Style', 'to_type_name', 'to_value_name',
    'CallMode', 'GeneratorConfig',
    'PythonGenerator', 'generate_bindings',
]
