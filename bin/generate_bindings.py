#!/usr/bin/env python3
"""
D-Bus introspection XML code generator

Generates Python proxy classes from D-Bus introspection XML.

Usage:
    python generate_bindings.py interface.xml --output generated/proxy.py
    python generate_bindings.py interface.xml -i org.example.Foo --async
    gdbus introspect --session --dest org.example.Foo --object-path / --xml \\
        | python generate_bindings.py - --destination org.example.Foo --path /
"""

import sys
from pathlib import Path

# Add parent directory to path so dbus_xmlgen package can be found
sys.path.insert(0, str(Path(__file__).parent.parent))

from dbus_xmlgen.cli import main


if __name__ == "__main__":
    main()
