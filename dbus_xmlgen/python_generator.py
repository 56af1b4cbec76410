"""Python Generator - generates Python proxy classes from D-Bus introspection data"""

import json
from typing import Optional

from .config import GeneratorConfig
from .errors import ModelError
from .logging import get_logger
from .naming import NameScope, Style
from .type_mapper import TypeMapper
from .types import (
    STANDARD_INTERFACES, Annotated, Arg, Interface, Method, Node, Property, Signal,
)

logger = get_logger(__name__)

BANNER = "# ══════════════════════════════════════════════════════════════"

TYPING_NAMES = ["Any", "Callable", "Dict", "List", "NamedTuple", "NewType", "Tuple"]

CHANGE_NOTES = {
    "true": "Changes are announced with PropertiesChanged.",
    "invalidates": "Changes are announced with PropertiesChanged, without the new value.",
    "const": "The value never changes.",
    "false": "Changes are not announced.",
}


def _quote(text: str) -> str:
    """Python string literal for text"""
    return json.dumps(text)


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _docstring(summary: str, body: list[str], indent: str) -> list[str]:
    if not body:
        return [f'{indent}"""{_escape(summary)}"""']
    lines = [f'{indent}"""{_escape(summary)}', ""]
    for line in body:
        lines.append(f"{indent}{_escape(line)}" if line else "")
    lines.append(f'{indent}"""')
    return lines


def _section(title: str) -> list[str]:
    return [BANNER, f"# {title}", BANNER, ""]


def _notes(item: Annotated) -> list[str]:
    """Documentation lines for an item: doc text, deprecation, extra annotations"""
    lines = []
    if item.doc:
        lines.extend(line.rstrip() for line in item.doc.splitlines())
    if item.is_deprecated:
        if lines:
            lines.append("")
        lines.append("Deprecated.")
    extras = item.extra_annotations
    if extras:
        if lines:
            lines.append("")
        for a in extras:
            label = "Extension" if a.opaque else "Annotation"
            lines.append(f"{label} {a.name}: {' '.join(a.value.split())}")
    return lines


def _arg_label(arg: Arg, position: int) -> str:
    return arg.name or f"arg{position}"


class PythonGenerator:
    """Generates a Python module with one proxy class per interface"""

    def __init__(self, node: Node, config: Optional[GeneratorConfig] = None):
        self.node = node
        self.config = config or GeneratorConfig()
        self.module_scope = NameScope(
            "module", reserved=TYPING_NAMES + TypeMapper.preamble_names() + ["warnings"])

    def generate(self) -> str:
        """Generate the complete Python module"""
        interfaces, skipped = self._select_interfaces()

        class_names = [
            self.module_scope.claim(iface.name.rsplit(".", 1)[-1], Style.TYPE,
                                    source=f"interface {iface.name}")
            for iface in interfaces
        ]

        lines = self._generate_header(interfaces, class_names, skipped)
        lines.extend(self._generate_imports(interfaces))
        lines.extend(self._generate_wire_types())

        for iface, class_name in zip(interfaces, class_names):
            logger.debug("Emitting %s as %s", iface.name, class_name)
            lines.extend(self._generate_interface(iface, class_name))

        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines) + "\n"

    def _select_interfaces(self) -> tuple[list[Interface], list[str]]:
        wanted = self.config.interfaces
        for name in wanted:
            if self.node.interface(name) is None:
                raise ModelError(f"interface {name!r} is not in the document", name)

        selected, skipped = [], []
        for iface in self.node.interfaces:
            if wanted:
                if iface.name in wanted:
                    selected.append(iface)
            elif self.config.skip_standard_interfaces and iface.name in STANDARD_INTERFACES:
                skipped.append(iface.name)
            else:
                selected.append(iface)
        return selected, skipped

    def _generate_header(self, interfaces: list[Interface], class_names: list[str],
                         skipped: list[str]) -> list[str]:
        lines = [
            '"""',
            "AUTO-GENERATED D-Bus bindings",
            "DO NOT EDIT - Generated from introspection XML",
        ]
        if self.config.source:
            lines.extend(["", f"Source: {_escape(self.config.source)}"])
        if interfaces:
            lines.extend(["", "Interfaces:"])
            lines.extend(f"    {i.name} -> {n}" for i, n in zip(interfaces, class_names))
        if skipped:
            lines.extend(["", "Standard interfaces provided by the bus library (not generated):"])
            lines.extend(f"    {name}" for name in skipped)
        if self.node.nodes:
            lines.extend(["", "Child nodes:"])
            lines.extend(f"    {_escape(child.name)}" for child in self.node.nodes)
        lines.extend([
            "",
            "Every proxy wraps a bus object providing:",
            "    call(destination, path, interface, member, signature, args, no_reply=False)",
            "    get_property(destination, path, interface, name)",
            "    set_property(destination, path, interface, name, signature, value)",
            "    subscribe(destination, path, interface, member, handler)",
        ])
        if self.config.is_async:
            lines.append("call, get_property and set_property must return awaitables.")
        lines.extend(['"""', ""])
        return lines

    def _generate_imports(self, interfaces: list[Interface]) -> list[str]:
        lines = []
        if any(self._uses_deprecation(iface) for iface in interfaces):
            lines.append("import warnings")
        lines.append(f"from typing import {', '.join(TYPING_NAMES)}")
        lines.extend(["", ""])
        return lines

    def _uses_deprecation(self, iface: Interface) -> bool:
        members = [*iface.methods, *iface.signals, *iface.properties]
        return iface.is_deprecated or any(m.is_deprecated for m in members)

    def _generate_wire_types(self) -> list[str]:
        lines = _section("Wire Types")
        for alias, base in TypeMapper.NEW_TYPES:
            lines.append(f'{alias} = NewType("{alias}", {base})')
        lines.extend([
            "",
            "",
            "class Variant(NamedTuple):",
            '    """Dynamically typed value tagged with its wire signature"""',
            "    signature: str",
            "    value: Any",
            "",
            "",
        ])
        return lines

    # Interfaces

    def _generate_interface(self, iface: Interface, class_name: str) -> list[str]:
        lines = _section(iface.name)
        replies = {}
        for method in iface.methods:
            if len(method.out_args) > 1 and not method.no_reply:
                replies[method.name] = self._claim_record(class_name, method.name, "Reply", iface)
                lines.extend(self._generate_record(
                    replies[method.name], f"Reply of {iface.name}.{method.name}",
                    method.out_args))
        signal_records = {}
        for signal in iface.signals:
            signal_records[signal.name] = self._claim_record(class_name, signal.name, "Args", iface)
            lines.extend(self._generate_record(
                signal_records[signal.name], f"Arguments of {iface.name}.{signal.name}",
                signal.args))

        lines.extend(self._generate_class(iface, class_name, replies, signal_records))
        return lines

    def _claim_record(self, class_name: str, member: str, suffix: str, iface: Interface) -> str:
        return self.module_scope.claim(
            f"{class_name}_{member}_{suffix}", Style.TYPE,
            source=f"{suffix.lower()} record {iface.name}.{member}")

    def _generate_record(self, name: str, summary: str, args: list[Arg]) -> list[str]:
        lines = [f"class {name}(NamedTuple):"]
        lines.extend(_docstring(summary, [], "    "))
        fields = NameScope(name)
        for position, arg in enumerate(args):
            field_name = fields.claim(_arg_label(arg, position), Style.VALUE,
                                      source=f"argument #{position}")
            lines.append(f"    {field_name}: {TypeMapper.signature_to_python(arg.type)}")
        lines.extend(["", ""])
        return lines

    def _generate_class(self, iface: Interface, class_name: str, replies: dict[str, str],
                        signal_records: dict[str, str]) -> list[str]:
        lines = [f"class {class_name}:"]
        lines.extend(_docstring(f"Proxy for the {iface.name} interface", _notes(iface), "    "))
        lines.extend([
            "",
            f"    INTERFACE = {_quote(iface.name)}",
            "",
        ])
        lines.extend(self._generate_init(iface))

        scope = NameScope(class_name)
        for method in iface.methods:
            lines.extend(self._generate_method(iface, method, scope, replies.get(method.name)))
        for signal in iface.signals:
            lines.extend(self._generate_signal(iface, signal, scope, signal_records[signal.name]))
        for prop in iface.properties:
            lines.extend(self._generate_property(iface, prop, scope))

        lines.append("")
        return lines

    def _generate_init(self, iface: Interface) -> list[str]:
        destination = "str"
        if self.config.destination:
            destination += f" = {_quote(self.config.destination)}"
        path = "str"
        if self.config.path:
            path += f" = {_quote(self.config.path)}"

        lines = [f"    def __init__(self, bus: Any, *, destination: {destination}, path: {path}):"]
        if iface.is_deprecated:
            lines.append(self._warning(iface.name, "        "))
        lines.extend([
            "        self._bus = bus",
            "        self._destination = destination",
            "        self._path = path",
            "",
        ])
        return lines

    def _warning(self, qualified_name: str, indent: str) -> str:
        return (f"{indent}warnings.warn({_quote(f'{qualified_name} is deprecated')}, "
                f"DeprecationWarning, stacklevel=2)")

    def _call_prefix(self) -> tuple[str, str]:
        if self.config.is_async:
            return "async def", "await "
        return "def", ""

    def _target(self, member: str) -> str:
        return f"self._destination, self._path, self.INTERFACE, {_quote(member)}"

    # Members

    def _generate_method(self, iface: Interface, method: Method, scope: NameScope,
                         reply: Optional[str]) -> list[str]:
        name = scope.claim(method.name, Style.VALUE, source=f"method {method.name}")
        params = NameScope(f"{iface.name}.{method.name}", reserved=("self", "warnings"))
        define, await_ = self._call_prefix()

        param_decls, arg_names, arg_notes = [], [], []
        for position, arg in enumerate(method.args):
            if arg.direction != "in":
                continue
            label = _arg_label(arg, position)
            param = params.claim(label, Style.VALUE, source=f"argument #{position}")
            param_decls.append(f", {param}: {TypeMapper.signature_to_python(arg.type)}")
            arg_names.append(param)
            arg_notes.extend(self._arg_notes(param, arg))

        outs = method.out_args
        for position, arg in enumerate(outs):
            arg_notes.extend(self._arg_notes(f"returns {_arg_label(arg, position)}", arg))
        if method.no_reply or not outs:
            returns = "None"
        elif len(outs) == 1:
            returns = TypeMapper.signature_to_python(outs[0].type)
        else:
            returns = reply

        notes = _notes(method)
        if method.no_reply:
            if notes:
                notes.append("")
            notes.append("Does not wait for a reply.")
        if arg_notes:
            if notes:
                notes.append("")
            notes.extend(["Arguments:", *arg_notes])

        lines = [f"    {define} {name}(self{''.join(param_decls)}) -> {returns}:"]
        lines.extend(_docstring(f"Call {iface.name}.{method.name}", notes, "        "))
        if method.is_deprecated:
            lines.append(self._warning(f"{iface.name}.{method.name}", "        "))

        signature = "".join(a.type for a in method.in_args)
        if len(arg_names) == 1:
            body = f"({arg_names[0]},)"
        else:
            body = f"({', '.join(arg_names)})"
        call = f"self._bus.call({self._target(method.name)}, {_quote(signature)}, {body}"
        if method.no_reply:
            call += ", no_reply=True"
        call += ")"

        if returns == "None":
            lines.append(f"        {await_}{call}")
        else:
            lines.append(f"        reply = {await_}{call}")
            if len(outs) == 1:
                lines.append("        return reply[0]")
            else:
                lines.append(f"        return {reply}._make(reply)")
        lines.append("")
        return lines

    def _arg_notes(self, label: str, arg: Arg) -> list[str]:
        notes = _notes(arg)
        if not notes:
            return []
        return [f"    {label}: {notes[0]}", *(f"        {n}" if n else "" for n in notes[1:])]

    def _generate_signal(self, iface: Interface, signal: Signal, scope: NameScope,
                         record: str) -> list[str]:
        name = scope.claim(signal.name, Style.VALUE, source=f"signal {signal.name}",
                           prefix=("on",))
        notes = _notes(signal)
        arg_notes = []
        for position, arg in enumerate(signal.args):
            arg_notes.extend(self._arg_notes(_arg_label(arg, position), arg))
        if notes:
            notes.append("")
        notes.append(f"The handler receives a {record} record.")
        if arg_notes:
            notes.extend(["", "Arguments:", *arg_notes])

        lines = [f"    def {name}(self, handler: Callable[[{record}], None]) -> Any:"]
        lines.extend(_docstring(f"Subscribe to {iface.name}.{signal.name}", notes, "        "))
        if signal.is_deprecated:
            lines.append(self._warning(f"{iface.name}.{signal.name}", "        "))
        lines.extend([
            f"        return self._bus.subscribe({self._target(signal.name)},",
            f"                                   lambda *args: handler({record}._make(args)))",
            "",
        ])
        return lines

    def _generate_property(self, iface: Interface, prop: Property, scope: NameScope) -> list[str]:
        py_type = TypeMapper.signature_to_python(prop.type)
        define, await_ = self._call_prefix()
        qualified = f"{iface.name}.{prop.name}"

        getter = scope.claim(prop.name, Style.VALUE, source=f"property {prop.name}")
        notes = _notes(prop)
        if notes:
            notes.append("")
        if not prop.readable:
            notes.append("Write-only property; reading it is expected to fail.")
        else:
            notes.append(CHANGE_NOTES.get(prop.emits_changed_signal,
                                          f"EmitsChangedSignal: {prop.emits_changed_signal}"))

        lines = [f"    {define} {getter}(self) -> {py_type}:"]
        lines.extend(_docstring(f"Get {qualified}", notes, "        "))
        if prop.is_deprecated:
            lines.append(self._warning(qualified, "        "))
        lines.extend([
            f"        return {await_}self._bus.get_property({self._target(prop.name)})",
            "",
        ])

        if prop.writable:
            setter = scope.claim(prop.name, Style.VALUE, source=f"property {prop.name} setter",
                                 prefix=("set",))
            lines.append(f"    {define} {setter}(self, value: {py_type}) -> None:")
            lines.extend(_docstring(f"Set {qualified}", [], "        "))
            if prop.is_deprecated:
                lines.append(self._warning(qualified, "        "))
            lines.extend([
                f"        {await_}self._bus.set_property({self._target(prop.name)}, "
                f"{_quote(prop.type)}, value)",
                "",
            ])
        return lines
