"""Type mapping from D-Bus signatures to Python type hints"""

from .errors import DictEntryPlacementError
from .signature import SignatureType, TypeCode, parse_signature


class TypeMapper:
    """Maps D-Bus wire types to the type hints used in generated bindings"""

    # Fixed-width integers and tagged strings are NewType aliases declared
    # in the generated module preamble.
    PYTHON_TYPES = {
        TypeCode.BYTE: 'Byte',
        TypeCode.BOOLEAN: 'bool',
        TypeCode.INT16: 'Int16',
        TypeCode.UINT16: 'UInt16',
        TypeCode.INT32: 'Int32',
        TypeCode.UINT32: 'UInt32',
        TypeCode.INT64: 'Int64',
        TypeCode.UINT64: 'UInt64',
        TypeCode.DOUBLE: 'float',
        TypeCode.STRING: 'str',
        TypeCode.OBJECT_PATH: 'ObjectPath',
        TypeCode.SIGNATURE: 'Signature',
        TypeCode.UNIX_FD: 'UnixFd',
        TypeCode.VARIANT: 'Variant',
    }

    # (alias, underlying type) pairs for the preamble, in emission order
    NEW_TYPES = [
        ('Byte', 'int'),
        ('Int16', 'int'),
        ('UInt16', 'int'),
        ('Int32', 'int'),
        ('UInt32', 'int'),
        ('Int64', 'int'),
        ('UInt64', 'int'),
        ('ObjectPath', 'str'),
        ('Signature', 'str'),
        ('UnixFd', 'int'),
    ]

    @classmethod
    def to_python(cls, sig_type: SignatureType) -> str:
        """Convert a parsed signature to a Python type hint"""
        if sig_type.code is TypeCode.ARRAY:
            element = sig_type.element
            if element.code is TypeCode.DICT_ENTRY:
                return f'Dict[{cls.to_python(element.key)}, {cls.to_python(element.value)}]'
            if element.code is TypeCode.BYTE:
                return 'bytes'
            return f'List[{cls.to_python(element)}]'

        if sig_type.code is TypeCode.STRUCT:
            return f"Tuple[{', '.join(cls.to_python(f) for f in sig_type.fields)}]"

        # Parsed trees never get here; hand-built ones can
        if sig_type.code is TypeCode.DICT_ENTRY:
            raise DictEntryPlacementError(sig_type.signature, 0)

        return cls.PYTHON_TYPES[sig_type.code]

    @classmethod
    def signature_to_python(cls, signature: str) -> str:
        """Convert a wire signature string to a Python type hint"""
        return cls.to_python(parse_signature(signature))

    @classmethod
    def preamble_names(cls) -> list[str]:
        """Names the generated module defines before any binding"""
        return [name for name, _ in cls.NEW_TYPES] + ['Variant']
