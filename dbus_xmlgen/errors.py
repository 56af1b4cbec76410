"""Error types raised by the generation pipeline"""

from typing import Optional


class GenerationError(Exception):
    """Base class for every failure that aborts generation of a document"""

    kind = "generation"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StructuralError(GenerationError):
    """Malformed XML, unexpected element or missing required attribute"""

    kind = "structural"

    def __init__(self, message: str, element: Optional[str] = None,
                 line: Optional[int] = None, column: Optional[int] = None):
        self.element = element
        self.line = line
        self.column = column
        location = ""
        if line is not None:
            location = f" (line {line}, column {column})"
        subject = f"<{element}>: " if element else ""
        super().__init__(f"{subject}{message}{location}")


class SignatureError(GenerationError):
    """Invalid or incomplete wire type signature"""

    kind = "signature"

    def __init__(self, message: str, signature: str, offset: int):
        self.signature = signature
        self.offset = offset
        super().__init__(f"invalid signature {signature!r} at offset {offset}: {message}")


class NamingError(GenerationError):
    """Identifier reduced to nothing, or a collision that cannot be resolved"""

    kind = "naming"

    def __init__(self, message: str, first: str, second: Optional[str] = None):
        self.first = first
        self.second = second
        super().__init__(message)


class ModelError(GenerationError):
    """Document is well-formed XML but violates the interface model"""

    kind = "model"

    def __init__(self, message: str, subject: Optional[str] = None):
        self.subject = subject
        super().__init__(message)


class DictEntryPlacementError(SignatureError, ModelError):
    """Dict entry used anywhere but as the element type of an array"""

    kind = "signature"

    def __init__(self, signature: str, offset: int):
        SignatureError.__init__(
            self, "dict entry must be the element type of an array", signature, offset)
        self.subject = signature


class ConfigError(GenerationError):
    """Raised when generator settings are invalid"""

    kind = "config"
