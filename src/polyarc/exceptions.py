"""Exception hierarchy for Polyarc."""


class PolyarcError(Exception):
    """Base exception for all Polyarc errors."""

    pass


class InvalidHandleError(PolyarcError, TypeError):
    """An operation received None or a foreign object instead of a kernel object."""

    def __init__(self, argument: str, expected: str, received: object) -> None:
        self.argument = argument
        self.expected = expected
        self.received_type = type(received).__name__
        super().__init__(
            f"Invalid handle for '{argument}': expected {expected}, got {self.received_type}"
        )


class PreconditionError(PolyarcError):
    """A recoverable contract violation by the caller."""

    pass


class InsufficientVerticesError(PreconditionError):
    """Operation requires more vertices than the polyline has."""

    def __init__(self, operation: str, required: int, actual: int) -> None:
        self.operation = operation
        self.required = required
        self.actual = actual
        super().__init__(
            f"{operation} requires at least {required} vertices, polyline has {actual}"
        )


class VertexIndexError(PreconditionError, IndexError):
    """Vertex index out of range."""

    def __init__(self, index: int, count: int) -> None:
        self.index = index
        self.count = count
        super().__init__(f"Vertex index {index} out of range for {count} vertices")


class ContourIndexError(PreconditionError, IndexError):
    """Shape contour index out of range."""

    def __init__(self, group: str, index: int, count: int) -> None:
        self.group = group
        self.index = index
        self.count = count
        super().__init__(f"{group} contour index {index} out of range for {count} contours")


class OpenPolylineError(PreconditionError):
    """Operation requires a closed polyline."""

    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"Polyline '{argument}' must be closed for boolean operations")


class UserdataValueError(PreconditionError, ValueError):
    """Userdata tag outside the unsigned 64-bit range."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Userdata must be an integer in [0, 2**64), got {value!r}")


class UnknownOperationError(PreconditionError, ValueError):
    """Unrecognised boolean operation."""

    def __init__(self, operation: object) -> None:
        self.operation = operation
        super().__init__(
            f"Unknown boolean operation {operation!r} (expected or, and, not, xor)"
        )


class InputFormatError(PolyarcError):
    """Polyline input file could not be read or validated."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read polylines from '{path}': {reason}")


class OutputWriteError(PolyarcError):
    """Polyline output file could not be written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write polylines to '{path}': {reason}")
