class KeyIdentError(Exception):
    """Base class for every identification failure."""

    kind = "KeyIdentError"

    def as_dict(self) -> dict:
        return {"kind": self.kind, "message": str(self)}


class KeyReadError(KeyIdentError):
    """The input could not be read (raised by the file wrapper, never by the core)."""

    kind = "IOError"


class UnrecognizedFormat(KeyIdentError):
    kind = "UnrecognizedFormat"


class MalformedKeyData(KeyIdentError):
    """Recognized container, structurally invalid content."""

    kind = "MalformedKeyData"


class UnsupportedAlgorithm(KeyIdentError):
    kind = "UnsupportedAlgorithm"


class InputTooLarge(KeyIdentError):
    kind = "InputTooLarge"
