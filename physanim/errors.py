"""
Error taxonomy for the render engine.
Fatal errors (scene parse, encoder) stop the run; glyph and object errors are
recorded per item and never leave the frame loop.
"""


class PhysanimError(Exception):
    """Base class for engine errors."""


class SceneParseError(PhysanimError):
    """Scene description is unreadable or malformed. The engine cannot start."""
    def __init__(self, message: str, source: str = "", detail: str | None = None):
        super().__init__(message)
        self.source = source
        self.detail = detail


class GlyphRenderError(PhysanimError):
    """A math expression could not be typeset or rasterized."""
    def __init__(self, message: str, expression: str = ""):
        super().__init__(message)
        self.expression = expression


class ObjectRenderError(PhysanimError):
    """A single draw call failed (bad or missing parameters)."""
    def __init__(self, message: str, type_tag: str = "", phase: str = ""):
        super().__init__(message)
        self.type_tag = type_tag
        self.phase = phase


class UnknownKindWarning(UserWarning):
    """Object type is not in the catalog. Logged and skipped, never raised."""


class EncoderProcessError(PhysanimError):
    """The encoder exited non-zero or its input pipe broke."""
    def __init__(self, message: str, returncode: int | None = None, stderr: str | None = None):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class RenderCancelled(PhysanimError):
    """A stop was requested while frames were still being produced."""
