from typing import Optional


class TranslationError(Exception):
    """Fatal translation failure; the current file produces no output."""

    def __init__(self, msg: str, path: Optional[str] = None, line: Optional[int] = None):
        self.msg: str = msg
        self.path: Optional[str] = path
        self.line: Optional[int] = line
        super().__init__(msg)

    def __str__(self) -> str:
        where = ""
        if self.path:
            where = f"{self.path}:{self.line}: " if self.line else f"{self.path}: "
        return f"{where}{self.msg}"


class LoweringError(TranslationError):
    """A syntax node could not be turned into IR (e.g. a null reference name)."""


class PipelineError(TranslationError):
    """A fix pass broke an invariant another pass relies on."""


class PrinterError(TranslationError):
    """The IR reached the printer in a shape it cannot render."""
