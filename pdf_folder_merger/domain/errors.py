class PdfMergerError(Exception):
    pass


class ValidationError(PdfMergerError):
    pass


class NoInputError(ValidationError):
    pass


class ParsingError(PdfMergerError):
    pass


class DecodeError(ParsingError):
    def __init__(self, slot: str, set_index: int, source_name: str) -> None:
        self.slot = slot
        self.set_index = set_index
        self.source_name = source_name
        super().__init__(
            f"Unable to read '{source_name}' (File {slot}, set {set_index + 1}). "
            "Check that it is a valid PDF."
        )


class FileIOError(PdfMergerError):
    pass


class DeliveryError(FileIOError):
    pass


class CapabilityUnsupportedError(PdfMergerError):
    pass


class RunInProgressError(PdfMergerError):
    pass
