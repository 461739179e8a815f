class BuildImageError(Exception):
    stage = "image"

    def __init__(self, path, message):
        super().__init__(f"{path}: {self.stage}: {message}")
        self.path = path
        self.message = message


class InputNotFound(BuildImageError):
    stage = "open"


class ElfHeaderError(BuildImageError):
    stage = "ELF header"


class TruncatedHeader(ElfHeaderError):
    pass


class NotAnElfFile(ElfHeaderError):
    pass


class UnsupportedElfClass(ElfHeaderError):
    pass


class MalformedElf(ElfHeaderError):
    pass


class TruncatedProgramHeaderTable(BuildImageError):
    stage = "program header table"


class SegmentError(BuildImageError):
    stage = "segment"


class TruncatedSegment(SegmentError):
    pass


class BootBlockTooLarge(SegmentError):
    pass


class ImageOpenError(BuildImageError):
    stage = "image"


class ImageWriteError(BuildImageError):
    stage = "image"
