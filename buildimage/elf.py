from collections import namedtuple
from contextlib import contextmanager
import os
from elftools.elf.structs import ELFStructs
from buildimage.errors import InputNotFound, TruncatedHeader, NotAnElfFile, \
    UnsupportedElfClass, MalformedElf, TruncatedProgramHeaderTable

ELF_MAGIC = b"\x7fELF"
ELFCLASS32 = 1
ELFDATA2LSB = 1
ELFDATA2MSB = 2
ELF32_EHDR_SIZE = 52
ELF32_PHDR_SIZE = 32


class ElfHeader(namedtuple("ElfHeader",
        "type machine entry phoff phentsize phnum")):
    __slots__ = ()

    @property
    def table_size(self):
        return self.phentsize * self.phnum


ProgramHeader = namedtuple("ProgramHeader",
    "type offset vaddr paddr filesz memsz flags align")


def identify(path, ident):
    """Checks e_ident and returns the pyelftools structs to decode the rest."""
    if ident[:4] != ELF_MAGIC:
        raise NotAnElfFile(path, f"bad magic {ident[:4]!r}")
    if ident[4] != ELFCLASS32:
        raise UnsupportedElfClass(path, f"ELF class {ident[4]} is not ELFCLASS32")
    if ident[5] not in (ELFDATA2LSB, ELFDATA2MSB):
        raise NotAnElfFile(path, f"unknown data encoding {ident[5]}")

    structs = ELFStructs(little_endian=(ident[5] == ELFDATA2LSB), elfclass=32)
    structs.create_basic_structs()
    return structs


def parse_elf_header(structs, data):
    ehdr = structs.Elf_Ehdr.parse(data)
    # Program header decoding depends on e_machine (processor-specific p_type).
    structs.create_advanced_structs(ehdr.e_type, ehdr.e_machine,
                                    ehdr.e_ident.EI_OSABI)
    return ElfHeader(ehdr.e_type, ehdr.e_machine, ehdr.e_entry,
                     ehdr.e_phoff, ehdr.e_phentsize, ehdr.e_phnum)


def parse_program_header(structs, data):
    phdr = structs.Elf_Phdr.parse(data[:ELF32_PHDR_SIZE])
    return ProgramHeader(phdr.p_type, phdr.p_offset, phdr.p_vaddr, phdr.p_paddr,
                         phdr.p_filesz, phdr.p_memsz, phdr.p_flags, phdr.p_align)


def _read_headers(path, f):
    data = f.read(ELF32_EHDR_SIZE)
    if len(data) < ELF32_EHDR_SIZE:
        raise TruncatedHeader(path,
            f"expected {ELF32_EHDR_SIZE} bytes, got {len(data)}")

    structs = identify(path, data)
    ehdr = parse_elf_header(structs, data)
    if ehdr.phnum == 0:
        raise MalformedElf(path, "no program headers")
    if ehdr.phentsize < ELF32_PHDR_SIZE:
        raise MalformedElf(path,
            f"e_phentsize {ehdr.phentsize} is smaller than {ELF32_PHDR_SIZE}")

    file_size = os.fstat(f.fileno()).st_size
    if ehdr.phoff + ehdr.table_size > file_size:
        raise TruncatedProgramHeaderTable(path,
            f"table at {ehdr.phoff:#x} ({ehdr.table_size} bytes) "
            f"extends past the end of the file ({file_size} bytes)")

    f.seek(ehdr.phoff)
    table = f.read(ehdr.table_size)
    if len(table) < ehdr.table_size:
        raise TruncatedProgramHeaderTable(path,
            f"expected {ehdr.table_size} bytes, got {len(table)}")

    # Only the first entry is used; the rest of the table is ignored.
    return ehdr, parse_program_header(structs, table)


def read_program_header(path):
    """Opens an ELF32 executable and decodes its first program header.

    Returns (file, elf_header, program_header). The caller owns the
    returned file and must close it.
    """
    try:
        f = open(path, "rb")
    except OSError as e:
        raise InputNotFound(path, e.strerror or str(e)) from e

    try:
        ehdr, phdr = _read_headers(path, f)
    except BaseException:
        f.close()
        raise
    return f, ehdr, phdr


@contextmanager
def open_executable(path):
    f, ehdr, phdr = read_program_header(path)
    try:
        yield f, ehdr, phdr
    finally:
        f.close()
