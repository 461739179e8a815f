import struct
import pytest

ELF32_EHDR_SIZE = 52
ELF32_PHDR_SIZE = 32
PT_LOAD = 1
PT_NULL = 0


def make_elf32(payload, vaddr=0x1000, phnum=1, filesz=None, memsz=None,
               big_endian=False, elf_class=1, magic=b"\x7fELF"):
    """Returns a minimal ELF32 executable with `payload` as its first segment."""
    order = ">" if big_endian else "<"
    filesz = len(payload) if filesz is None else filesz
    memsz = filesz if memsz is None else memsz
    phoff = ELF32_EHDR_SIZE
    segment_offset = phoff + ELF32_PHDR_SIZE * phnum

    ident = magic + bytes([elf_class, 2 if big_endian else 1, 1]) + bytes(9)
    header = ident + struct.pack(order + "HHIIIIIHHHHHH",
        2,              # e_type: ET_EXEC
        3,              # e_machine: EM_386
        1,              # e_version
        vaddr,          # e_entry
        phoff,          # e_phoff
        0,              # e_shoff
        0,              # e_flags
        ELF32_EHDR_SIZE,
        ELF32_PHDR_SIZE,
        phnum,
        0, 0, 0)

    table = struct.pack(order + "IIIIIIII", PT_LOAD, segment_offset, vaddr,
                        vaddr, filesz, memsz, 5, 0x1000)
    for _ in range(phnum - 1):
        table += struct.pack(order + "IIIIIIII", PT_NULL, 0, 0, 0, 0, 0, 0, 0)

    return header + table + payload


@pytest.fixture
def write_elf(tmp_path):
    def write(name, payload, **kwargs):
        path = tmp_path / name
        path.write_bytes(make_elf32(payload, **kwargs))
        return str(path)
    return write


@pytest.fixture
def boot_payload():
    return bytes((i * 7 + 1) & 0xff for i in range(100))


@pytest.fixture
def kernel_payload():
    return bytes((i * 13 + 3) & 0xff or 0x5a for i in range(1000))
