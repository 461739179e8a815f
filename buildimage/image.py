#
#  Builds a bootable disk image from a bootblock and a kernel:
#
#    0x000  boot sector (the bootblock's first segment, zero-padded)
#    0x002  the number of kernel sectors (u32, overlaps the boot code)
#    0x1fe  boot signature (0x55 0xaa)
#    0x200  kernel sectors (the kernel's first segment, zero-padded)
#
from collections import namedtuple
import struct
from buildimage.elf import open_executable
from buildimage.errors import TruncatedSegment, BootBlockTooLarge, \
    ImageOpenError, ImageWriteError

SECTOR_SIZE = 512
BOOT_SECTOR_OFFSET = 0
KERNEL_OFFSET = SECTOR_SIZE
SECTOR_COUNT_OFFSET = 2
SIGNATURE_OFFSET = 0x1fe
BOOT_SIGNATURE = bytes([0x55, 0xaa])
DEFAULT_IMAGE_FILE = "./image"

BuildResult = namedtuple("BuildResult",
    "boot_phdr kernel_phnum kernel_phdr num_sectors image_size")


def sectors_for(size):
    return (size + SECTOR_SIZE - 1) // SECTOR_SIZE


def write_at(image, offset, data):
    try:
        image.seek(offset)
        written = image.write(data)
    except OSError as e:
        raise ImageWriteError(image.name, e.strerror or str(e)) from e
    if written != len(data):
        raise ImageWriteError(image.name,
            f"short write at {offset:#x} ({written} of {len(data)} bytes)")


def read_segment_bytes(exec_file, length, path):
    data = exec_file.read(length)
    if len(data) < length:
        raise TruncatedSegment(path,
            f"expected {length} bytes, got {len(data)}")
    return data


def write_segment(image, image_offset, exec_file, phdr):
    """Copies a segment into the image, one whole sector at a time.

    Bytes past p_filesz (up to p_memsz) are written as zeros. Returns the
    number of sectors written.
    """
    path = exec_file.name
    file_bytes = min(phdr.filesz, phdr.memsz)
    num_sectors = sectors_for(phdr.memsz)
    exec_file.seek(phdr.offset)
    for i in range(num_sectors):
        start = i * SECTOR_SIZE
        length = max(0, min(SECTOR_SIZE, file_bytes - start))
        sector = bytearray(SECTOR_SIZE)
        sector[:length] = read_segment_bytes(exec_file, length, path)
        write_at(image, image_offset + start, sector)
    return num_sectors


def write_boot_segment(image, exec_file, phdr):
    if phdr.memsz > SECTOR_SIZE:
        raise BootBlockTooLarge(exec_file.name,
            f"segment is {phdr.memsz} bytes, the boot sector holds {SECTOR_SIZE}")

    if write_segment(image, BOOT_SECTOR_OFFSET, exec_file, phdr) == 0:
        # The boot sector is reserved even for an empty segment.
        write_at(image, BOOT_SECTOR_OFFSET, bytes(SECTOR_SIZE))
    return 1


def write_kernel_segment(image, exec_file, phdr, image_offset=KERNEL_OFFSET):
    return write_segment(image, image_offset, exec_file, phdr)


def count_kernel_sectors(kernel_ehdr, kernel_phdr):
    # Sized as if every program header were as large as the first one.
    return sectors_for(kernel_phdr.filesz * kernel_ehdr.phnum)


def record_kernel_sectors(image, num_sectors):
    write_at(image, SECTOR_COUNT_OFFSET, struct.pack("<I", num_sectors))


def write_signature(image):
    write_at(image, SIGNATURE_OFFSET, BOOT_SIGNATURE)


def build_image(boot_path, kernel_path, image_path=DEFAULT_IMAGE_FILE):
    try:
        image = open(image_path, "wb", buffering=0)
    except OSError as e:
        raise ImageOpenError(image_path, e.strerror or str(e)) from e

    with image:
        with open_executable(boot_path) as (boot_file, _, boot_phdr):
            write_boot_segment(image, boot_file, boot_phdr)

        with open_executable(kernel_path) as (kernel_file, kernel_ehdr, kernel_phdr):
            written = write_kernel_segment(image, kernel_file, kernel_phdr)

        num_sectors = count_kernel_sectors(kernel_ehdr, kernel_phdr)
        record_kernel_sectors(image, num_sectors)
        write_signature(image)

    return BuildResult(boot_phdr, kernel_ehdr.phnum, kernel_phdr, num_sectors,
                       (1 + written) * SECTOR_SIZE)
