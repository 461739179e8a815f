from buildimage.image import SECTOR_SIZE, sectors_for


def format_segment(path, index, phdr, padded_size):
    return "\n".join([
        f"{phdr.vaddr:#06x}: {path}",
        f"\tsegment {index}",
        f"\t\toffset {phdr.offset:#x}\t\tvaddr {phdr.vaddr:#x}",
        f"\t\tfilesz {phdr.filesz:#x}\t\tmemsz {phdr.memsz:#x}",
        f"\t\twriting {min(phdr.filesz, phdr.memsz):#x} bytes",
        f"\t\tpadding up to {padded_size:#x}",
    ])


def format_extended_report(boot_phdr, kernel_phnum, kernel_phdr, num_sectors,
                           boot_path="bootblock", kernel_path="kernel"):
    kernel_end = SECTOR_SIZE + sectors_for(kernel_phdr.memsz) * SECTOR_SIZE
    return "\n".join([
        format_segment(boot_path, 0, boot_phdr, SECTOR_SIZE),
        format_segment(kernel_path, 0, kernel_phdr, kernel_end),
        f"kernel program headers: {kernel_phnum}",
        f"os_size: {num_sectors} sectors",
        f"image size: {kernel_end // SECTOR_SIZE} sectors",
    ])


def print_extended_report(result, boot_path, kernel_path):
    print(format_extended_report(result.boot_phdr, result.kernel_phnum,
                                 result.kernel_phdr, result.num_sectors,
                                 boot_path, kernel_path))
