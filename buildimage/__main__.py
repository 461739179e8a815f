import argparse
import sys
import colorama
from colorama import Fore, Style
from buildimage import __version__
from buildimage.errors import BuildImageError
from buildimage.image import DEFAULT_IMAGE_FILE, build_image
from buildimage.report import print_extended_report


def progress(message):
    print(Style.BRIGHT + Fore.GREEN + "==> " + Fore.RESET + message + Style.RESET_ALL)


def error(message):
    print(f"{Fore.RED}{Style.BRIGHT}buildimage: {message}{Style.RESET_ALL}",
          file=sys.stderr)
    sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Creates a bootable disk image from a bootblock and a kernel.")
    parser.add_argument("--extended", action="store_true",
        help="Print the segments written to the image.")
    parser.add_argument("-o", dest="output", default=DEFAULT_IMAGE_FILE,
        help="The output image file.")
    parser.add_argument("--quiet", action="store_true",
        help="Do not print progress messages.")
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("bootblock", help="The bootblock ELF executable.")
    parser.add_argument("kernel", help="The kernel ELF executable.")
    args = parser.parse_args(argv)

    if not args.quiet:
        progress(f"Building {args.output}")

    try:
        result = build_image(args.bootblock, args.kernel, args.output)
    except BuildImageError as e:
        error(str(e))

    if args.extended:
        print_extended_report(result, args.bootblock, args.kernel)
    if not args.quiet:
        progress(f"Wrote {result.image_size} bytes "
                 f"({result.num_sectors} kernel sectors)")


def console_main():
    colorama.init()
    main()


if __name__ == "__main__":
    console_main()
