"""
ESC/POS command encoder for ESCIP05 thermal printers.

Every function returns a self-contained byte sequence. The printer, not this
module, keeps formatting mode between commands, so callers emit explicit
resets. Numeric arguments are clamped into the range the command accepts.
"""

from enum import IntEnum
from typing import Iterable, Sequence, Tuple, Union

from .exceptions import ProtocolEncodingError
from .utils.bitmap import pixel_is_ink

# ESC/POS command constants
ESC = 0x1B
GS = 0x1D
LF = 0x0A

TEXT_ENCODING = "gb2312"
BARCODE_ENCODING = "ascii"
QR_ENCODING = "utf-8"

BARCODE_MAX_PAYLOAD = 255
# The store block length counts the three selector bytes that follow pL pH
QR_MAX_PAYLOAD = 0xFFFF - 3
RASTER_BAND_HEIGHT = 24

Pixel = Union[int, Tuple[int, int, int]]


class Alignment(IntEnum):
    LEFT = 0
    CENTER = 1
    RIGHT = 2


class BarcodeSymbology(IntEnum):
    """Symbology codes of the GS k function B form."""
    UPC_A = 65
    UPC_E = 66
    EAN13 = 67
    EAN8 = 68
    CODE39 = 69
    ITF = 70
    CODABAR = 71
    CODE93 = 72
    CODE128 = 73


QR_ERROR_LEVELS = {"L": 0x30, "M": 0x31, "Q": 0x32, "H": 0x33}


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, int(value)))


def init() -> bytes:
    """ESC @ - initialize printer."""
    return bytes([ESC, 0x40])


def reset() -> bytes:
    return init()


def align(alignment: Union[Alignment, str, int]) -> bytes:
    """ESC a n - set justification."""
    if isinstance(alignment, str):
        try:
            alignment = Alignment[alignment.upper()]
        except KeyError:
            raise ValueError(f"Unknown alignment: {alignment}") from None
    return bytes([ESC, ord('a'), Alignment(alignment).value])


def align_left() -> bytes:
    return align(Alignment.LEFT)


def align_center() -> bytes:
    return align(Alignment.CENTER)


def align_right() -> bytes:
    return align(Alignment.RIGHT)


def bold(enabled: bool) -> bytes:
    """ESC E n - emphasized mode."""
    return bytes([ESC, ord('E'), 1 if enabled else 0])


def underline(mode: int) -> bytes:
    """ESC - n - 0 off, 1 one-dot, 2 two-dot."""
    return bytes([ESC, ord('-'), _clamp(mode, 0, 2)])


def inverse(enabled: bool) -> bytes:
    """GS B n - white on black."""
    return bytes([GS, ord('B'), 1 if enabled else 0])


def text_size(width: int, height: int) -> bytes:
    """GS ! n - width multiplier in the high nibble, height in the low."""
    size = (_clamp(width, 0, 7) << 4) | _clamp(height, 0, 7)
    return bytes([GS, ord('!'), size])


def size_normal() -> bytes:
    return text_size(0, 0)


def size_double() -> bytes:
    return text_size(1, 1)


def size_triple() -> bytes:
    return text_size(2, 2)


def size_wide() -> bytes:
    return text_size(1, 0)


def size_tall() -> bytes:
    return text_size(0, 1)


def density(level: int) -> bytes:
    """ESC ~ n - print density, 0 lightest to 15 darkest."""
    return bytes([ESC, ord('~'), _clamp(level, 0, 15)])


def line_spacing(dots: int) -> bytes:
    """ESC 3 n - line spacing in dots."""
    return bytes([ESC, ord('3'), _clamp(dots, 0, 255)])


def reset_line_spacing() -> bytes:
    """ESC 2 - default line spacing."""
    return bytes([ESC, ord('2')])


def text(value: str) -> bytes:
    """Encoded text without a line feed."""
    return value.encode(TEXT_ENCODING, errors="replace")


def line(value: str) -> bytes:
    """Encoded text followed by a line feed."""
    return text(value) + bytes([LF])


def centered_line(value: str) -> bytes:
    return align_center() + line(value) + align_left()


def divider(width: int) -> bytes:
    return line("-" * max(0, int(width)))


def double_divider(width: int) -> bytes:
    return line("=" * max(0, int(width)))


def blank_lines(count: int = 1) -> bytes:
    return bytes([LF]) * max(0, int(count))


def barcode(payload: str, symbology: BarcodeSymbology = BarcodeSymbology.CODE128,
            height_dots: int = 162) -> bytes:
    """
    Print a 1D barcode.

    Emits height (GS h), module width (GS w), HRI below (GS H), HRI font A
    (GS f) and then GS k m n d1..dn.

    Raises:
        ProtocolEncodingError: payload empty, not ASCII, or longer than 255 bytes
    """
    try:
        data = payload.encode(BARCODE_ENCODING)
    except UnicodeEncodeError:
        raise ProtocolEncodingError("Barcode payload must be ASCII",
                                    {"payload": payload}) from None
    if not data:
        raise ProtocolEncodingError("Barcode payload is empty")
    if len(data) > BARCODE_MAX_PAYLOAD:
        raise ProtocolEncodingError(
            f"Barcode payload exceeds {BARCODE_MAX_PAYLOAD} bytes",
            {"length": len(data)},
        )

    command = bytearray()
    command.extend([GS, ord('h'), _clamp(height_dots, 1, 255)])
    command.extend([GS, ord('w'), 2])
    command.extend([GS, ord('H'), 2])
    command.extend([GS, ord('f'), 0])
    command.extend([GS, ord('k'), BarcodeSymbology(symbology).value, len(data)])
    command.extend(data)
    return bytes(command)


def qr_code(payload: str, module_size: int = 6, error_correction: str = "M") -> bytes:
    """
    Print a QR code with the printer's native GS ( k function.

    Model 2, module size, error correction level, store data, print.

    Raises:
        ProtocolEncodingError: payload does not fit the two-byte length field
    """
    data = payload.encode(QR_ENCODING)
    if len(data) > QR_MAX_PAYLOAD:
        raise ProtocolEncodingError(
            f"QR payload exceeds {QR_MAX_PAYLOAD} bytes",
            {"length": len(data)},
        )
    level = QR_ERROR_LEVELS.get(error_correction.upper())
    if level is None:
        raise ValueError(f"Unknown QR error correction level: {error_correction}")

    store_length = len(data) + 3
    p_low = store_length % 256
    p_high = store_length // 256

    command = bytearray()
    command.extend([GS, ord('('), ord('k'), 4, 0, 49, 65, 50, 0])
    command.extend([GS, ord('('), ord('k'), 3, 0, 49, 67, _clamp(module_size, 1, 16)])
    command.extend([GS, ord('('), ord('k'), 3, 0, 49, 69, level])
    command.extend([GS, ord('('), ord('k'), p_low, p_high, 49, 80, 48])
    command.extend(data)
    command.extend([GS, ord('('), ord('k'), 3, 0, 49, 81, 48])
    return bytes(command)


def raster_image(pixels: Sequence[Pixel], width: int, height: int) -> bytes:
    """
    Convert a row-major pixel list into 24-dot double-density bit image bands.

    Pixels are 0xRRGGBB integers or (r, g, b) tuples. Each band is
    ESC * 33 nL nH followed by three bytes per column, top row in the most
    significant bit. Rows past the bottom of the image are left blank.
    """
    if width <= 0 or height <= 0:
        raise ValueError("Image dimensions must be positive")
    if width > 0xFFFF:
        raise ProtocolEncodingError("Image is wider than 65535 dots", {"width": width})
    if len(pixels) != width * height:
        raise ValueError(
            f"Expected {width * height} pixels for {width}x{height}, got {len(pixels)}"
        )

    ink = [pixel_is_ink(p) for p in pixels]

    command = bytearray(line_spacing(RASTER_BAND_HEIGHT))
    for top in range(0, height, RASTER_BAND_HEIGHT):
        command.extend([ESC, ord('*'), 33, width % 256, width // 256])
        for x in range(width):
            for slice_index in range(3):
                column_byte = 0
                for bit in range(8):
                    y = top + slice_index * 8 + bit
                    if y < height and ink[y * width + x]:
                        column_byte |= 1 << (7 - bit)
                command.append(column_byte)
        command.append(LF)
    command.extend(reset_line_spacing())
    return bytes(command)


def feed_lines(count: int) -> bytes:
    """ESC d n - print and feed n lines."""
    return bytes([ESC, ord('d'), _clamp(count, 0, 255)])


def feed_and_cut(full: bool = True) -> bytes:
    """Feed past the cutter then GS V 0 (full) or GS V 1 (partial)."""
    if full:
        return feed_lines(4) + bytes([GS, ord('V'), 0x00])
    return feed_lines(3) + bytes([GS, ord('V'), 0x01])


def cash_drawer_kick() -> bytes:
    """ESC p m t1 t2 - pulse drawer pin 2."""
    return bytes([ESC, ord('p'), 0x00, 0x32, 0xFA])


def beep(times: int = 1, duration: int = 5) -> bytes:
    """ESC B n t - buzzer, both arguments 1-9."""
    return bytes([ESC, ord('B'), _clamp(times, 1, 9), _clamp(duration, 1, 9)])


def query_status() -> bytes:
    return bytes([GS, ord('a'), 0x00])


def join(parts: Iterable[bytes]) -> bytes:
    """Concatenate command fragments in order."""
    return b"".join(parts)
