import re

from .custom_exceptions import EncoderError

INT_TYPE = re.compile(r"^(u?int)(\d*)$")
FIXED_BYTES_TYPE = re.compile(r"^bytes(\d+)$")


def _parse_solidity_int_type(arg_type: str) -> tuple[int, bool]:
    """
    Given a Solidity int/uint type (e.g. 'uint256', 'int128', 'uint', 'int'),
    returns (bits, is_signed).
      - bits = 256 if no explicit size is specified.
      - is_signed = True if it starts with 'int', False if 'uint'.
    """
    match = INT_TYPE.match(arg_type)
    if not match:
        raise EncoderError(f"Invalid integer type format '{arg_type}'.")
    is_signed = not match.group(1).startswith("u")
    bits_str = match.group(2)
    bits = int(bits_str) if bits_str else 256
    return (bits, is_signed)


def to_hex_with_alignment(value: int) -> str:
    """
    Encodes `value` (non-negative integer) as a 32-byte hex string.
    For negative values, you must first apply two's complement.
    """
    return format(value, "064x")


def _pad_right(hex_str: str) -> str:
    remainder = len(hex_str) % 64
    if remainder:
        hex_str += "0" * (64 - remainder)
    return hex_str


def _strip_0x(value: str) -> str:
    return value[2:] if value.lower().startswith("0x") else value


def encode_int(value: int, bits: int, is_signed: bool) -> str:
    """
    Encodes an integer value (possibly negative if signed) into 32 bytes
    using two's complement for negative values.
    """
    if isinstance(value, bool):
        value = int(value)

    if is_signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        raise EncoderError(f"Value {value} is out of range for {bits}-bit integer")

    if value < 0:
        value = (1 << 256) + value

    return to_hex_with_alignment(value)


def encode_address(address: str) -> str:
    """Encodes a 20-byte hex address (with '0x' or without) as 32 bytes."""
    address_no_0x = _strip_0x(address)
    if len(address_no_0x) != 40:
        raise EncoderError(f"Invalid address '{address}'")
    return to_hex_with_alignment(int(address_no_0x, 16))


def encode_fixed_bytes(value: str, length: int) -> str:
    """Encodes fixed-length bytes (e.g., bytes1..bytes32) into 32 bytes."""
    raw_hex = _strip_0x(value).lower()
    max_hex_len = length * 2
    if len(raw_hex) > max_hex_len:
        raise EncoderError(
            f"Provided bytes length exceeds {length} bytes (max {max_hex_len} hex chars)."
        )
    return raw_hex.ljust(64, "0")


def encode_bytes(data: str | bytes) -> str:
    """Encodes dynamic `bytes` as its 32-byte length followed by the padded data."""
    raw = bytes(data) if isinstance(data, (bytes, bytearray)) else bytes.fromhex(_strip_0x(data))
    return to_hex_with_alignment(len(raw)) + _pad_right(raw.hex())


def encode_string(value: str) -> str:
    """Encodes a `string` the same way as `bytes`, from its exact UTF-8 bytes."""
    if not isinstance(value, str):
        raise EncoderError(f"Expected a string, got {value!r}")
    return encode_bytes(value.encode("utf-8"))


def encode_bool(value) -> str:
    """Accepts a bool or the strings "true"/"false" given on the command line."""
    if isinstance(value, str) and value.lower() in ("true", "false"):
        value = value.lower() == "true"
    if not isinstance(value, bool):
        raise EncoderError(f"Expected a boolean, got {value!r}")
    return to_hex_with_alignment(int(value))


def encode_static(arg_type: str, value) -> str:
    if arg_type == "address":
        return encode_address(value)
    if arg_type == "bool":
        return encode_bool(value)
    if INT_TYPE.match(arg_type):
        bits, is_signed = _parse_solidity_int_type(arg_type)
        return encode_int(int(value), bits, is_signed)
    fixed_bytes = FIXED_BYTES_TYPE.match(arg_type)
    if fixed_bytes:
        return encode_fixed_bytes(value, int(fixed_bytes.group(1)))
    raise EncoderError(f"Unknown or unhandled argument type: {arg_type}")


def encode_array(element_type: str, elements: list) -> str:
    """
    Encodes a one-dimensional dynamic array of a static element type:
      [ 32-byte array length, each element in 32 bytes ]
    """
    if is_dynamic_type(element_type):
        raise EncoderError(f"Arrays of dynamic type '{element_type}' are not supported")
    return to_hex_with_alignment(len(elements)) + "".join(
        encode_static(element_type, element) for element in elements
    )


def is_dynamic_type(arg_type: str) -> bool:
    return arg_type in ("bytes", "string") or arg_type.endswith("[]")


def encode_constructor_arguments(constructor_abi: list, constructor_args: list) -> str:
    """
    ABI-encodes constructor arguments into the hex string appended to the
    creation bytecode (no '0x' prefix).

    Static arguments go into the head in place. Dynamic arguments put an
    offset into the head and their payload into the tail, in order.
    """
    if len(constructor_abi) != len(constructor_args):
        raise EncoderError(
            f"Constructor expects {len(constructor_abi)} argument(s), got {len(constructor_args)}"
        )

    head_size = 32 * len(constructor_abi)
    head = []
    tail = []
    tail_size = 0

    try:
        for argument_abi, arg_value in zip(constructor_abi, constructor_args):
            arg_type = argument_abi["type"]

            if not is_dynamic_type(arg_type):
                head.append(encode_static(arg_type, arg_value))
                continue

            if arg_type == "string":
                payload = encode_string(arg_value)
            elif arg_type == "bytes":
                payload = encode_bytes(arg_value)
            else:
                payload = encode_array(arg_type[:-2], arg_value)

            head.append(to_hex_with_alignment(head_size + tail_size))
            tail.append(payload)
            tail_size += len(payload) // 2

    except EncoderError:
        raise
    except (AttributeError, TypeError, ValueError, KeyError) as e:
        raise EncoderError(str(e)) from None

    return "".join(head) + "".join(tail)
