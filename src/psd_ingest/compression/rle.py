"""
Apple PackBits run-length codec.

The PackBits algorithm uses a single header byte to indicate:

- Values 0-127: Copy the next (n+1) literal bytes
- Values 129-255: Repeat the next byte (257-n) times
- Value 128: No-op

Example::

    Input:  [A, A, A, B, C, C, C, C]
    Output: [254, A, 0, B, 253, C]

The decoder is lenient: it stops once ``size`` bytes have been produced,
ignores surplus input and zero-pads when the input runs out.
"""

MAX_RUN = 128


def decode(data: bytes, size: int) -> bytes:
    """decode(data, size) -> bytes

    Apple PackBits RLE decoder.
    """
    result = bytearray(size)
    length = len(data)
    i, j = 0, 0
    while i < length and j < size:
        header = data[i]
        i += 1
        if header > 128:
            if i >= length:
                break
            count = min(257 - header, size - j)
            result[j : j + count] = data[i : i + 1] * count
            j += count
            i += 1
        elif header < 128:
            chunk = data[i : i + header + 1]
            count = min(len(chunk), size - j)
            result[j : j + count] = chunk[:count]
            j += count
            i += header + 1
    return bytes(result)


def encode(data: bytes) -> bytes:
    """encode(data) -> bytes

    Apple PackBits RLE encoder.
    """
    length = len(data)
    result = bytearray()
    i = 0
    while i < length:
        run = 1
        while i + run < length and run < MAX_RUN and data[i + run] == data[i]:
            run += 1
        if run >= 3 or (run == 2 and i + run == length):
            result.extend((257 - run, data[i]))
            i += run
            continue

        # Literal until the next run of 3 identical bytes.
        j = i
        while j < length and j - i < MAX_RUN:
            if j + 2 < length and data[j] == data[j + 1] == data[j + 2]:
                break
            j += 1
        result.append(j - i - 1)
        result.extend(data[i:j])
        i = j
    return bytes(result)
