"""Deterministic device bucketing for staged (gray) rollouts."""

BUCKET_COUNT = 100


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def bucket(device_id: str) -> int:
    """Map ``device_id`` to a stable bucket in ``[0, 100)``.

    31-multiplier string hash over UTF-16 code units with signed 32-bit
    wrap-around, then ``abs(hash) % 100``. Clients already bucketed by this
    function must keep landing in the same bucket, so the hash may not change.
    """
    data = device_id.encode("utf-16-le", "surrogatepass")
    value = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        value = _to_int32((value << 5) - value + unit)
    return abs(value) % BUCKET_COUNT


def is_included(device_id: str, gray_percent: int) -> bool:
    return bucket(device_id) <= gray_percent
