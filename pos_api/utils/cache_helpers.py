import time

CACHE_TTL = 60 * 60  # 60 minutes


def _ttl_bucket() -> int:
    """
    Changes every 60 minutes -> auto cache expiry
    """
    return int(time.time() // CACHE_TTL)
