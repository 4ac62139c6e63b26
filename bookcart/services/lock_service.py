# bookcart/services/lock_service.py
import uuid
from contextlib import contextmanager

import redis
from redis.exceptions import RedisError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from bookcart.domain.errors import CartBusy
from bookcart.utils.settings import REDIS_URL, CART_LOCK_TTL_SECONDS
from bookcart.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


#tenacity retry
def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(RedisError),
    )


class CartLockService:
    """
    -lock na koszyk (jeden zapis na raz dla danego wlasciciela)
    -zwalnianie locka tylko przez tego kto go trzyma
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, ttl: int = CART_LOCK_TTL_SECONDS):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl

    @staticmethod
    def _key(owner_key: str) -> str:
        return f"cart:{owner_key}:lock"

    @redis_retry()
    def acquire_cart_lock(self, owner_key: str, token: str) -> bool:
        key = self._key(owner_key)
        logger.info(f"Acquire lock {key}")
        #SET cart:session:abc:lock "<token>" NX EX 10
        return bool(self.redis.set(name=key, value=token, nx=True, ex=self.ttl))

    @redis_retry()
    def release_cart_lock(self, owner_key: str, token: str) -> bool:
        key = self._key(owner_key)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @contextmanager
    def hold(self, *owner_keys: str):
        """Trzyma locki na wszystkich podanych koszykach (merge blokuje dwa)."""
        token = uuid.uuid4().hex
        acquired = []
        try:
            for owner_key in sorted(set(owner_keys)):
                if not self.acquire_cart_lock(owner_key, token):
                    raise CartBusy(f"Koszyk {owner_key} jest modyfikowany przez inny request")
                acquired.append(owner_key)
            yield
        finally:
            for owner_key in acquired:
                self.release_cart_lock(owner_key, token)
