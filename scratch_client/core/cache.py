import logging
from typing import Any, Callable, Dict, Generic, Hashable, Optional, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class DocumentFactory(Protocol[T_co]):
    def create(self, key: Any, seed: Optional[Dict[str, Any]]) -> T_co: ...


def normalize_username(key: str) -> str:
    """用户名大小写不敏感"""
    return str(key).casefold()


def normalize_project_id(key) -> int:
    """项目 ID 统一为 int，非整数抛出 ValueError"""
    return int(key)


class IdentityCache(Generic[T]):
    """
    Keyed store guaranteeing one document instance per normalized key.

    Entries are created lazily through the factory and never evicted. On a
    cache hit the seed is ignored unless merge_seed_on_hit is set, in which
    case fields the document does not know yet are added without overwriting.
    """

    def __init__(
        self,
        factory: DocumentFactory[T],
        normalize_key: Callable[[Any], Hashable] = lambda key: key,
        merge_seed_on_hit: bool = False,
    ):
        self.factory = factory
        self.normalize_key = normalize_key
        self.merge_seed_on_hit = merge_seed_on_hit
        self._entries: Dict[Hashable, T] = {}
        logger.debug(
            "IdentityCache initialized with factory=%s, merge_seed_on_hit=%s",
            type(factory).__name__,
            merge_seed_on_hit,
        )

    def get_or_create(self, key: Any, seed: Optional[Dict[str, Any]] = None) -> T:
        normalized = self.normalize_key(key)

        if normalized in self._entries:
            entry = self._entries[normalized]
            logger.debug("Cache hit: key=%s", normalized)
            if seed and self.merge_seed_on_hit:
                entry.seed(seed)
            return entry

        logger.debug("Cache miss: key=%s", normalized)
        entry = self.factory.create(normalized, seed)
        self._entries[normalized] = entry
        return entry

    def peek(self, key: Any) -> Optional[T]:
        """不创建条目的查询"""
        return self._entries.get(self.normalize_key(key))

    def __contains__(self, key: Any) -> bool:
        return self.normalize_key(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
