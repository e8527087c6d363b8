"""Query base classes: immutable request for data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Generic

from typing_extensions import TypeVar

from .request import Request

if TYPE_CHECKING:
    from datetime import timedelta

TResult = TypeVar("TResult", default=None)


class Query(Request[TResult], Generic[TResult]):
    """Base class for all Queries.

    Queries represent a request for data and **must** be immutable and free
    of side effects. Each query carries tracing metadata for correlation.
    """


class CacheableQuery(Query[TResult], Generic[TResult]):
    """Query whose response may be served from the cache.

    Only pure queries should opt in: on a cache hit the handler is skipped
    entirely.

    Override :attr:`cache_key` to pin a custom key; otherwise the key is
    derived from the type name and a hash of the query content. Override
    :attr:`cache_ttl` to replace the default TTL. Set
    :attr:`cache_response_type` to the full response type (``ProductDto``,
    ``list[ProductDto]``, ...) so serializing stores (Redis) can rebuild the
    response on a hit.

    Usage::

        class GetProductQuery(CacheableQuery[ProductDto]):
            cache_response_type: ClassVar[Any] = ProductDto
            product_id: int

            @property
            def cache_ttl(self) -> timedelta | None:
                return timedelta(minutes=10)
    """

    cache_response_type: ClassVar[Any] = None

    @property
    def cache_key(self) -> str | None:
        return None

    @property
    def cache_ttl(self) -> timedelta | float | None:
        return None
