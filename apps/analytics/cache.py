"""
Group-scoped caching on top of Django's cache framework.

Keys live under ``meal-manager:<group_id>:``. Invalidation bumps a per-group
version number that is part of every key, so all cached entries of a group
become unreachable at once and expire on their own TTL. This works the same
on LocMemCache and RedisCache.

Example::

    from apps.analytics.cache import cached, invalidate_group_cache

    rate = cached(group.id, f'meal-rate:{period.id}', lambda: compute())
    ...
    invalidate_group_cache(group.id)  # after a write
"""

import logging
import time

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

KEY_PREFIX = 'meal-manager'


def _version_key(group_id) -> str:
    return f"{KEY_PREFIX}:{group_id}:version"


def _group_version(group_id) -> int:
    version = cache.get(_version_key(group_id))
    if version is None:
        version = 1
        cache.add(_version_key(group_id), version, timeout=None)
    return version


def group_key(group_id, name: str) -> str:
    """Versioned cache key of an entry belonging to a group."""
    return f"{KEY_PREFIX}:{group_id}:v{_group_version(group_id)}:{name}"


def cached(group_id, name: str, compute, timeout=None):
    """
    Get-or-set a group-scoped value.

    Args:
        group_id: Group the value belongs to
        name: Entry name, unique within the group
        compute: Zero-argument callable producing the value on a miss
        timeout: Seconds to keep the value; defaults to CACHE_TTL
    """
    key = group_key(group_id, name)
    value = cache.get(key)
    if value is None:
        value = compute()
        cache.set(key, value, timeout=timeout if timeout is not None else settings.CACHE_TTL)
    return value


def invalidate_group_cache(group_id) -> None:
    """Drop every cached entry of a group."""
    try:
        cache.incr(_version_key(group_id))
    except ValueError:
        # Version key missing or evicted
        cache.set(_version_key(group_id), time.time_ns(), timeout=None)
    logger.debug("Invalidated cache of group %s", group_id)
