from __future__ import annotations

from .mongo import mongo_rules
from .sql import sql_rules
from .redis import redis_rules
from .elasticsearch import elasticsearch_rules

BUILTIN_RULES = {
    "mongo": mongo_rules,
    "sql": sql_rules,
    "redis": redis_rules,
    "elasticsearch": elasticsearch_rules,
}

__all__ = ["mongo_rules", "sql_rules", "redis_rules", "elasticsearch_rules", "BUILTIN_RULES"]
