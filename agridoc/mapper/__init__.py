from agridoc.mapper.base import BaseMapper
from agridoc.mapper.json_mapper import JsonMapper

__all__ = [
    "BaseMapper",
    "JsonMapper",
]
