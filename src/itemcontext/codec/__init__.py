"""Path codec: folder-like URLs <-> item context addresses."""

from itemcontext.codec.address import Address, Definition, EMBEDDED_PARAMS
from itemcontext.codec.assembler import (
    Assembler,
    AssemblerChain,
    ItemContextAssembler,
    QueryAssembler,
)
from itemcontext.codec.query import (
    QueryStringError,
    construct_query_string,
    parse_query_string,
)

__all__ = [
    "Address",
    "Definition",
    "EMBEDDED_PARAMS",
    "Assembler",
    "AssemblerChain",
    "ItemContextAssembler",
    "QueryAssembler",
    "QueryStringError",
    "construct_query_string",
    "parse_query_string",
]
