"""Thor-facing components: gateway, visitors, bindings, filters, ticker."""

from thor_connex.thor.bindings import EventBinding, MethodBinding
from thor_connex.thor.facade import Thor
from thor_connex.thor.filter import LogFilter
from thor_connex.thor.gateway import HttpNodeGateway
from thor_connex.thor.ticker import HeadWatcher, Ticker
from thor_connex.thor.visitors import AccountVisitor, BlockVisitor, TransactionVisitor

__all__ = [
    "AccountVisitor", "BlockVisitor", "TransactionVisitor",
    "EventBinding", "MethodBinding",
    "HeadWatcher", "Ticker",
    "HttpNodeGateway",
    "LogFilter",
    "Thor",
]
