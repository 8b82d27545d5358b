"""Core module for browserscope.

Exports the session wrapper and the pieces it is built from: context
handles, the scope activator, the wait/retry engine and URL comparison.
"""

from browserscope.core.activator import ScopeActivator
from browserscope.core.context import ContextHandle, ContextTree
from browserscope.core.driver import PlaywrightAlert, PlaywrightDriver, PlaywrightElement
from browserscope.core.factory import (
    DriverFactory,
    DriverFactoryMethod,
    DriverFactoryRegistry,
    PlaywrightDriverFactory,
)
from browserscope.core.protocols import (
    AlertProtocol,
    DriverProtocol,
    ElementProtocol,
    UrlComponent,
    UrlKind,
)
from browserscope.core.runner import BrowserTestRunner
from browserscope.core.session import BrowserSession
from browserscope.core.states import ContextStateMachine
from browserscope.core.urls import compare_url, navigation_target, urls_equal
from browserscope.core.waiting import Waiter, WaitSpec, retry, wait_for

__all__ = [
    "AlertProtocol",
    "BrowserSession",
    "BrowserTestRunner",
    "ContextHandle",
    "ContextStateMachine",
    "ContextTree",
    "DriverFactory",
    "DriverFactoryMethod",
    "DriverFactoryRegistry",
    "DriverProtocol",
    "ElementProtocol",
    "PlaywrightAlert",
    "PlaywrightDriver",
    "PlaywrightDriverFactory",
    "PlaywrightElement",
    "ScopeActivator",
    "UrlComponent",
    "UrlKind",
    "WaitSpec",
    "Waiter",
    "compare_url",
    "navigation_target",
    "retry",
    "urls_equal",
    "wait_for",
]
