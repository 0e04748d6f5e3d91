"""Flask web surface: pages, chat API and the background chat loop."""

from smartshop.web.app import create_app
from smartshop.web.header import HeaderView, build_header
from smartshop.web.runtime import ChatRegistry, ChatRuntime, EventLoopThread, stream_events

__all__ = [
    "create_app",
    "HeaderView",
    "build_header",
    "ChatRegistry",
    "ChatRuntime",
    "EventLoopThread",
    "stream_events",
]
