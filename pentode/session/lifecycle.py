# pentode/session/lifecycle.py
import logging
import threading
from typing import Any, Dict, List, Optional

from ..models.elements import Link
from ..models.url import Url
from ..protocol.dispatcher import DEFAULT_MAX_REDIRECTS, ResponseDispatcher
from ..protocol.errors import ClientError, RequestCancelledError
from ..protocol.transport import Transport
from ..url_router import URLRouter
from .history import NavigationHistory
from .sink import PresentationSink, ScopedSink

logger = logging.getLogger(__name__)

READY = "ready"


class RequestScope:
    """
    Resources of one logical fetch: its connections and its worker thread.

    close() cancels the scope and releases everything registered under it.
    A resource registered after the scope was cancelled is closed at once.
    """

    def __init__(self, url: Url):
        self.url = url
        self.lock = threading.RLock()
        self.cancelled = False
        self.thread: Optional[threading.Thread] = None
        self._resources: List[Any] = []

    def register(self, resource) -> None:
        with self.lock:
            if not self.cancelled:
                self._resources.append(resource)
                return
        resource.close()

    def close(self) -> None:
        with self.lock:
            if self.cancelled:
                return
            self.cancelled = True
            resources, self._resources = self._resources, []
        for resource in resources:
            resource.close()
        logger.debug("Cancelled request for %s", self.url)

    def join(self, timeout: Optional[float] = None) -> bool:
        if self.thread is None:
            return True
        self.thread.join(timeout)
        return not self.thread.is_alive()


class BrowserSession:
    """
    Owns the navigation history and the single in-flight request.

    The go/back/follow methods are meant to be called from the presentation
    thread and return immediately; network work runs on a worker thread.
    """

    def __init__(
        self,
        sink: PresentationSink,
        settings: Optional[Dict[str, Any]] = None,
        transport=None,
        router: Optional[URLRouter] = None,
        history: Optional[NavigationHistory] = None,
    ):
        network = (settings or {}).get("network", {})
        self.sink = sink
        self.router = router or URLRouter()
        self.history = history or NavigationHistory()
        self.transport = transport or Transport(
            connect_timeout=network.get("connect_timeout"),
            read_timeout=network.get("read_timeout"),
        )
        self.max_redirects = network.get("max_redirects", DEFAULT_MAX_REDIRECTS)
        self._lock = threading.Lock()
        self._scope: Optional[RequestScope] = None

    # ---------- input source ----------
    def go(self, text: str) -> None:
        try:
            url = self.router.parse(text)
        except ClientError as e:
            logger.warning("Rejected address %r: %s", text, e)
            self.sink.show_error_dialog(str(e))
            return
        self.initiate(url)

    def back(self) -> None:
        try:
            url = self.history.pop_for_back()
        except ClientError as e:
            self.sink.show_error_dialog(str(e))
            return
        # The previous page is already on top of the history again
        self.initiate(url, record_history=False)

    def follow(self, link: Link) -> None:
        self.go(link.target)

    # ---------- lifecycle ----------
    def initiate(self, url: Url, query: Optional[str] = None, record_history: bool = True) -> RequestScope:
        """Cancel the request in flight, if any, and start fetching url."""
        scope = RequestScope(url)
        with self._lock:
            previous, self._scope = self._scope, scope
            if previous is not None:
                previous.close()
        logger.info("Loading %s", url)
        self.sink.set_status_message(f"loading {url}")
        scope.thread = threading.Thread(
            target=self._run,
            args=(scope, url, query, record_history),
            name=f"Request {url}",
            daemon=True,
        )
        scope.thread.start()
        return scope

    def cancel(self) -> None:
        with self._lock:
            scope, self._scope = self._scope, None
        if scope is not None:
            scope.close()
            self.sink.set_status_message(READY)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Join the worker of the current request; True when it has finished."""
        with self._lock:
            scope = self._scope
        return scope is None or scope.join(timeout)

    def close(self) -> None:
        self.cancel()

    @property
    def current_url(self) -> Optional[Url]:
        return self.history.current

    def _run(self, scope: RequestScope, url: Url, query: Optional[str], record_history: bool) -> None:
        sink = ScopedSink(self.sink, scope)
        dispatcher = ResponseDispatcher(
            self.transport,
            sink,
            self.history,
            router=self.router,
            max_redirects=self.max_redirects,
            register=scope.register,
            record_history=record_history,
            scope=scope,
        )
        try:
            dispatcher.navigate(url, query)
        except RequestCancelledError:
            logger.debug("Request for %s stopped after cancel", url)
        except ClientError as e:
            if not scope.cancelled:
                logger.warning("Request for %s failed: %s", url, e)
                sink.show_error_dialog(str(e))
        except Exception as e:
            # Reads fail in all sorts of ways once the scope closed the socket
            if scope.cancelled:
                logger.debug("Request for %s stopped after cancel: %r", url, e)
            else:
                logger.exception("Unexpected error while loading %s", url)
                sink.show_error_dialog(f"Unexpected error: {e}")
        finally:
            current = self.history.current or url
            sink.set_address(str(current))
            sink.set_status_message(READY)
            scope.close()
            with self._lock:
                if self._scope is scope:
                    self._scope = None
