# pentode/protocol/dispatcher.py
import logging
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional

from ..models.status import StatusGroup, status_group
from ..models.url import Url
from ..url_router import URLRouter
from . import gemtext
from .errors import RequestCancelledError, ServerError, TooManyRedirectsError, UnknownStatusError
from .status import parse_status
from .transport import Connection, encode_query

logger = logging.getLogger(__name__)

DEFAULT_MAX_REDIRECTS = 5

TEMP_FAILURES = {
    40: "Temporary failure",
    41: "Server unavailable",
    42: "CGI error",
    43: "Proxy error",
}
RATE_LIMITED = 44
PERM_FAILURES = {
    50: "Permanent failure",
    51: "Not found",
    52: "Gone",
    53: "Proxy request refused",
    54: "Bad request",
    59: "Bad request",
}
SENSITIVE_INPUT = 11


@dataclass
class Response:
    status: int
    meta: str
    body: Optional[Connection]   # only kept open for SUCCESS
    source_url: Url

    @property
    def group(self) -> StatusGroup:
        return status_group(self.status)


class FollowUp(NamedTuple):
    url: Url
    query: Optional[str] = None
    redirect: bool = False


class ResponseDispatcher:
    """
    Runs one navigation: fetch, act on the status, and fetch again when the
    status asks for it (redirects, answered input prompts).
    """

    def __init__(
        self,
        transport,
        sink,
        history,
        router: Optional[URLRouter] = None,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        register: Optional[Callable[[Connection], None]] = None,
        record_history: bool = True,
        scope=None,
    ):
        self.transport = transport
        self.sink = sink
        self.history = history
        self.router = router or URLRouter()
        self.max_redirects = max_redirects
        self.register = register
        self.record_history = record_history
        # Anything with a `lock` and a `cancelled` flag, usually a RequestScope
        self.scope = scope

    def fetch(self, url: Url, query: Optional[str] = None) -> Response:
        line, connection = self.transport.connect_and_send(url, query, self.register)
        try:
            code, meta = parse_status(line)
        except Exception:
            connection.close()
            raise
        if query is not None:
            url = url.with_query(encode_query(query))
        logger.info("%s -> %d %s", url, code, meta)
        if status_group(code) is not StatusGroup.SUCCESS:
            connection.close()
            connection = None
        return Response(code, meta, connection, url)

    def navigate(self, url: Url, query: Optional[str] = None) -> Url:
        """Follow a navigation to its end and return the last URL fetched."""
        redirects = 0
        while True:
            self._check_cancelled(url)
            response = self.fetch(url, query)
            try:
                self._check_cancelled(url)
            except RequestCancelledError:
                if response.body is not None:
                    response.body.close()
                raise
            try:
                follow = self.dispatch(response)
            finally:
                if response.body is not None:
                    response.body.close()
            if follow is None:
                return response.source_url
            if follow.redirect:
                redirects += 1
                if redirects > self.max_redirects:
                    raise TooManyRedirectsError(
                        f"More than {self.max_redirects} redirects starting from {url}"
                    )
            url, query = follow.url, follow.query

    def dispatch(self, response: Response) -> Optional[FollowUp]:
        code, meta = response.status, response.meta
        # Everything outside the redirect range is recorded, errors and prompts included
        if self.record_history and (code < 30 or code > 39):
            self._push(response.source_url)
        # Only the first page of a navigation skips the history
        self.record_history = True

        group = response.group
        if group is StatusGroup.INPUT and code in (10, 11):
            return self._prompt(response)
        if group is StatusGroup.SUCCESS and code in (20, 21):
            self.sink.clear()
            gemtext.render(response.body, meta, response.source_url, self.sink)
            return None
        if group is StatusGroup.REDIRECT and code in (30, 31):
            target = self.router.resolve(response.source_url, meta)
            logger.info("Redirect %d to %s", code, target)
            return FollowUp(target, redirect=True)
        if code in TEMP_FAILURES:
            raise ServerError(code, TEMP_FAILURES[code], meta)
        if code == RATE_LIMITED:
            raise ServerError(code, "Slow down", f"wait {meta} seconds")
        if code in PERM_FAILURES:
            raise ServerError(code, PERM_FAILURES[code], meta)
        raise UnknownStatusError(code, meta)

    def _check_cancelled(self, url: Url) -> None:
        if self.scope is not None and self.scope.cancelled:
            raise RequestCancelledError(f"Request for {url} was cancelled")

    def _push(self, url: Url) -> None:
        if self.scope is None:
            self.history.push(url)
            return
        # Holding the scope lock keeps a cancel from landing between check and push
        with self.scope.lock:
            self._check_cancelled(url)
            self.history.push(url)

    def _prompt(self, response: Response) -> Optional[FollowUp]:
        url = response.source_url
        answer = self.sink.prompt_user(
            f"Input for {url.host}", response.meta, response.status == SENSITIVE_INPUT
        )
        if answer is None:
            logger.debug("Prompt for %s cancelled", url)
            return None
        return FollowUp(url.with_query(None), answer)
