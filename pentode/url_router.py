# pentode/url_router.py
import logging
import urllib.parse

from .models.url import DEFAULT_PORT, GEMINI_SCHEME, Url
from .protocol.errors import InvalidURLError

logger = logging.getLogger(__name__)

# urljoin only resolves relative references for schemes it knows about
urllib.parse.uses_relative.append(GEMINI_SCHEME)
urllib.parse.uses_netloc.append(GEMINI_SCHEME)


class URLRouter:
    SUPPORTED = {GEMINI_SCHEME}

    def parse(self, text: str) -> Url:
        text = text.strip()
        if not text:
            raise InvalidURLError("Empty address")
        # A bare "host/path" typed by the user means gemini://host/path
        if "://" not in text:
            text = f"{GEMINI_SCHEME}://{text}"
        parts = urllib.parse.urlsplit(text)
        scheme = parts.scheme.lower()
        if scheme not in self.SUPPORTED:
            raise InvalidURLError(f"Unsupported scheme: {scheme}")
        if not parts.hostname:
            raise InvalidURLError(f"Missing host in {text!r}")
        try:
            port = parts.port or DEFAULT_PORT
        except ValueError as e:
            raise InvalidURLError(f"Invalid port in {text!r}") from e
        query = parts.query if "?" in text else None
        return Url(
            scheme=scheme,
            host=parts.hostname,
            port=port,
            path=parts.path or "/",
            query=query,
        )

    def resolve(self, base: Url, reference: str) -> Url:
        """Resolve a redirect target; targets without a scheme are joined onto base."""
        reference = reference.strip()
        if "://" in reference:
            return self.parse(reference)
        joined = urllib.parse.urljoin(str(base), reference)
        logger.debug("Resolved %r against %s -> %s", reference, base, joined)
        return self.parse(joined)

    def to_text(self, url: Url) -> str:
        return str(url)
