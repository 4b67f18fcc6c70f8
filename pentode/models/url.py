# pentode/models/url.py
from dataclasses import dataclass, replace
from typing import Optional

GEMINI_SCHEME = "gemini"
DEFAULT_PORT = 1965


@dataclass(frozen=True)
class Url:
    scheme: str               # 'gemini' unless the user typed another one
    host: str
    port: int = DEFAULT_PORT
    path: str = "/"
    query: Optional[str] = None

    def __str__(self) -> str:
        port_part = "" if self.port == DEFAULT_PORT else f":{self.port}"
        query_part = "" if self.query is None else f"?{self.query}"
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}{port_part}{self.path}{query_part}"

    def with_query(self, query: Optional[str]) -> "Url":
        return replace(self, query=query)

    @property
    def filename(self) -> str:
        """Last path segment, used as the suggested name when saving."""
        name = self.path.rstrip("/").rsplit("/", 1)[-1]
        return name or self.host
