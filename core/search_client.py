from typing import Any, Dict, List, Optional, Protocol, Sequence
from urllib.parse import quote
import httpx
import logging
from config.settings import settings
from core.entities import Candidate
from util.functions import clean_query
from util.timing import timed

logger = logging.getLogger(__name__)

_PLACEHOLDER_KEYS = {"your-google-search-api-key", "your-custom-search-engine-id"}


class SearchProvider(Protocol):
    async def query(self, text: str) -> List[Candidate]: ...


async def _get_json(
    url: str,
    params: Dict[str, Any],
    timeout: float,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    GET `url` and return the parsed JSON body. Raises for transport errors and non-2xx.
    """
    async with httpx.AsyncClient(timeout=timeout) as client:
        r = await client.get(url, params=params, headers=headers)
        r.raise_for_status()
        try:
            return r.json()
        except ValueError:
            return {}


class GoogleSearchProvider:
    """Google Custom Search JSON API with exact-phrase queries."""

    def __init__(
        self,
        api_key: str = settings.GOOGLE_SEARCH_API_KEY,
        cx: str = settings.GOOGLE_SEARCH_CX,
        url: str = settings.GOOGLE_SEARCH_URL,
        num: int = 5,
        timeout: float = settings.SEARCH_TIMEOUT_SECONDS,
        max_chars: int = settings.QUERY_MAX_CHARS,
    ) -> None:
        self._api_key = api_key
        self._cx = cx
        self._url = url
        self._num = num
        self._timeout = timeout
        self._max_chars = max_chars

    @property
    def configured(self) -> bool:
        return bool(
            self._api_key
            and self._cx
            and self._api_key not in _PLACEHOLDER_KEYS
            and self._cx not in _PLACEHOLDER_KEYS
        )

    async def query(self, text: str) -> List[Candidate]:
        if not self.configured:
            return []
        q = clean_query(text, self._max_chars)
        if not q:
            return []
        params = {"key": self._api_key, "cx": self._cx, "q": f'"{q}"', "num": self._num}
        with timed(logger, "search.google", chars=len(q)):
            data = await _get_json(self._url, params, self._timeout)
        items = data.get("items") or []
        out = [
            Candidate(
                title=str(i.get("title") or ""),
                url=str(i.get("link") or ""),
                snippet=str(i.get("snippet") or ""),
            )
            for i in items
            if isinstance(i, dict)
        ]
        logger.info("search.google.results count=%d", len(out))
        return out


class WikipediaSearchProvider:
    """
    Keyword search on the MediaWiki API, then intro extracts of the top pages.
    The extract is used as the snippet.
    """

    def __init__(
        self,
        url: str = settings.WIKIPEDIA_API_URL,
        search_limit: int = 3,
        pages: int = 2,
        keywords: int = 5,
        timeout: float = settings.WIKIPEDIA_TIMEOUT_SECONDS,
    ) -> None:
        self._url = url
        self._search_limit = search_limit
        self._pages = pages
        self._keywords = keywords
        self._timeout = timeout
        self._headers = {"User-Agent": settings.USER_AGENT}

    def _keyword_query(self, text: str) -> str:
        words = [w for w in clean_query(text, len(text)).lower().split() if len(w) > 3]
        return " ".join(words[: self._keywords])

    async def query(self, text: str) -> List[Candidate]:
        q = self._keyword_query(text)
        if not q:
            return []
        with timed(logger, "search.wikipedia"):
            data = await _get_json(
                self._url,
                {
                    "action": "query",
                    "list": "search",
                    "srsearch": q,
                    "format": "json",
                    "srlimit": self._search_limit,
                },
                self._timeout,
                self._headers,
            )
            hits = (data.get("query") or {}).get("search") or []
            out: List[Candidate] = []
            for hit in hits[: self._pages]:
                title = str(hit.get("title") or "")
                if not title:
                    continue
                try:
                    extract = await self._extract(title)
                except httpx.HTTPError as e:
                    logger.warning("search.wikipedia.page.error err=%s", type(e).__name__)
                    continue
                if extract:
                    out.append(
                        Candidate(
                            title=f"{title} - Wikipedia",
                            url="https://en.wikipedia.org/wiki/"
                            + quote(title.replace(" ", "_")),
                            snippet=extract,
                        )
                    )
        logger.info("search.wikipedia.results count=%d", len(out))
        return out

    async def _extract(self, title: str) -> str:
        data = await _get_json(
            self._url,
            {
                "action": "query",
                "prop": "extracts",
                "exintro": 1,
                "explaintext": 1,
                "titles": title,
                "format": "json",
            },
            self._timeout,
            self._headers,
        )
        pages = (data.get("query") or {}).get("pages") or {}
        for page in pages.values():
            if isinstance(page, dict) and page.get("extract"):
                return str(page["extract"])
        return ""


class CompositeSearchProvider:
    """Concatenates results of several providers; a failing provider contributes nothing."""

    def __init__(self, providers: Sequence[SearchProvider]) -> None:
        self._providers = list(providers)

    async def query(self, text: str) -> List[Candidate]:
        out: List[Candidate] = []
        for p in self._providers:
            try:
                out.extend(await p.query(text))
            except Exception as e:
                logger.warning(
                    "search.provider.error provider=%s err=%s",
                    type(p).__name__,
                    type(e).__name__,
                )
        return out


def default_search_provider() -> SearchProvider:
    return CompositeSearchProvider([GoogleSearchProvider(), WikipediaSearchProvider()])
