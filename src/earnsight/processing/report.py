"""Earnings report analysis.

Finds the latest earnings press release for a ticker, downloads it, strips the
HTML and asks an LLM for a structured summary.

Pipeline:
    find_report_url (Serper search)
      -> download (HTML only; PDFs are rejected)
      -> extract_text_from_html
      -> ReportAnalyzer.analyze (PydanticAI agent)
"""

from __future__ import annotations

import html
import re
from datetime import datetime

import httpx
import orjson
from pydantic_ai import Agent

from earnsight.config import get_settings
from earnsight.core.constants import (
    REPORT_MAX_PROMPT_CHARS,
    REPORT_SEARCH_AVOID,
    REPORT_SEARCH_PREFER,
)
from earnsight.core.exceptions import (
    ReportContentError,
    ReportNotFoundError,
    UnsupportedDocumentError,
)
from earnsight.core.logging import get_logger
from earnsight.models import ReportAnalysis, ReportSummary
from earnsight.processing.llm import create_model
from earnsight.processing.mock import mock_report_analysis

logger = get_logger(__name__)

_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")

REPORT_SYSTEM_PROMPT = """You are an equity analyst summarizing a quarterly earnings press release.

Given the raw text of the release and the company's ticker:
- Write a short, factual summary of the quarter (revenue, EPS, margins, guidance)
- Judge the overall sentiment relative to what the release says about expectations
- List 3-6 key takeaways, each a single short sentence with numbers where available

Only use facts present in the text. If a figure is not stated, do not invent it."""


def current_quarter(now: datetime) -> str:
    """Fiscal quarter most likely being reported around ``now``.

    Rough calendar-quarter approximation: results for a quarter arrive in the
    following quarter, so January-March reports Q4 of the previous year.
    """
    month = now.month
    if month <= 3:
        return f"Q4 {now.year - 1}"
    if month <= 6:
        return f"Q1 {now.year}"
    if month <= 9:
        return f"Q2 {now.year}"
    return f"Q3 {now.year}"


def extract_text_from_html(raw_html: str) -> str:
    """Drop scripts, styles and tags; collapse whitespace."""
    text = _SCRIPT_RE.sub("", raw_html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text)
    return _SPACE_RE.sub(" ", text).strip()


def pick_report_link(links: list[str]) -> str | None:
    """Prefer investor-relations/press links, skipping paywalled aggregators."""
    if not links:
        return None
    for link in links:
        lowered = link.lower()
        if any(p in lowered for p in REPORT_SEARCH_PREFER) and not any(
            a in lowered for a in REPORT_SEARCH_AVOID
        ):
            return link
    return links[0]


def is_pdf(url: str, content_type: str) -> bool:
    return "application/pdf" in content_type.lower() or url.lower().endswith(".pdf")


def create_report_agent() -> Agent[None, ReportSummary]:
    """Create a PydanticAI agent that returns a ReportSummary."""
    agent: Agent[None, ReportSummary] = Agent(
        create_model(),
        output_type=ReportSummary,
        system_prompt=REPORT_SYSTEM_PROMPT,
    )
    return agent


class ReportAnalyzer:
    """Search, download and summarize earnings releases.

    Usage:
        analyzer = ReportAnalyzer()
        analysis = await analyzer.analyze_earnings_report("AAPL")
        await analyzer.close()
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self._http_client = http_client
        self._agent: Agent[None, ReportSummary] | None = None

    @property
    def agent(self) -> Agent[None, ReportSummary]:
        """Get or create the summarization agent."""
        if self._agent is None:
            self._agent = create_report_agent()
        return self._agent

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=30.0,
                follow_redirects=True,
                headers={"User-Agent": "Mozilla/5.0 (compatible; Earnsight/1.0)"},
            )
        return self._http_client

    async def find_report_url(self, symbol: str, quarter: str) -> str | None:
        """Search for the press release. Returns None without a key or on failure."""
        settings = get_settings()
        if not settings.serper_api_key:
            logger.warning("SERPER_API_KEY not configured, skipping report search")
            return None

        query = f"{symbol} {quarter} earnings press release investor relations"
        client = self._get_http_client()
        try:
            resp = await client.post(
                settings.serper_url,
                headers={
                    "X-API-KEY": settings.serper_api_key.get_secret_value(),
                    "Content-Type": "application/json",
                },
                content=orjson.dumps({"q": query}),
            )
            resp.raise_for_status()
            data = orjson.loads(resp.content)
        except (httpx.HTTPError, orjson.JSONDecodeError) as e:
            logger.warning("Report search failed", symbol=symbol, error=str(e))
            return None

        organic = data.get("organic") if isinstance(data, dict) else None
        links = [r["link"] for r in organic or [] if isinstance(r, dict) and r.get("link")]
        return pick_report_link(links)

    async def download_text(self, url: str) -> str:
        """Download a report and return its visible text.

        Raises:
            UnsupportedDocumentError: the report is a PDF
            httpx.HTTPError: download failed
        """
        if url.lower().endswith(".pdf"):
            raise UnsupportedDocumentError(
                "PDF reports are not supported yet. Please look for the HTML press release."
            )
        client = self._get_http_client()
        resp = await client.get(url)
        resp.raise_for_status()
        if is_pdf(url, resp.headers.get("content-type", "")):
            raise UnsupportedDocumentError(
                "PDF reports are not supported yet. Please look for the HTML press release."
            )
        return extract_text_from_html(resp.text)

    async def summarize(self, text: str, symbol: str) -> ReportSummary:
        """Run the LLM over the report text."""
        excerpt = text[:REPORT_MAX_PROMPT_CHARS]
        prompt = f"Ticker: {symbol.upper()}\n\nEarnings release text:\n{excerpt}"
        result = await self.agent.run(prompt)
        return result.output

    async def analyze_earnings_report(
        self,
        symbol: str,
        now: datetime | None = None,
    ) -> ReportAnalysis:
        """Find, download and summarize the current quarter's report.

        Raises:
            ReportNotFoundError: no report URL and mock mode is off
            UnsupportedDocumentError: the report is a PDF
            ReportContentError: extracted text is too short to analyze
        """
        settings = get_settings()
        symbol = symbol.upper()
        quarter = current_quarter(now or datetime.now())

        logger.info("Searching for earnings report", symbol=symbol, quarter=quarter)
        url = await self.find_report_url(symbol, quarter)
        if url is None:
            if settings.mock_mode:
                return mock_report_analysis(symbol, quarter)
            raise ReportNotFoundError(f"Could not find earnings report for {symbol} {quarter}")

        text = await self.download_text(url)
        if len(text) < settings.report_min_chars:
            raise ReportContentError("Downloaded content seems too short or invalid.")

        summary = await self.summarize(text, symbol)
        logger.info("Analyzed earnings report", symbol=symbol, url=url, sentiment=summary.sentiment)
        return ReportAnalysis(
            summary=summary.summary,
            sentiment=summary.sentiment,
            key_takeaways=tuple(summary.key_takeaways),
            report_url=url,
            quarter=quarter,
        )

    async def close(self) -> None:
        """Clean up resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("ReportAnalyzer closed")
