# spider_scout/sink/json_sink.py

"""
JSON report of a crawl.

Pages are collected while the crawl runs and written as one file when the
sink is closed.
"""
import json
from pathlib import Path
from typing import Any, Dict, List

from spider_scout.crawler.models import FetchedPage
from spider_scout.exceptions import SinkWriteFailure
from spider_scout.logger import logger


class JsonReportSink:
    """
    Collects fetched pages and saves them as ``{"pages": [...]}``.

    :param output_path: path of the JSON file
    :param include_content: keep raw page bodies in the report

    Example:
    ```python
    sink = JsonReportSink('reports/crawl.json')
    summary = await CrawlScheduler(fetcher, sink).run('https://example.com/')
    print(f"JSON report saved to: {sink.path}")
    ```
    """

    def __init__(self, output_path: Path | str, *, include_content: bool = True) -> None:
        self.path = Path(output_path)
        self.include_content = include_content
        self._documents: List[Dict[str, Any]] = []

    async def write(self, page: FetchedPage) -> None:
        document = page.to_document()
        if not self.include_content:
            document.pop("content")
        self._documents.append(document)

    async def close(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # write with indentation and unicode kept
            with self.path.open('w', encoding='utf-8') as f:
                json.dump({'pages': self._documents}, f, ensure_ascii=False, indent=2)
        except OSError as exc:
            raise SinkWriteFailure(str(self.path), exc) from exc
        logger.info("JSON report: %s (%d pages)", self.path, len(self._documents))
