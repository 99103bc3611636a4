"""spider_scout.crawler: resolver, link extractor, fetcher and crawl scheduler."""
