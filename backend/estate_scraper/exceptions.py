"""Error taxonomy shared by dispatch, extraction and job orchestration."""


class ScrapeError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(ScrapeError):
    """Source or strategy setup is wrong; replaying won't help until it is fixed."""


class ScraperNotFoundError(ConfigurationError):
    def __init__(self, source_name: str):
        super().__init__(f"No scraper found for source: {source_name}")
        self.source_name = source_name


class AmbiguousScraperError(ConfigurationError):
    def __init__(self, source_name: str, candidates: list[str]):
        super().__init__(
            f"Multiple scrapers match source {source_name}: {', '.join(candidates)}"
        )
        self.source_name = source_name
        self.candidates = candidates


class SourceNotFoundError(ConfigurationError):
    def __init__(self, source_id: int):
        super().__init__(f"Source not found: {source_id}")
        self.source_id = source_id


class SourceDisabledError(ConfigurationError):
    def __init__(self, source_name: str):
        super().__init__(f"Source is disabled: {source_name}")
        self.source_name = source_name


class JobNotFoundError(ConfigurationError):
    def __init__(self, job_id: int):
        super().__init__(f"Scraping job not found: {job_id}")
        self.job_id = job_id


class ExtractionError(ScrapeError):
    """Fetching or parsing a source failed. Transient by default."""


class InvalidTransitionError(ScrapeError):
    def __init__(self, job_id: int, current: str, target: str):
        super().__init__(f"Scraping job {job_id} cannot move from {current} to {target}")
        self.job_id = job_id
        self.current = current
        self.target = target
