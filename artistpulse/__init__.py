"""ArtistPulse core package.

Resilient structured-data extraction from dynamic artist pages:
- locators: ordered fallback locator chains and the activation retry policy
- extractor: field specs and the total field extractor
- browser: Playwright session driver (one browser, one page)
- scraper: per-target strategies (artist profile pages)
- orchestrator: serial batch processing with failure isolation
- aggregator: outcome accumulation and timing
- reporter: JSON and Excel exports
- logger: structured loguru configuration
- exceptions: error hierarchy by scope
"""

__version__ = "1.0.0"
