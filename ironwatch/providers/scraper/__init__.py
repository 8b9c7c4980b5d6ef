"""Team listing scrapers."""

from ironwatch.providers.scraper.ithome_scraper import IThomeTeamScraper

__all__ = ["IThomeTeamScraper"]
