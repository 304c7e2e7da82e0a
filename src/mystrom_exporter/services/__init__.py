"""
Services: scrape orchestration and the exporter server
"""

from .scraper import ScrapeOrchestrator, ScrapeStatus, ScrapeError, BadRequestError

__all__ = ['ScrapeOrchestrator', 'ScrapeStatus', 'ScrapeError', 'BadRequestError']
