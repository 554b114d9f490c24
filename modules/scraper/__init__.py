"""
Scraper module.

Extracts the Udyam portal's form structure into the form schema JSON.
"""

from modules.scraper.udyam_scraper import UdyamFormScraper, BASELINE_STEPS, control_key

__all__ = ['UdyamFormScraper', 'BASELINE_STEPS', 'control_key']
