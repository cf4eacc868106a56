"""
Source adapters for the clipping report.

Each adapter fetches one report section (a feed, a scraped page, or a
search query) and returns displayable text.
"""
