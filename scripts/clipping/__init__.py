"""
Legal Clipping - daily legal/regulatory intelligence report.

Aggregates procurement law news from tribunal feeds, scraped pages and a
search API into one report and delivers it by email.
"""

__version__ = "14.0.0"
