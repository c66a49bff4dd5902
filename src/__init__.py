"""Multi-calendar event aggregator with a day-granular cache"""

__version__ = "0.1.0"
