"""
report-runner - export relational query results to delimited text files,
one running instance per report job.

Layout:
- report_runner.core: errors, results, logging, settings, protocols
- report_runner.reporting: concurrency coordinator, formatter, writers, runner
- report_runner.cli: ``report-runner`` command line
"""

__version__ = "0.1.0"
