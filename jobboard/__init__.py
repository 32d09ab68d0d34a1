"""Job board data layer: companies, jobs and users over parameterized SQL."""

__version__ = "0.1.0"
