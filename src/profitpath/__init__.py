"""ProfitPath: swap and bridge orchestration over a signed DEX aggregator API."""

__version__ = "0.1.0"
