"""poolprice - token prices derived from DEX pool reserves."""

__version__ = "0.1.0"
