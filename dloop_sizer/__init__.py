"""Flash-loan sizing and swap-accounting engine for leveraged dLOOP vaults."""

__version__ = "0.1.0"
