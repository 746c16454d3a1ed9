"""
txgate Command Line Interface

Validate transactions against a UTXO pool document, inspect signing data,
and manage validator configuration.
"""

__version__ = "0.1.0"
