"""Boolean circuits on pluggable backends, Bristol circuit files, AES-128-CTR and byte channels."""

__version__ = "0.1.0"
__all__ = ["execution", "bit", "integer", "circuit_file", "aes_ctr", "channel", "memio", "netio"]