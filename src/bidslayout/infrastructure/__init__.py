"""
Infrastructure layer package.

This package contains modules for interacting with the filesystem:
- Directory listing and path utilities
- JSON/TSV decoding
- Sidecar resolution
- Modality scanners and dataset loading
- Logging configuration
"""
