"""Core domain package for filterlog.

Core contains the session registry, event buffers, enrichment and observer
gating without any host- or engine-specific code, keeping the log portable.
"""
