"""Adapters for filterlog: in-process host, console observer and scenario replay."""
