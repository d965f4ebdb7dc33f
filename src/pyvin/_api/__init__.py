"""Decoder endpoint modules, one per decoder flavor."""
