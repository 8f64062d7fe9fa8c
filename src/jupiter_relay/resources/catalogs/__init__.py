"""Packaged operation catalogs, one YAML document per adapter family."""
