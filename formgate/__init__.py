"""Formgate: a browser-facing form API with layered request admission."""
