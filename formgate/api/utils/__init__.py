"""API utilities: orjson responses, envelopes and request helpers."""
