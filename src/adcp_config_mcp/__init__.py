"""ADCP command model, CEPO configuration allocation and response decoding."""
