"""Kernel: diagnostic model, JavaScript front end and the validation stages."""
