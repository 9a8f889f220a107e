"""Turno System package.

Daily work-shift ("turno") records behind a JSON REST API: a thin Flask
controller layer over service/repository layers, with interchangeable storage
backends (MySQL, or a read-only JSON snapshot for offline work).
"""
