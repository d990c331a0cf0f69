"""Lógica compartida por las variantes del catálogo: validación, mapeo de campos, errores y rutas."""
