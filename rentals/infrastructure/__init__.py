"""Adaptadores de infraestructura: almacenamiento en memoria y SQL."""
