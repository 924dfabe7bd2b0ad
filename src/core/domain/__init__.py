"""Modelos y entidades del dominio.

- Estructuras de datos puras (Pydantic v2): árbol de respuesta y vistas tipadas.
- El dominio no conoce HTTP, CLI ni XML: solo conceptos del tracker.
"""
