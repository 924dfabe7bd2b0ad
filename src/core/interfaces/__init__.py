"""Interfaces/abstracciones del Core.

- Define contratos (Protocol) que implementan adaptadores concretos.
- El Core depende de abstracciones: el transporte HTTP se puede sustituir en tests.
"""
