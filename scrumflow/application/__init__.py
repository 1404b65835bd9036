"""Application layer: DTOs, interfaces, and pure services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, engine).
"""
