"""Сервер-ретранслятор для игры в крестики-нолики вдвоём."""

__version__ = "0.1.0"
