"""Relay de WhatsApp que clasifica mensajes reenviados con Gemini."""

__version__ = "0.1.0"
